"""Lead capture records and their submission to a prospects endpoint."""

from .environment import Environment, StaticEnvironment, SystemEnvironment
from .errors import (
    ProspectError,
    ResponseParseError,
    ServerError,
    ServiceUnavailable,
    StorageUnavailable,
    ValidationError,
)
from .forms import FormSubmission, prospect_from_form
from .identity import (
    FileStore,
    IdentityProvider,
    MemoryStore,
    RedisStore,
    get_identity_provider,
    get_or_create_id,
    reset_identity_provider,
    set_identity_provider,
)
from .record import LeadSource, ProspectRecord
from .results import Failure, Outcome, SubmitResult, Success

__all__ = [
    "Environment",
    "StaticEnvironment",
    "SystemEnvironment",
    "ProspectError",
    "ResponseParseError",
    "ServerError",
    "ServiceUnavailable",
    "StorageUnavailable",
    "ValidationError",
    "FormSubmission",
    "prospect_from_form",
    "FileStore",
    "IdentityProvider",
    "MemoryStore",
    "RedisStore",
    "get_identity_provider",
    "get_or_create_id",
    "reset_identity_provider",
    "set_identity_provider",
    "LeadSource",
    "ProspectRecord",
    "Failure",
    "Outcome",
    "SubmitResult",
    "Success",
]
