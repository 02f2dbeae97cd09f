from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from .errors import ValidationError
from .identity import IdentityProvider, get_identity_provider

if TYPE_CHECKING:  # pragma: no cover - typing only
    from concurrent.futures import Future

    import httpx

    from .environment import Environment
    from .results import SubmitResult


class LeadSource(str, Enum):
    LANDING = "landing"
    EMAIL = "email"
    PHONE = "phone"
    FEEDBACK = "feedback"
    EXTENDED = "extended"
    PINTEREST = "pinterest"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    GOOGLE = "google"
    SNAPCHAT = "snapchat"
    YOUTUBE = "youtube"
    POPUP = "popup"

    def __str__(self) -> str:
        return self.value


DateLike = Union[date, datetime, str]
Callback = Callable[[Any, int, "ProspectRecord"], Any]


def is_present(value: Any) -> bool:
    """Single emptiness rule for every typed field."""

    if value is None:
        return False
    if isinstance(value, str):
        return len(value) > 0
    return True


def _valid_date(value: Any) -> bool:
    from .payload import format_date_of_birth

    try:
        format_date_of_birth(value)
    except ValidationError:
        return False
    return True


def _channel_flag(source: LeadSource) -> property:
    def getter(self: "ProspectRecord") -> bool:
        return self.lead_source == source

    def setter(self: "ProspectRecord", enabled: bool) -> None:
        if enabled:
            self.set_lead_source(source)

    return property(getter, setter, doc=f"True when the lead came through {source.value}.")


@dataclass(eq=False)
class ProspectRecord:
    """A single lead captured from a form, ready to be posted to ``target_url``."""

    target_url: Optional[str] = None
    application_name: Optional[str] = None
    lead_source: LeadSource = LeadSource.LANDING
    email: Optional[str] = None
    phone_number: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    feedback_text: Optional[str] = None
    date_of_birth: Optional[DateLike] = None
    gender: Optional[str] = None
    zip_code: Optional[str] = None
    language: Optional[str] = None
    page_referrer: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    miscellaneous: Optional[str] = None
    extension_fields: dict[str, str] = field(default_factory=dict)
    extension_headers: dict[str, str] = field(default_factory=dict)
    identity: InitVar[Optional[IdentityProvider]] = None
    _id: str = field(init=False, repr=False, default="")

    def __post_init__(self, identity: Optional[IdentityProvider]) -> None:
        provider = identity if identity is not None else get_identity_provider()
        self._id = provider.get_or_create_id()
        self.lead_source = LeadSource(self.lead_source)

    @property
    def id(self) -> str:
        return self._id

    def set_lead_source(self, source: LeadSource | str) -> None:
        self.lead_source = LeadSource(source)

    pinterest = _channel_flag(LeadSource.PINTEREST)
    facebook = _channel_flag(LeadSource.FACEBOOK)
    instagram = _channel_flag(LeadSource.INSTAGRAM)
    twitter = _channel_flag(LeadSource.TWITTER)
    google = _channel_flag(LeadSource.GOOGLE)
    snapchat = _channel_flag(LeadSource.SNAPCHAT)
    youtube = _channel_flag(LeadSource.YOUTUBE)
    popup = _channel_flag(LeadSource.POPUP)
    extended = _channel_flag(LeadSource.EXTENDED)

    def add_extension_field(self, name: str, value: str) -> None:
        self.extension_fields[name] = value

    def add_extension_header(self, name: str, value: str) -> None:
        self.extension_headers[name] = value

    def missing_fields(self) -> list[str]:
        """Names of the fields that keep this record from being submitted."""

        missing = [
            name
            for name, value in (
                ("target_url", self.target_url),
                ("id", self._id),
                ("application_name", self.application_name),
            )
            if not is_present(value)
        ]

        source = self.lead_source
        if source == LeadSource.LANDING:
            if not (is_present(self.email) or is_present(self.phone_number)):
                missing.append("email|phone_number")
        elif source == LeadSource.EMAIL:
            if not is_present(self.email):
                missing.append("email")
        elif source == LeadSource.PHONE:
            if not is_present(self.phone_number):
                missing.append("phone_number")
        elif source == LeadSource.FEEDBACK:
            if not is_present(self.feedback_text):
                missing.append("feedback_text")

        if is_present(self.date_of_birth) and not _valid_date(self.date_of_birth):
            missing.append("date_of_birth")
        return missing

    def is_ready(self) -> bool:
        return not self.missing_fields()

    def submit(
        self,
        on_success: Callback | None = None,
        on_error: Callback | None = None,
        *,
        client: "httpx.Client | None" = None,
        environment: "Environment | None" = None,
    ) -> "SubmitResult | Future[SubmitResult]":
        """Post the record.

        Without callbacks the call blocks and returns the outcome. With at
        least one callback the request runs in the background; the returned
        future resolves to the same outcome that was handed to the callback.
        """

        from .client import submit_prospect

        return submit_prospect(self, on_success, on_error, client=client, environment=environment)

    async def submit_async(
        self,
        on_success: Callback | None = None,
        on_error: Callback | None = None,
        *,
        client: "httpx.AsyncClient | None" = None,
        environment: "Environment | None" = None,
    ) -> "SubmitResult":
        from .client import submit_prospect_async

        return await submit_prospect_async(
            self, on_success, on_error, client=client, environment=environment
        )


__all__ = ["LeadSource", "ProspectRecord", "is_present", "Callback"]
