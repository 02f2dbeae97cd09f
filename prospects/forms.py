"""Turn submitted landing-page form values into a :class:`ProspectRecord`."""
from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .environment import Environment
from .identity import IdentityProvider
from .record import LeadSource, ProspectRecord

_CHANNEL_BOXES = (
    LeadSource.PINTEREST,
    LeadSource.FACEBOOK,
    LeadSource.INSTAGRAM,
    LeadSource.TWITTER,
    LeadSource.GOOGLE,
    LeadSource.SNAPCHAT,
    LeadSource.YOUTUBE,
    LeadSource.POPUP,
)


class _AliasModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FormSubmission(_AliasModel):
    """Raw values of a prospect form keyed by input name."""

    app_name: Optional[str] = Field(default=None, alias="appname")
    first_name: Optional[str] = Field(default=None, alias="firstname")
    middle_name: Optional[str] = Field(default=None, alias="middlename")
    last_name: Optional[str] = Field(default=None, alias="lastname")
    email: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phonenumber")
    lead_source: Optional[LeadSource] = Field(default=None, alias="leadsource")
    pinterest: bool = False
    facebook: bool = False
    instagram: bool = False
    twitter: bool = False
    google: bool = False
    snapchat: bool = False
    youtube: bool = False
    popup: bool = False
    gender: Optional[str] = None
    feedback: Optional[str] = None
    dob: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    contest: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_values(cls, values: Any) -> Any:
        if not isinstance(values, Mapping):
            return values
        data: dict[str, Any] = {}
        for key, value in values.items():
            if isinstance(value, (list, tuple)):
                # Multi-valued inputs keep the last value, like a checked radio.
                value = value[-1] if value else None
            if isinstance(value, str):
                value = value.strip() or None
            data[key] = value
        return data

    @field_validator(*(source.value for source in _CHANNEL_BOXES), mode="before")
    @classmethod
    def _unchecked(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coordinate_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def contest_document(self) -> str | None:
        if not self.contest:
            return None
        return json.dumps({"contest": {"eligible": True, "item": self.contest}})


def prospect_from_form(
    form: Mapping[str, Any] | FormSubmission,
    *,
    url: str,
    environment: Environment | None = None,
    geolocate: bool = False,
    identity: IdentityProvider | None = None,
) -> ProspectRecord:
    """Build a record the way the landing page form handler does.

    Form leads start out as ``extended``. An explicit ``leadsource`` value
    replaces that, checked channel boxes then override it, and the presence of
    a ``feedback`` input marks the record as a feedback lead.
    """

    submission = form if isinstance(form, FormSubmission) else FormSubmission.model_validate(dict(form))

    record = ProspectRecord(target_url=url, identity=identity)
    record.extended = True
    if submission.lead_source is not None:
        record.set_lead_source(submission.lead_source)

    record.application_name = submission.app_name
    record.first_name = submission.first_name
    if submission.middle_name:
        record.add_extension_field("middlename", submission.middle_name)
    record.last_name = submission.last_name
    record.email = submission.email
    record.phone_number = submission.phone_number

    for source in _CHANNEL_BOXES:
        setattr(record, source.value, getattr(submission, source.value))

    record.gender = submission.gender

    if "feedback" in submission.model_fields_set:
        record.feedback_text = submission.feedback
        record.set_lead_source(LeadSource.FEEDBACK)

    record.date_of_birth = submission.dob
    record.latitude = submission.latitude
    record.longitude = submission.longitude

    if geolocate and environment is not None and not (record.latitude and record.longitude):
        position = environment.current_position()
        if position is not None:
            record.latitude, record.longitude = (str(part) for part in position)

    misc = submission.contest_document()
    if misc:
        record.miscellaneous = misc
    return record


__all__ = ["FormSubmission", "prospect_from_form"]
