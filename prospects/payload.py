"""Form-urlencoded body and headers for a prospect submission."""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import TYPE_CHECKING, Iterable, List, Tuple
from urllib.parse import quote

from .errors import ValidationError
from .record import LeadSource, is_present

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .environment import Environment
    from .record import DateLike, ProspectRecord

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Characters left alone by encodeURIComponent.
_UNRESERVED = "-_.!~*'()"

Pair = Tuple[str, str]


def encode_component(value: str) -> str:
    return quote(value, safe=_UNRESERVED)


def encode_pairs(pairs: Iterable[Pair]) -> str:
    return "&".join(f"{encode_component(name)}={encode_component(value)}" for name, value in pairs)


def _parse_date(value: str) -> datetime:
    cleaned = value.strip()
    if cleaned.endswith(("Z", "z")):
        cleaned = f"{cleaned[:-1]}+00:00"
    try:
        return datetime.fromisoformat(cleaned)
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(cleaned), time())
    except ValueError as exc:
        raise ValidationError(f"Invalid date of birth {value!r}", missing=("date_of_birth",)) from exc


def format_date_of_birth(value: "DateLike") -> str:
    """Render a date of birth as a UTC instant with millisecond precision.

    Calendar dates and naive datetimes are taken as UTC.
    """

    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time())
    else:
        moment = _parse_date(str(value))

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_pairs(record: "ProspectRecord", environment: "Environment | None" = None) -> List[Pair]:
    pairs: List[Pair] = [
        ("leadid", record.id),
        ("appname", record.application_name or ""),
        ("leadsource", LeadSource(record.lead_source).value),
    ]

    def _add(name: str, value: str | None) -> None:
        if is_present(value):
            pairs.append((name, str(value)))

    _add("email", record.email)
    _add("firstname", record.first_name)
    _add("lastname", record.last_name)
    _add("feedback", record.feedback_text)
    _add("phonenumber", record.phone_number)
    if is_present(record.date_of_birth):
        pairs.append(("dob", format_date_of_birth(record.date_of_birth)))
    _add("gender", record.gender)
    _add("zipcode", record.zip_code)

    language = record.language
    if not is_present(language) and environment is not None:
        language = environment.current_locale()
    _add("language", language)

    referrer = record.page_referrer
    if not is_present(referrer) and environment is not None:
        referrer = environment.referring_page()
    _add("pagereferrer", referrer)

    _add("latitude", record.latitude)
    _add("longitude", record.longitude)
    _add("miscellaneous", record.miscellaneous)

    for name, value in record.extension_fields.items():
        pairs.append((name, "" if value is None else str(value)))
    return pairs


def build_body(record: "ProspectRecord", environment: "Environment | None" = None) -> str:
    return encode_pairs(build_pairs(record, environment))


def build_headers(record: "ProspectRecord") -> dict[str, str]:
    headers = {"Content-Type": FORM_CONTENT_TYPE}
    headers.update(record.extension_headers)
    return headers


__all__ = [
    "FORM_CONTENT_TYPE",
    "encode_component",
    "encode_pairs",
    "format_date_of_birth",
    "build_pairs",
    "build_body",
    "build_headers",
]
