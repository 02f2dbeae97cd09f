from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from urllib.parse import parse_qsl, unquote

import pytest

from prospects.environment import StaticEnvironment
from prospects.errors import ValidationError
from prospects.payload import (
    FORM_CONTENT_TYPE,
    build_body,
    build_headers,
    build_pairs,
    encode_component,
    format_date_of_birth,
)
from prospects.record import LeadSource, ProspectRecord

from conftest import FIXED_ID


def _record(**fields) -> ProspectRecord:
    fields.setdefault("target_url", "https://host/p")
    fields.setdefault("application_name", "bronxwood")
    return ProspectRecord(**fields)


def test_minimal_landing_body() -> None:
    record = _record(email="a@b.com")
    assert record.is_ready()
    assert build_body(record) == f"leadid={FIXED_ID}&appname=bronxwood&leadsource=landing&email=a%40b.com"


def test_field_order_follows_precedence() -> None:
    record = _record(
        email="a@b.com",
        first_name="Raul",
        last_name="Ferris",
        feedback_text="hi",
        phone_number="212-555-1212",
        date_of_birth=date(1990, 5, 1),
        gender="male",
        zip_code="10467",
        language="en-US",
        page_referrer="https://ads.example/landing",
        latitude="40.87",
        longitude="-73.86",
        miscellaneous='{"contest":{"eligible":true}}',
    )
    record.add_extension_field("middlename", "Q")
    record.add_extension_field("campaign", "spring")
    names = [name for name, _ in build_pairs(record)]
    assert names == [
        "leadid",
        "appname",
        "leadsource",
        "email",
        "firstname",
        "lastname",
        "feedback",
        "phonenumber",
        "dob",
        "gender",
        "zipcode",
        "language",
        "pagereferrer",
        "latitude",
        "longitude",
        "miscellaneous",
        "middlename",
        "campaign",
    ]


def test_empty_optional_fields_are_skipped() -> None:
    record = _record(email="a@b.com", first_name="", last_name=None, gender="")
    names = [name for name, _ in build_pairs(record)]
    assert names == ["leadid", "appname", "leadsource", "email"]


def test_channel_flags_are_not_sent_as_pairs() -> None:
    record = _record()
    record.instagram = True
    pairs = build_pairs(record)
    assert ("leadsource", "instagram") in pairs
    assert all(name != "instagram" for name, _ in pairs)


def test_serialization_is_deterministic() -> None:
    record = _record(email="a@b.com", phone_number="+1 (212) 555-1212", zip_code="10467")
    record.add_extension_field("utm_source", "newsletter")
    assert build_body(record) == build_body(record)


@pytest.mark.parametrize(
    "value",
    [
        "a&b=c",
        "two words",
        "100% sure?",
        "Zoë Ångström",
        "名前",
        "emoji 🎉 + plus",
        "-_.!~*'()",
        '{"contest": {"eligible": true, "item": "tv"}}',
    ],
)
def test_encoded_values_decode_to_original(value: str) -> None:
    record = _record(email="a@b.com", first_name=value)
    record.add_extension_field("note", value)
    pairs = dict(parse_qsl(build_body(record), keep_blank_values=True))
    assert pairs["firstname"] == value
    assert pairs["note"] == value
    assert unquote(encode_component(value)) == value


def test_encoding_matches_uri_component_rules() -> None:
    assert encode_component("a b") == "a%20b"
    assert encode_component("a+b") == "a%2Bb"
    assert encode_component("x@y.com") == "x%40y.com"
    assert encode_component("it's (ok)!") == "it's%20(ok)!"
    assert encode_component("~tilde*") == "~tilde*"


@pytest.mark.parametrize(
    "value,expected",
    [
        (date(1990, 5, 1), "1990-05-01T00:00:00.000Z"),
        ("1990-05-01", "1990-05-01T00:00:00.000Z"),
        ("1990-05-01T10:30:00Z", "1990-05-01T10:30:00.000Z"),
        ("1990-05-01T10:30:00.123456+02:00", "1990-05-01T08:30:00.123Z"),
        (datetime(1990, 5, 1, 23, 15), "1990-05-01T23:15:00.000Z"),
        (datetime(1990, 5, 1, 1, 0, tzinfo=timezone(timedelta(hours=-5))), "1990-05-01T06:00:00.000Z"),
    ],
)
def test_date_of_birth_normalization(value, expected: str) -> None:
    assert format_date_of_birth(value) == expected


def test_invalid_date_of_birth_is_a_validation_error() -> None:
    record = _record(email="a@b.com", date_of_birth="next tuesday")
    with pytest.raises(ValidationError) as excinfo:
        build_body(record)
    assert excinfo.value.missing == ("date_of_birth",)


def test_ambient_language_and_referrer_fill_unset_fields() -> None:
    env = StaticEnvironment(locale="es-MX", referrer="https://search.example/?q=lamps")
    record = _record(email="a@b.com")
    pairs = dict(build_pairs(record, env))
    assert pairs["language"] == "es-MX"
    assert pairs["pagereferrer"] == "https://search.example/?q=lamps"


def test_explicit_language_and_referrer_win() -> None:
    env = StaticEnvironment(locale="es-MX", referrer="https://search.example/")
    record = _record(email="a@b.com", language="fr-FR", page_referrer="https://partner.example/")
    pairs = dict(build_pairs(record, env))
    assert pairs["language"] == "fr-FR"
    assert pairs["pagereferrer"] == "https://partner.example/"


def test_missing_ambient_values_are_omitted() -> None:
    record = _record(email="a@b.com")
    names = [name for name, _ in build_pairs(record, StaticEnvironment())]
    assert "language" not in names
    assert "pagereferrer" not in names


def test_headers_include_content_type_and_extensions() -> None:
    record = _record(lead_source=LeadSource.EXTENDED)
    record.add_extension_header("X-Api-Key", "secret")
    assert build_headers(record) == {"Content-Type": FORM_CONTENT_TYPE, "X-Api-Key": "secret"}


def test_extension_field_names_are_encoded_like_values() -> None:
    record = _record(email="a@b.com")
    record.add_extension_field("utm source&x", "a=b")
    assert build_body(record).endswith("&utm%20source%26x=a%3Db")
