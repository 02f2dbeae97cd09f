"""
Command line access to prospect submission.

Usage:
    python -m prospects id
    python -m prospects submit --url https://host/prospects --app bronxwood --email a@b.com
    python -m prospects submit --lead-source extended --field middlename=Q --header X-Token=abc
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import prospects_config
from .errors import ValidationError
from .identity import get_or_create_id
from .record import LeadSource, ProspectRecord

_LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def _init_logging() -> None:
    level_name = prospects_config().log_level
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)

    logging.getLogger("prospects").setLevel(level)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def _split_pairs(raw_items: Optional[Iterable[str]], option: str) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for item in raw_items or ():
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise argparse.ArgumentTypeError(f"{option} expects NAME=VALUE, got {item!r}")
        pairs.append((name.strip(), value))
    return pairs


def build_record(args: argparse.Namespace) -> ProspectRecord:
    config = prospects_config()
    record = ProspectRecord(
        target_url=args.url or config.target_url or None,
        application_name=args.app or config.application_name or None,
        email=args.email,
        phone_number=args.phone,
        first_name=args.first_name,
        last_name=args.last_name,
        feedback_text=args.feedback,
        date_of_birth=args.dob,
        gender=args.gender,
        zip_code=args.zip,
        language=args.language,
        page_referrer=args.referrer,
        latitude=args.latitude,
        longitude=args.longitude,
        miscellaneous=args.misc,
    )
    if args.lead_source:
        record.set_lead_source(args.lead_source)
    for name, value in _split_pairs(args.field, "--field"):
        record.add_extension_field(name, value)
    for name, value in _split_pairs(args.header, "--header"):
        record.add_extension_header(name, value)
    return record


def cmd_id(_: argparse.Namespace) -> int:
    print(get_or_create_id())
    return 0


def cmd_submit(args: argparse.Namespace) -> int:
    try:
        record = build_record(args)
    except argparse.ArgumentTypeError as exc:
        print(f"[prospects] {exc}", file=sys.stderr)
        return 2
    try:
        result = record.submit()
    except ValidationError as exc:
        print(f"[prospects] {exc}", file=sys.stderr)
        return 2
    print(
        json.dumps(
            {"ok": result.ok, "status": result.status_code, "body": result.body},
            ensure_ascii=False,
        )
    )
    return 0 if result.ok else 1


COMMANDS: Dict[str, Callable[[argparse.Namespace], int]] = {
    "id": cmd_id,
    "submit": cmd_submit,
}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="prospects", description="Submit prospects to a lead endpoint")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("id", help="Print this device's prospect identifier")

    submit = subparsers.add_parser("submit", help="Post a single prospect")
    submit.add_argument("--url", help="Submission endpoint (default: PROSPECTS_URL)")
    submit.add_argument("--app", help="Application name (default: PROSPECTS_APP_NAME)")
    submit.add_argument("--lead-source", choices=[source.value for source in LeadSource])
    submit.add_argument("--email")
    submit.add_argument("--phone")
    submit.add_argument("--first-name")
    submit.add_argument("--last-name")
    submit.add_argument("--feedback")
    submit.add_argument("--dob", help="Date of birth, ISO-8601")
    submit.add_argument("--gender")
    submit.add_argument("--zip")
    submit.add_argument("--language")
    submit.add_argument("--referrer")
    submit.add_argument("--latitude")
    submit.add_argument("--longitude")
    submit.add_argument("--misc", help="Opaque miscellaneous payload, usually JSON")
    submit.add_argument("--field", action="append", metavar="NAME=VALUE", help="Extra form field")
    submit.add_argument("--header", action="append", metavar="NAME=VALUE", help="Extra request header")

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    _init_logging()
    handler = COMMANDS.get(args.command)
    if handler is None:
        print(f"[prospects] unsupported command: {args.command}", file=sys.stderr)
        return 1
    return handler(args)


__all__ = ["main", "parse_args", "build_record"]
