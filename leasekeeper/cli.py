"""
leasekeeper.cli
===============

Command-line front end over the SQLite-backed services.

Examples
--------
$ python -m leasekeeper.cli init flat-block-1 --user alice
$ python -m leasekeeper.cli overview flat-block-1
$ python -m leasekeeper.cli complete <milestone-id> --date 2024-01-15
$ python -m leasekeeper.cli deadlines flat-block-1 --days 60
$ python -m leasekeeper.cli render rtm-claim-notice --var buildingName="Harbour House" ...
$ python -m leasekeeper.cli eligibility --flats 12 --residential 12 --lease-years 99 --participating 8
$ python -m leasekeeper.cli serve --port 8000
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from datetime import date
from typing import Any, List, Optional

from .db import create_all
from .eligibility import EligibilityData, check_eligibility
from .errors import TemplateValidationError
from .settings import API_HOST, API_PORT, settings
from .store_db import DBRepository
from .template_library import LEGAL_TEMPLATES, get_template_by_id
from .templates import generate
from .timeline import TimelineService

logger = logging.getLogger(__name__)


def _dump(obj: Any) -> str:
    if is_dataclass(obj):
        obj = asdict(obj)
    elif isinstance(obj, list):
        obj = [asdict(o) if is_dataclass(o) else o for o in obj]
    return json.dumps(obj, indent=2, default=str)


def _iso(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r} (expected YYYY-MM-DD)")


def _fail(result) -> int:
    print(f"⛔ {result.kind}: {result.error}", file=sys.stderr)
    return 1


# ---------------------------------------------------------------------
# Sub-commands
# ---------------------------------------------------------------------
def cmd_init(args, svc: TimelineService) -> int:
    result = svc.initialize(args.building, args.user)
    if not result.success:
        return _fail(result)
    if result.data["created"]:
        print(f"✅ timeline created for {args.building}")
    else:
        print(f"timeline for {args.building} already exists")
    listing = svc.get_milestones(args.building)
    if not listing.success:
        return _fail(listing)
    for ms in listing.data:
        print(f"  {ms.milestone_order}. {ms.title:<28} {ms.status:<12} {ms.id}")
    return 0


def cmd_complete(args, svc: TimelineService) -> int:
    result = svc.complete_milestone(args.milestone, args.date or date.today(), notes=args.notes)
    if not result.success:
        return _fail(result)
    print(f"✅ {result.data.title} completed on {result.data.completed_date}")
    return 0


def cmd_overview(args, svc: TimelineService) -> int:
    result = svc.get_overview(args.building)
    if not result.success:
        return _fail(result)
    print(_dump(result.data))
    return 0


def cmd_deadlines(args, svc: TimelineService) -> int:
    result = svc.get_upcoming_deadlines(args.building, days_ahead=args.days)
    if not result.success:
        return _fail(result)
    if not result.data:
        print("no upcoming deadlines")
    for item in result.data:
        flag = "OVERDUE" if item.is_overdue else ("URGENT" if item.is_urgent else "")
        print(f"{item.milestone.calculated_deadline}  {item.days_remaining:>4}d  {item.milestone.title}  {flag}")
    return 0


def cmd_render(args, svc: Optional[TimelineService] = None) -> int:
    if args.list:
        for t in LEGAL_TEMPLATES:
            print(f"{t.id:<32} {t.title}")
        return 0

    template = get_template_by_id(args.template)
    if template is None:
        print(f"⛔ unknown template: {args.template}", file=sys.stderr)
        return 1

    values = {}
    for pair in args.var:
        name, sep, value = pair.partition("=")
        if not sep:
            print(f"⛔ expected NAME=VALUE, got {pair!r}", file=sys.stderr)
            return 2
        values[name] = value

    try:
        print(generate(template, values))
    except TemplateValidationError as exc:
        print(f"⛔ missing required variables: {', '.join(exc.missing)}", file=sys.stderr)
        return 1
    return 0


def cmd_eligibility(args, svc: Optional[TimelineService] = None) -> int:
    result = check_eligibility(
        EligibilityData(
            total_flats=args.flats,
            residential_flats=args.residential,
            commercial_units=args.commercial,
            landlord_resides=args.landlord_resides,
            average_lease_length=args.lease_years,
            participating_leaseholders=args.participating,
            building_age=args.age,
        )
    )
    print(_dump(result))
    return 0 if result.eligible else 1


def cmd_serve(args, svc: Optional[TimelineService] = None) -> int:
    import uvicorn

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


# ---------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m leasekeeper.cli", description="RTM timeline tools")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="create the default milestones for a building")
    p.add_argument("building")
    p.add_argument("--user", default="cli")
    p.set_defaults(func=cmd_init, needs_db=True)

    p = sub.add_parser("complete", help="mark a milestone completed")
    p.add_argument("milestone")
    p.add_argument("--date", type=_iso, help="completion date (default: today)")
    p.add_argument("--notes")
    p.set_defaults(func=cmd_complete, needs_db=True)

    p = sub.add_parser("overview", help="print the timeline overview as JSON")
    p.add_argument("building")
    p.set_defaults(func=cmd_overview, needs_db=True)

    p = sub.add_parser("deadlines", help="list upcoming and overdue deadlines")
    p.add_argument("building")
    p.add_argument("--days", type=int, default=None, help="look-ahead window in days")
    p.set_defaults(func=cmd_deadlines, needs_db=True)

    p = sub.add_parser("render", help="fill in a legal template")
    p.add_argument("template", nargs="?")
    p.add_argument("--var", action="append", default=[], metavar="NAME=VALUE")
    p.add_argument("--list", action="store_true", help="list available templates")
    p.set_defaults(func=cmd_render, needs_db=False)

    p = sub.add_parser("eligibility", help="quick RTM qualification check")
    p.add_argument("--flats", type=int, required=True)
    p.add_argument("--residential", type=int, required=True)
    p.add_argument("--commercial", type=int, default=0)
    p.add_argument("--landlord-resides", action="store_true")
    p.add_argument("--lease-years", type=int, required=True)
    p.add_argument("--participating", type=int, required=True)
    p.add_argument("--age", type=int, default=0)
    p.set_defaults(func=cmd_eligibility, needs_db=False)

    p = sub.add_parser("serve", help="run the HTTP API with uvicorn")
    p.add_argument("--host", default=API_HOST)
    p.add_argument("--port", type=int, default=API_PORT)
    p.add_argument("--reload", action="store_true")
    p.set_defaults(func=cmd_serve, needs_db=False)

    return parser


def main(argv: Optional[List[str]] = None, repository=None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "render" and not args.list and not args.template:
        print("⛔ template id required (or --list)", file=sys.stderr)
        return 2

    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if not args.needs_db:
        return args.func(args, None)

    if repository is None:
        create_all()
        repository = DBRepository()
    try:
        return args.func(args, TimelineService(repository))
    finally:
        repository.close()


if __name__ == "__main__":
    sys.exit(main())
