"""
CLI (Command Line Interface).

Terminal front end for the university directory:

    unidirectory list [--search S] [--location L] [--degree LEVEL]
    unidirectory show <id>
    unidirectory locations
    unidirectory add --name ... --portal-url ... --location ...
    unidirectory update <id> [--overview ...] ...
    unidirectory delete <id> [--yes]

Global options select the backend (local file, in-memory, remote API).
Errors from the service are caught here, once per command, and printed
as a status message.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Any, Coroutine, Optional, TypeVar

from rich import box
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from unidirectory.config import BACKENDS, ConfigError, build_service, load_settings
from unidirectory.errors import UniversityServiceError
from unidirectory.filters import UniversityFilters, location_options
from unidirectory.model import DEGREE_LABELS, DEGREE_LEVELS, University
from unidirectory.sanitize import empty_form, missing_required_fields, sanitize_form, to_editable
from unidirectory.service import UniversityService

T = TypeVar("T")

console = Console()


def _run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def _error(message: str) -> None:
    console.print(f"[bold red]Error:[/] {message}")


def _success(message: str) -> None:
    console.print(f"[bold green]OK:[/] {message}")


def _format_currency(value: Optional[float]) -> str:
    if value is None:
        return "—"
    if float(value).is_integer():
        return f"${int(value):,}"
    return f"${value:,.2f}"


# ---------------------------------------------------------------------------
# Option parsing helpers
# ---------------------------------------------------------------------------


def _level(text: str) -> str:
    level = text.strip().lower()
    if level not in DEGREE_LEVELS:
        raise argparse.ArgumentTypeError(f"unknown degree level {text!r} (use {', '.join(DEGREE_LEVELS)})")
    return level


def _tuition_arg(text: str) -> tuple[str, str]:
    """
    LEVEL=AMOUNT, e.g. masters=28000
    """
    level, sep, amount = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected LEVEL=AMOUNT, got {text!r}")
    return _level(level), amount.strip()


def _entry_arg(text: str, fields: tuple[str, ...]) -> tuple[str, dict[str, str]]:
    level, sep, rest = text.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected LEVEL:{'|'.join(f.upper() for f in fields)}, got {text!r}")
    parts = [p.strip() for p in rest.split("|")]
    parts += [""] * (len(fields) - len(parts))
    return _level(level), dict(zip(fields, parts))


def _program_arg(text: str) -> tuple[str, dict[str, str]]:
    return _entry_arg(text, ("name", "duration", "delivery"))


def _scholarship_arg(text: str) -> tuple[str, dict[str, str]]:
    return _entry_arg(text, ("name", "amount", "eligibility", "deadline"))


def _apply_form_options(form: dict[str, Any], args: argparse.Namespace) -> dict[str, Any]:
    """
    Copy the values given on the command line into an editable form.
    """
    for key, attr in (("name", "name"), ("portalUrl", "portal_url"), ("location", "location"), ("overview", "overview")):
        value = getattr(args, attr, None)
        if value is not None:
            form[key] = value

    fees = form.setdefault("fees", {"application": 0, "averageTuition": {}})
    if args.application_fee is not None:
        fees["application"] = args.application_fee
    tuition = fees.setdefault("averageTuition", {})
    for level, amount in args.tuition or []:
        tuition[level] = amount

    for key, clear, entries in (
        ("programs", args.clear_programs, args.program),
        ("scholarships", args.clear_scholarships, args.scholarship),
    ):
        by_level = form.setdefault(key, {})
        for level in DEGREE_LEVELS:
            if clear or level not in by_level:
                by_level[level] = []
        for level, entry in entries or []:
            by_level[level].append(entry)

    if args.clear_restricted:
        form["restrictedCountries"] = []
    if args.restrict:
        form["restrictedCountries"] = list(form.get("restrictedCountries") or []) + list(args.restrict)

    return form


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _university_table(universities: list[University]) -> Table:
    table = Table(title=f"Universities ({len(universities)})", box=box.SIMPLE)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold cyan")
    table.add_column("Location")
    table.add_column("Application fee", justify="right")
    for level in DEGREE_LEVELS:
        table.add_column(DEGREE_LABELS[level], justify="right")

    for u in universities:
        counts = [str(len(u.programs.get(level, []))) for level in DEGREE_LEVELS]
        table.add_row(u.id, u.name, u.location, _format_currency(u.fees.application), *counts)
    return table


def _print_university(u: University) -> None:
    console.print(f"\n[bold cyan]{u.name}[/]  [dim]({u.id})[/]")
    console.print(f"{u.location} | {u.portal_url}")
    if u.overview:
        console.print(f"\n{u.overview}")

    fees = Table(title="Fees", box=box.SIMPLE)
    fees.add_column("Item")
    fees.add_column("Amount", justify="right")
    fees.add_row("Application fee", _format_currency(u.fees.application))
    for level in DEGREE_LEVELS:
        fees.add_row(f"Avg. tuition ({DEGREE_LABELS[level]})", _format_currency(u.fees.average_tuition.get(level)))
    console.print(fees)

    programs = Table(title="Programs", box=box.SIMPLE)
    programs.add_column("Level")
    programs.add_column("Name")
    programs.add_column("Duration")
    programs.add_column("Delivery")
    for level in DEGREE_LEVELS:
        for p in u.programs.get(level, []):
            programs.add_row(DEGREE_LABELS[level], p.name, p.duration, p.delivery)
    console.print(programs if programs.row_count else "No programs listed.")

    scholarships = Table(title="Scholarships", box=box.SIMPLE)
    scholarships.add_column("Level")
    scholarships.add_column("Name")
    scholarships.add_column("Amount")
    scholarships.add_column("Eligibility")
    scholarships.add_column("Deadline")
    for level in DEGREE_LEVELS:
        for s in u.scholarships.get(level, []):
            scholarships.add_row(DEGREE_LABELS[level], s.name, s.amount, s.eligibility, s.deadline)
    console.print(scholarships if scholarships.row_count else "No scholarships listed.")

    if u.restricted_countries:
        console.print(f"Restricted countries: {', '.join(u.restricted_countries)}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_list(args: argparse.Namespace, service: UniversityService) -> int:
    filters = UniversityFilters(search=args.search, location=args.location, degree_level=args.degree)
    universities = _run(service.list(filters))
    if not universities:
        console.print("No universities match the current filters.")
        return 0
    console.print(_university_table(universities))
    return 0


def _cmd_show(args: argparse.Namespace, service: UniversityService) -> int:
    _print_university(_run(service.get(args.id)))
    return 0


def _cmd_locations(args: argparse.Namespace, service: UniversityService) -> int:
    options = location_options(_run(service.list()))
    if not options:
        console.print("No locations.")
        return 0
    for loc in options:
        console.print(loc)
    return 0


def _submit(form: dict[str, Any]) -> Optional[dict[str, Any]]:
    """
    Required-field check and sanitization before anything reaches the service.
    """
    missing = missing_required_fields(form)
    if missing:
        _error("Name, portal link, and location are required.")
        return None
    return sanitize_form(form)


def _cmd_add(args: argparse.Namespace, service: UniversityService) -> int:
    payload = _submit(_apply_form_options(empty_form(), args))
    if payload is None:
        return 1
    created = _run(service.create(payload))
    _success(f"University added to the directory: {created.name} ({created.id})")
    return 0


def _cmd_update(args: argparse.Namespace, service: UniversityService) -> int:
    existing = _run(service.get(args.id))
    payload = _submit(_apply_form_options(to_editable(existing), args))
    if payload is None:
        return 1
    updated = _run(service.update(existing.id, payload))
    _success(f"University details updated: {updated.name} ({updated.id})")
    return 0


def _cmd_delete(args: argparse.Namespace, service: UniversityService) -> int:
    university = _run(service.get(args.id))
    if not args.yes and not Confirm.ask(f"Are you sure you want to delete {university.name}?", console=console):
        console.print("Cancelled.")
        return 0
    _run(service.delete(university.id))
    _success(f"Deleted: {university.name}")
    return 0


def _add_form_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--name", help="University name")
    p.add_argument("--portal-url", dest="portal_url", help="Admissions portal link")
    p.add_argument("--location", help="Country or city")
    p.add_argument("--overview", help="Short description")
    p.add_argument("--application-fee", dest="application_fee", help="Application fee (number)")
    p.add_argument("--tuition", action="append", type=_tuition_arg, metavar="LEVEL=AMOUNT",
                   help="Average tuition for a degree level (repeatable)")
    p.add_argument("--program", action="append", type=_program_arg, metavar="LEVEL:NAME|DURATION|DELIVERY",
                   help="Add a program (repeatable)")
    p.add_argument("--scholarship", action="append", type=_scholarship_arg,
                   metavar="LEVEL:NAME|AMOUNT|ELIGIBILITY|DEADLINE", help="Add a scholarship (repeatable)")
    p.add_argument("--restrict", action="append", metavar="COUNTRY",
                   help="Add a restricted country (repeatable)")
    p.add_argument("--clear-programs", action="store_true", help="Remove existing programs first")
    p.add_argument("--clear-scholarships", action="store_true", help="Remove existing scholarships first")
    p.add_argument("--clear-restricted", action="store_true", help="Remove existing restricted countries first")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="unidirectory", description="University directory CLI")
    parser.add_argument("--backend", choices=BACKENDS, help="Storage backend (default: UNIDIRECTORY_BACKEND or local)")
    parser.add_argument("--api-url", dest="api_url", help="Base URL of the remote API")
    parser.add_argument("--data-dir", dest="data_dir", help="Directory of the local store")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List universities")
    p_list.add_argument("--search", "-s", help="Part of the university name")
    p_list.add_argument("--location", "-l", help="Exact location (case-insensitive)")
    p_list.add_argument("--degree", "-d", type=_level, help="Only universities with programs at this level")

    p_show = sub.add_parser("show", help="Show one university")
    p_show.add_argument("id", help="University id")

    sub.add_parser("locations", help="List all locations")

    p_add = sub.add_parser("add", help="Add a university")
    _add_form_options(p_add)

    p_update = sub.add_parser("update", help="Update a university")
    p_update.add_argument("id", help="University id")
    _add_form_options(p_update)

    p_delete = sub.add_parser("delete", help="Delete a university")
    p_delete.add_argument("id", help="University id")
    p_delete.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    return parser


COMMANDS = {
    "list": _cmd_list,
    "show": _cmd_show,
    "locations": _cmd_locations,
    "add": _cmd_add,
    "update": _cmd_update,
    "delete": _cmd_delete,
}


def main(argv: list[str] | None = None, service: UniversityService | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.

    service can be passed in (tests); otherwise it is built from settings.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if service is None:
        try:
            settings = load_settings().with_overrides(
                backend=args.backend, api_url=args.api_url, data_dir=args.data_dir
            )
        except ConfigError as exc:
            _error(str(exc))
            raise SystemExit(2)
        service = build_service(settings)

    handler = COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        code = handler(args, service)
    except UniversityServiceError as exc:
        _error(str(exc))
        code = 1
    raise SystemExit(code)
