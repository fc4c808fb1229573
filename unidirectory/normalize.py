"""
Normalization of University records.

normalize_university() runs on every read and every write of the stores.
It is total (never raises) and idempotent, so legacy or partial records
(missing degree levels, untrimmed country names, string fees, ...) are
repaired transparently instead of breaking the UI.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping

from unidirectory.model import DEGREE_LEVELS, Fees, Program, Scholarship, University


def _text(value: Any) -> str:
    return "" if value is None else str(value)


_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _finite(num: float | int) -> float | int | None:
    # ints beyond the float range count as not finite
    try:
        return num if math.isfinite(float(num)) else None
    except OverflowError:
        return None


def to_number(value: Any) -> float | int | None:
    """
    Parse value into a finite number. Returns None if that is not possible.

    Booleans are not numbers here. Plain ASCII numeric strings ("1200",
    " 99.5 ", "1e3") are accepted because form input arrives as text;
    "1_000" or non-ASCII digits are not.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return _finite(value)
    if isinstance(value, str):
        s = value.strip()
        try:
            if _INT_RE.fullmatch(s):
                return _finite(int(s))
            if _FLOAT_RE.fullmatch(s):
                return _finite(float(s))
        except ValueError:
            # int() refuses strings above the interpreter's digit limit
            return None
    return None


def normalize_restricted_countries(countries: Iterable[Any] | None) -> list[str]:
    """
    Trim entries, drop blanks and drop duplicates (exact string match,
    first occurrence wins).
    """
    if countries is None or isinstance(countries, (str, bytes)):
        return []
    out: list[str] = []
    seen: set[str] = set()
    try:
        items = list(countries)
    except TypeError:
        return []
    for x in items:
        if x is None:
            continue
        name = str(x).strip()
        if name and name not in seen:
            seen.add(name)
            out.append(name)
    return out


def _normalize_fees(raw: Any) -> Fees:
    if isinstance(raw, Fees):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        return Fees()

    application = to_number(raw.get("application"))
    tuition_raw = raw.get("averageTuition")
    if tuition_raw is None:
        tuition_raw = raw.get("average_tuition")

    tuition: dict[str, float] = {}
    if isinstance(tuition_raw, Mapping):
        for level in DEGREE_LEVELS:
            amount = to_number(tuition_raw.get(level))
            if amount is not None:
                tuition[level] = amount

    return Fees(application=application if application is not None else 0, average_tuition=tuition)


def _entry_dict(entry: Any) -> Mapping[str, Any] | None:
    if isinstance(entry, (Program, Scholarship)):
        return entry.to_dict()
    if isinstance(entry, Mapping):
        return entry
    return None


def _normalize_programs(raw: Any) -> dict[str, list[Program]]:
    out: dict[str, list[Program]] = {level: [] for level in DEGREE_LEVELS}
    if not isinstance(raw, Mapping):
        return out
    for level in DEGREE_LEVELS:
        entries = raw.get(level)
        if not isinstance(entries, (list, tuple)):
            continue
        for entry in entries:
            d = _entry_dict(entry)
            if d is None:
                continue
            out[level].append(
                Program(
                    name=_text(d.get("name")),
                    duration=_text(d.get("duration")),
                    delivery=_text(d.get("delivery")),
                )
            )
    return out


def _normalize_scholarships(raw: Any) -> dict[str, list[Scholarship]]:
    out: dict[str, list[Scholarship]] = {level: [] for level in DEGREE_LEVELS}
    if not isinstance(raw, Mapping):
        return out
    for level in DEGREE_LEVELS:
        entries = raw.get(level)
        if not isinstance(entries, (list, tuple)):
            continue
        for entry in entries:
            d = _entry_dict(entry)
            if d is None:
                continue
            out[level].append(
                Scholarship(
                    name=_text(d.get("name")),
                    amount=_text(d.get("amount")),
                    eligibility=_text(d.get("eligibility")),
                    deadline=_text(d.get("deadline")),
                )
            )
    return out


def normalize_university(raw: University | Mapping[str, Any]) -> University:
    """
    Build a well-formed University from a record or a wire-shaped mapping.

    Guarantees:
    - programs / scholarships contain all degree levels (missing -> [])
    - fees.application is a number (unparseable -> 0)
    - average tuition keeps only known levels with numeric values
    - restricted countries are trimmed, non-blank and unique
    """
    if isinstance(raw, University):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        raw = {}

    overview = raw.get("overview")

    return University(
        id=_text(raw.get("id")),
        name=_text(raw.get("name")),
        portal_url=_text(raw.get("portalUrl")),
        location=_text(raw.get("location")),
        overview=None if overview is None else str(overview),
        fees=_normalize_fees(raw.get("fees")),
        programs=_normalize_programs(raw.get("programs")),
        scholarships=_normalize_scholarships(raw.get("scholarships")),
        restricted_countries=normalize_restricted_countries(raw.get("restrictedCountries")),
    )


def normalize_collection(items: Iterable[University | Mapping[str, Any]]) -> list[University]:
    return [normalize_university(x) for x in items]
