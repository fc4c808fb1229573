"""
Sanitization of editable form state before it is sent to create()/update().

The form is a wire-shaped dict (camelCase keys) as produced by empty_form()
or to_editable(). sanitize_form() is a pure transform:
- trims name, portalUrl, location, overview
- drops programs / scholarships whose name is blank
- fees.application -> number (0 if not parseable)
- averageTuition keeps only valid numeric entries (partial map is fine)
- restrictedCountries is passed through; the service normalizes it
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

from unidirectory.model import DEGREE_LEVELS, University, empty_levels
from unidirectory.normalize import to_number

REQUIRED_FIELDS: tuple[str, ...] = ("name", "portalUrl", "location")


def empty_form() -> dict[str, Any]:
    """
    A blank form for a new university.
    """
    return {
        "id": None,
        "name": "",
        "portalUrl": "",
        "location": "",
        "overview": "",
        "fees": {"application": 0, "averageTuition": {}},
        "programs": empty_levels(),
        "scholarships": empty_levels(),
    }


def to_editable(university: University) -> dict[str, Any]:
    """
    Editable copy of a stored university. Mutating the result never
    touches the record.
    """
    form = university.to_dict()
    if form.get("overview") is None:
        form["overview"] = ""
    return form


def missing_required_fields(form: Mapping[str, Any]) -> list[str]:
    missing: list[str] = []
    for key in REQUIRED_FIELDS:
        value = form.get(key)
        if value is None or not str(value).strip():
            missing.append(key)
    return missing


def _trimmed(value: Any) -> Any:
    if value is None:
        return None
    return str(value).strip()


def _named_entries(entries: Any) -> list[dict[str, Any]]:
    if not isinstance(entries, (list, tuple)):
        return []
    out: list[dict[str, Any]] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        if str(entry.get("name") or "").strip():
            out.append(dict(entry))
    return out


def sanitize_form(form: Mapping[str, Any]) -> dict[str, Any]:
    payload: dict[str, Any] = copy.deepcopy(dict(form))

    for key in ("name", "portalUrl", "location"):
        payload[key] = _trimmed(form.get(key)) or ""
    if "overview" in form:
        payload["overview"] = _trimmed(form.get("overview"))

    fees = form.get("fees")
    fees = fees if isinstance(fees, Mapping) else {}
    application = to_number(fees.get("application"))

    tuition_raw = fees.get("averageTuition")
    tuition: dict[str, Any] = {}
    if isinstance(tuition_raw, Mapping):
        for level, value in tuition_raw.items():
            amount = to_number(value)
            if amount is not None:
                tuition[level] = amount

    payload["fees"] = {"application": application if application is not None else 0, "averageTuition": tuition}

    programs = form.get("programs")
    programs = programs if isinstance(programs, Mapping) else {}
    payload["programs"] = {level: _named_entries(programs.get(level)) for level in DEGREE_LEVELS}

    scholarships = form.get("scholarships")
    scholarships = scholarships if isinstance(scholarships, Mapping) else {}
    payload["scholarships"] = {level: _named_entries(scholarships.get(level)) for level in DEGREE_LEVELS}

    return payload
