"""
Central data model definitions used across the project.

This module defines the canonical structure of a University record so that:
- the local store, the remote client and the CLI share the same field names
- the JSON shape written to disk / sent over HTTP stays stable

Python attributes are snake_case, the JSON (wire) keys are camelCase
(portalUrl, averageTuition, restrictedCountries) to stay compatible with
existing data files and the HTTP API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

DegreeLevel = Literal["bachelor", "masters", "phd"]

# Display order: bachelor, masters, phd
DEGREE_LEVELS: tuple[DegreeLevel, ...] = ("bachelor", "masters", "phd")

DEGREE_LABELS: dict[str, str] = {
    "bachelor": "Bachelor",
    "masters": "Masters",
    "phd": "PhD",
}


def empty_levels() -> dict[str, list]:
    """
    Return a fresh mapping with an empty list for every degree level.
    """
    return {level: [] for level in DEGREE_LEVELS}


@dataclass
class Program:
    """
    One study program offered at a given degree level.
    """

    name: str = ""
    duration: str = ""
    delivery: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "duration": self.duration, "delivery": self.delivery}


@dataclass
class Scholarship:
    name: str = ""
    amount: str = ""
    eligibility: str = ""
    deadline: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "amount": self.amount,
            "eligibility": self.eligibility,
            "deadline": self.deadline,
        }


@dataclass
class Fees:
    """
    Application fee plus average tuition per degree level.

    average_tuition is a partial mapping: a level may have no entry.
    """

    application: float = 0
    average_tuition: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"application": self.application, "averageTuition": dict(self.average_tuition)}


@dataclass
class University:
    """
    The aggregate root: one university profile.

    programs and scholarships always contain every key of DEGREE_LEVELS
    once the record went through normalize_university().
    """

    id: str
    name: str
    portal_url: str
    location: str
    overview: Optional[str] = None
    fees: Fees = field(default_factory=Fees)
    programs: Dict[str, List[Program]] = field(default_factory=empty_levels)
    scholarships: Dict[str, List[Scholarship]] = field(default_factory=empty_levels)
    restricted_countries: List[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize into the JSON (wire) shape. overview is omitted when unset.
        """
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "portalUrl": self.portal_url,
            "location": self.location,
        }
        if self.overview is not None:
            out["overview"] = self.overview
        out["fees"] = self.fees.to_dict()
        out["programs"] = {
            level: [p.to_dict() for p in self.programs.get(level, [])] for level in DEGREE_LEVELS
        }
        out["scholarships"] = {
            level: [s.to_dict() for s in self.scholarships.get(level, [])] for level in DEGREE_LEVELS
        }
        out["restrictedCountries"] = list(self.restricted_countries)
        return out

    def program_count(self) -> int:
        return sum(len(self.programs.get(level, [])) for level in DEGREE_LEVELS)
