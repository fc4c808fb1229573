"""
Filtering of the university collection.

Filter rule (all predicates ANDed, empty predicate = always true):
    search       -> case-insensitive substring of name
    location     -> case-insensitive exact match of location
    degree_level -> at least one program at that level
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from unidirectory.model import University


@dataclass(frozen=True)
class UniversityFilters:
    search: Optional[str] = None
    location: Optional[str] = None
    degree_level: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UniversityFilters":
        """
        Accept wire keys (degreeLevel) as well as attribute names.
        """
        level = data.get("degreeLevel")
        if level is None:
            level = data.get("degree_level")
        return cls(search=data.get("search"), location=data.get("location"), degree_level=level)

    def to_query_params(self) -> dict[str, str]:
        """
        Query parameters for GET /universities. Empty values are left out
        entirely instead of being sent as empty strings.
        """
        params: dict[str, str] = {}
        if self.search:
            params["search"] = self.search
        if self.location:
            params["location"] = self.location
        if self.degree_level:
            params["degreeLevel"] = self.degree_level
        return params

    def is_empty(self) -> bool:
        return not (self.search or self.location or self.degree_level)


FiltersLike = Union[UniversityFilters, Mapping[str, Any], None]


def coerce_filters(filters: FiltersLike) -> UniversityFilters:
    if filters is None:
        return UniversityFilters()
    if isinstance(filters, UniversityFilters):
        return filters
    if isinstance(filters, Mapping):
        return UniversityFilters.from_mapping(filters)
    return UniversityFilters()


def matches(university: University, filters: FiltersLike = None) -> bool:
    f = coerce_filters(filters)

    if f.search:
        if str(f.search).lower() not in university.name.lower():
            return False

    if f.location:
        if university.location.lower() != str(f.location).lower():
            return False

    if f.degree_level:
        programs = university.programs.get(str(f.degree_level))
        if not programs:
            return False

    return True


def filter_universities(universities: Iterable[University], filters: FiltersLike = None) -> list[University]:
    """
    Return the universities matching filters, in their original order.
    The input is not modified.
    """
    f = coerce_filters(filters)
    return [u for u in universities if matches(u, f)]


def location_options(universities: Iterable[University]) -> list[str]:
    """
    Sorted distinct locations, e.g. for a location picker.
    """
    return sorted({u.location for u in universities if u.location})
