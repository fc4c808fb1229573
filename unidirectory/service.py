"""
University services: one async contract, interchangeable backends.

UniversityService is what the front end talks to. Two implementations:

- LocalUniversityService (this module): the whole collection lives in one
  key-value slot as a JSON array, seeded from the bundled dataset
- RemoteUniversityService (unidirectory.remote): JSON over HTTP

Which one is used is decided by unidirectory.config.build_service().
"""

from __future__ import annotations

import abc
import asyncio
import json
import uuid
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from unidirectory.errors import CorruptState, NotFound, ValidationError
from unidirectory.filters import FiltersLike, filter_universities
from unidirectory.model import University
from unidirectory.normalize import normalize_collection, normalize_university
from unidirectory.sanitize import missing_required_fields
from unidirectory.storage import KeyValueStore

STORAGE_KEY = "manara_universities"


def _default_seed_path() -> Path:
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "universities.json"


def load_seed_universities(path: str | Path | None = None) -> list[dict[str, Any]]:
    """
    Load the bundled seed dataset (a JSON array of university objects).
    """
    seed_path = Path(path) if path is not None else _default_seed_path()
    data = json.loads(seed_path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Seed file {seed_path} must contain a JSON array")
    return data


class UniversityService(abc.ABC):
    """
    The data-access contract used by every front end.

    Payloads are wire-shaped mappings (camelCase keys); every returned
    University is normalized.
    """

    @abc.abstractmethod
    async def list(self, filters: FiltersLike = None) -> list[University]:
        """All universities matching filters (possibly none)."""

    @abc.abstractmethod
    async def get(self, university_id: str) -> University:
        """Raises NotFound if the id is unknown."""

    @abc.abstractmethod
    async def create(self, payload: Mapping[str, Any]) -> University:
        """Raises ValidationError if name, portalUrl or location is missing."""

    @abc.abstractmethod
    async def update(self, university_id: str, payload: Mapping[str, Any]) -> University:
        """
        Shallow merge of payload onto the stored record. Raises NotFound,
        or ValidationError if the merge leaves a required field blank.
        """

    @abc.abstractmethod
    async def delete(self, university_id: str) -> None:
        """Raises NotFound if the id is unknown."""


SeedSource = Union[Callable[[], Iterable[Mapping[str, Any]]], Iterable[Mapping[str, Any]]]


class LocalUniversityService(UniversityService):
    """
    Local store: the full collection in one slot.

    - empty slot -> seed dataset, persisted immediately
    - slot that does not parse -> cleared and reseeded (never reported)
    - every mutation reads everything, changes it in memory, writes everything
    """

    def __init__(
        self,
        store: KeyValueStore,
        seed: Optional[SeedSource] = None,
        storage_key: str = STORAGE_KEY,
        latency: float = 0.0,
    ) -> None:
        self._store = store
        if seed is None:
            seed = load_seed_universities
        elif not callable(seed):
            # frozen: reseeding may happen more than once
            seed = list(seed)
        self._seed = seed
        self._storage_key = storage_key
        self._latency = latency

    # -----------------------------------------------------------------------
    # Slot access
    # -----------------------------------------------------------------------

    def _seed_records(self) -> list[University]:
        source = self._seed() if callable(self._seed) else self._seed
        return normalize_collection(source)

    def _parse(self, raw: str) -> list[University]:
        try:
            data = json.loads(raw)
        except (ValueError, TypeError, RecursionError) as exc:
            raise CorruptState(f"Slot {self._storage_key!r} is not valid JSON") from exc
        if not isinstance(data, list) or not all(isinstance(x, dict) for x in data):
            raise CorruptState(f"Slot {self._storage_key!r} does not hold a list of records")
        return normalize_collection(data)

    def _read(self) -> list[University]:
        raw = self._store.get_item(self._storage_key)
        if raw is None:
            seeded = self._seed_records()
            self._write(seeded)
            return seeded
        try:
            return self._parse(raw)
        except CorruptState:
            self._store.remove_item(self._storage_key)
            seeded = self._seed_records()
            self._write(seeded)
            return seeded

    def _write(self, universities: Iterable[University]) -> None:
        normalized = normalize_collection(universities)
        text = json.dumps([u.to_dict() for u in normalized], indent=2, ensure_ascii=False)
        self._store.set_item(self._storage_key, text)

    async def _pause(self) -> None:
        # keeps the interface asynchronous even when storage is not
        await asyncio.sleep(self._latency)

    @staticmethod
    def _index_of(universities: list[University], university_id: str) -> int:
        for i, u in enumerate(universities):
            if u.id == university_id:
                return i
        return -1

    @staticmethod
    def _new_id(taken: set[str]) -> str:
        while True:
            candidate = str(uuid.uuid4())
            if candidate not in taken:
                return candidate

    # -----------------------------------------------------------------------
    # Contract
    # -----------------------------------------------------------------------

    async def list(self, filters: FiltersLike = None) -> list[University]:
        result = filter_universities(self._read(), filters)
        await self._pause()
        return result

    async def get(self, university_id: str) -> University:
        universities = self._read()
        i = self._index_of(universities, university_id)
        if i == -1:
            raise NotFound(university_id)
        await self._pause()
        return universities[i]

    async def create(self, payload: Mapping[str, Any]) -> University:
        missing = missing_required_fields(payload)
        if missing:
            raise ValidationError(missing)

        universities = self._read()
        record = dict(payload)
        record["id"] = self._new_id({u.id for u in universities})
        created = normalize_university(record)

        universities.append(created)
        self._write(universities)
        await self._pause()
        return created

    async def update(self, university_id: str, payload: Mapping[str, Any]) -> University:
        universities = self._read()
        i = self._index_of(universities, university_id)
        if i == -1:
            raise NotFound(university_id)

        merged = universities[i].to_dict()
        merged.update(payload)
        merged["id"] = university_id
        missing = missing_required_fields(merged)
        if missing:
            raise ValidationError(missing)
        updated = normalize_university(merged)

        universities[i] = updated
        self._write(universities)
        await self._pause()
        return updated

    async def delete(self, university_id: str) -> None:
        universities = self._read()
        i = self._index_of(universities, university_id)
        if i == -1:
            raise NotFound(university_id)

        del universities[i]
        self._write(universities)
        await self._pause()
