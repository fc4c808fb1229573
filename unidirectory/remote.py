"""
Remote university service (JSON over HTTP).

Endpoints, relative to the configured base URL:

    GET    /universities?search=&location=&degreeLevel=
    GET    /universities/{id}
    POST   /universities
    PUT    /universities/{id}
    DELETE /universities/{id}

Bodies are plain university objects, no envelope. requests is blocking,
so each call runs in a worker thread to keep the service async.
There is no retry: a failed request is reported to the caller right away.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

import requests

from unidirectory.errors import NotFound, RequestFailed, ValidationError
from unidirectory.filters import FiltersLike, coerce_filters
from unidirectory.model import University
from unidirectory.normalize import normalize_university
from unidirectory.sanitize import missing_required_fields
from unidirectory.service import UniversityService

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class RemoteUniversityService(UniversityService):
    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout

    def _url(self, *parts: str) -> str:
        tail = "/".join(quote(p, safe="") for p in parts)
        return f"{self.base_url}/universities" + (f"/{tail}" if tail else "")

    def _send(
        self,
        method: str,
        url: str,
        operation: str,
        *,
        params: Optional[dict[str, str]] = None,
        body: Optional[Mapping[str, Any]] = None,
        university_id: Optional[str] = None,
    ) -> requests.Response:
        logger.debug("%s %s params=%s", method, url, params)
        try:
            resp = self._session.request(
                method,
                url,
                params=params or None,
                json=dict(body) if body is not None else None,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise RequestFailed(operation) from exc

        logger.debug("%s %s -> %s", method, url, resp.status_code)
        if resp.status_code == 404 and university_id is not None:
            raise NotFound(university_id)
        if not 200 <= resp.status_code < 300:
            raise RequestFailed(operation, resp.status_code)
        return resp

    async def _request(self, method: str, url: str, operation: str, **kwargs: Any) -> requests.Response:
        return await asyncio.to_thread(self._send, method, url, operation, **kwargs)

    @staticmethod
    def _json(resp: requests.Response, operation: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise RequestFailed(operation, resp.status_code) from exc

    def _record(self, resp: requests.Response, operation: str) -> University:
        data = self._json(resp, operation)
        if not isinstance(data, dict):
            raise RequestFailed(operation, resp.status_code)
        return normalize_university(data)

    async def list(self, filters: FiltersLike = None) -> list[University]:
        operation = "load universities"
        params = coerce_filters(filters).to_query_params()
        resp = await self._request("GET", self._url(), operation, params=params)
        data = self._json(resp, operation)
        if not isinstance(data, list):
            raise RequestFailed(operation, resp.status_code)
        return [normalize_university(x) for x in data if isinstance(x, dict)]

    async def get(self, university_id: str) -> University:
        operation = "load university"
        resp = await self._request("GET", self._url(university_id), operation, university_id=university_id)
        return self._record(resp, operation)

    async def create(self, payload: Mapping[str, Any]) -> University:
        missing = missing_required_fields(payload)
        if missing:
            raise ValidationError(missing)

        operation = "create university"
        resp = await self._request("POST", self._url(), operation, body=payload)
        return self._record(resp, operation)

    async def update(self, university_id: str, payload: Mapping[str, Any]) -> University:
        # only fields present in a partial payload can be blanked by it
        blank = [k for k in missing_required_fields(payload) if k in payload]
        if blank:
            raise ValidationError(blank)

        operation = "update university"
        body = {k: v for k, v in payload.items() if k != "id"}
        resp = await self._request(
            "PUT", self._url(university_id), operation, body=body, university_id=university_id
        )
        return self._record(resp, operation)

    async def delete(self, university_id: str) -> None:
        await self._request(
            "DELETE", self._url(university_id), "delete university", university_id=university_id
        )
