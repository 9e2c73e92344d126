"""Client for the VTEX public catalog search endpoint.

Every search resolves to a CatalogSearchResult; network errors, non-2xx statuses and
unexpected bodies become an empty result so a fan-out over many terms never fails as a
whole because one term did.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import quote

import httpx

from .catalog_records import CatalogRecord
from .config import Settings

logger = logging.getLogger("shopping_assistant.catalog")

SEARCH_PATH = "/api/catalog_system/pub/products/search/{term}"


@dataclass(frozen=True)
class CatalogSearchResult:
    """Outcome of one term search; records is empty whenever ok is False."""
    term: str
    records: Tuple[CatalogRecord, ...] = ()
    ok: bool = True
    error: Optional[str] = None

    @classmethod
    def failed(cls, term: str, error: str) -> "CatalogSearchResult":
        return cls(term=term, records=(), ok=False, error=error)


class CatalogClient:
    """Thin async wrapper around the catalog search API with a shared HTTP client."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        """Purpose: Configure the catalog client for the account in settings.
        Inputs/Outputs: Inputs are Settings and an optional httpx transport; no return value.
        Side Effects / State: Creates an httpx.AsyncClient reused for all searches.
        Dependencies: httpx; Settings.vtex_account/vtex_environment/catalog_timeout_sec.
        Failure Modes: Raises ValueError if VTEX_ACCOUNT is missing.
        If Removed: The pipeline has no way to query the catalog.
        Testing Notes: Pass httpx.MockTransport to fake backend responses.
        """
        # Validate account and prepare shared headers and client.
        if not settings.vtex_account:
            raise ValueError("VTEX_ACCOUNT is required")
        self._settings = settings
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if settings.vtex_app_key and settings.vtex_app_token:
            headers["X-VTEX-API-AppKey"] = settings.vtex_app_key
            headers["X-VTEX-API-AppToken"] = settings.vtex_app_token
        self._http = httpx.AsyncClient(
            headers=headers,
            timeout=settings.catalog_timeout_sec,
            transport=transport,
        )

    def build_url(self, term: str, account: Optional[str] = None) -> str:
        """Absolute search URL for a term, with the term percent-escaped as one path segment."""
        if account:
            base = f"https://{account}.{self._settings.vtex_environment}"
        else:
            base = self._settings.catalog_base_url
        return base + SEARCH_PATH.format(term=quote(term, safe=""))

    async def search(
        self, term: str, account: Optional[str] = None, limit: Optional[int] = None
    ) -> CatalogSearchResult:
        """Purpose: Search the catalog for a single term.
        Inputs/Outputs: Inputs are the term, an optional account override and an optional
            record limit (defaults from settings); output is a CatalogSearchResult.
        Side Effects / State: One outbound GET request; logs failures at warning level.
        Dependencies: httpx.AsyncClient, CatalogRecord.from_raw.
        Failure Modes: None raised; unencodable terms, HTTP errors, transport errors,
            timeouts, invalid JSON and non-array bodies all return an empty, failed result.
        If Removed: Term fan-out in the pipeline has nothing to call.
        Testing Notes: Simulate 500s and ConnectError and assert an empty result.
        """
        # Request records [0, limit - 1] and map the JSON array to typed records.
        limit = limit or self._settings.results_per_term
        try:
            url = self.build_url(term, account)
        except UnicodeError:
            logger.warning("catalog term=%r unencodable_term", term)
            return CatalogSearchResult.failed(term, "invalid term")
        params = {"_from": 0, "_to": max(limit, 1) - 1}
        try:
            response = await self._http.get(url, params=params)
        except httpx.HTTPError as exc:
            logger.warning("catalog term=%r transport_error=%s", term, exc.__class__.__name__)
            return CatalogSearchResult.failed(term, f"transport: {exc.__class__.__name__}")

        if not response.is_success:
            logger.warning("catalog term=%r status=%s", term, response.status_code)
            return CatalogSearchResult.failed(term, f"status: {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            logger.warning("catalog term=%r invalid_json", term)
            return CatalogSearchResult.failed(term, "invalid json")
        if not isinstance(payload, list):
            logger.warning("catalog term=%r unexpected_body=%s", term, type(payload).__name__)
            return CatalogSearchResult.failed(term, "unexpected body")

        records = tuple(CatalogRecord.from_raw(entry) for entry in payload if isinstance(entry, dict))
        logger.debug("catalog term=%r records=%s", term, len(records))
        return CatalogSearchResult(term=term, records=records[:limit])

    async def aclose(self) -> None:
        await self._http.aclose()
