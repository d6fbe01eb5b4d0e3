"""HTTP client for the public bioRxiv/medRxiv details API."""

from __future__ import annotations

import logging
import os
import time
from typing import Any
from urllib.parse import quote

import requests

from errors import ApiError, ApplicationUpstreamError, TransientUpstreamError
from models import EndpointPlan, Preprint

BIORXIV_API_BASE_URL = os.getenv("BIORXIV_API_BASE_URL", "https://api.biorxiv.org")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("BIORXIV_REQUEST_TIMEOUT", "30"))
MAX_ATTEMPTS = int(os.getenv("BIORXIV_MAX_ATTEMPTS", "3"))
INITIAL_RETRY_DELAY_SECONDS = float(os.getenv("BIORXIV_RETRY_DELAY_SECONDS", "1.0"))
PERSISTENT_BACKOFF = os.getenv("BIORXIV_PERSISTENT_BACKOFF", "false").lower() in ("1", "true", "yes")

LOGGER = logging.getLogger(__name__)


class BiorxivClient:
    """Thin GET wrapper with retry/backoff around api.biorxiv.org.

    Only HTTP 429 and 5xx responses are retried. The delay doubles after every
    retried attempt. With ``persistent_backoff`` the doubled delay is kept on the
    instance and carried into later calls; otherwise each call starts again
    from ``initial_delay``.
    """

    def __init__(
        self,
        base_url: str = BIORXIV_API_BASE_URL,
        max_attempts: int = MAX_ATTEMPTS,
        initial_delay: float = INITIAL_RETRY_DELAY_SECONDS,
        persistent_backoff: bool = PERSISTENT_BACKOFF,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.persistent_backoff = persistent_backoff
        self.timeout = timeout
        self.retry_delay = initial_delay
        self._session = session or requests.Session()

    def execute(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET ``url`` and return the decoded JSON envelope."""
        if not self.persistent_backoff:
            self.retry_delay = self.initial_delay

        last_status: int | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = self._session.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as exc:
                raise ApiError(f"Request to {url} failed: {exc}") from exc

            status = response.status_code
            if status == 429 or status >= 500:
                last_status = status
                if attempt == self.max_attempts:
                    break
                LOGGER.warning(
                    "API request failed with status %s (attempt %s/%s), retrying in %.1fs",
                    status,
                    attempt,
                    self.max_attempts,
                    self.retry_delay,
                )
                time.sleep(self.retry_delay)
                self.retry_delay *= 2
                continue

            try:
                response.raise_for_status()
                body = response.json()
            except requests.HTTPError as exc:
                raise ApiError(f"HTTP {status} from {url}", status_code=status) from exc
            except ValueError as exc:
                raise ApiError(f"Invalid JSON from {url}: {exc}", status_code=status) from exc

            _raise_for_envelope_error(body, status)
            return body

        raise TransientUpstreamError(
            f"HTTP {last_status} from {url} after {self.max_attempts} attempts",
            status_code=last_status,
        )

    def list_details(
        self,
        plan: EndpointPlan,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> list[Preprint]:
        """List preprints posted in ``plan``'s window, filtered by category."""
        url = f"{self.base_url}/details/{plan.source}/{plan.date_range.as_path()}/0"
        params: dict[str, Any] = {"category": plan.category}
        if cursor:
            params["cursor"] = cursor
        if limit:
            params["limit"] = limit

        body = self.execute(url, params)
        preprints = parse_collection(body)
        LOGGER.info(
            "Listed %s preprints from %s category=%s window=%s",
            len(preprints),
            plan.source,
            plan.category,
            plan.date_range.as_path(),
        )
        return preprints

    def get_details(self, doi: str, source: str = "biorxiv") -> list[Preprint]:
        """Fetch every version of one preprint by DOI."""
        url = f"{self.base_url}/details/{source}/{quote(doi, safe='')}/na/json"
        LOGGER.info("Direct lookup for doi=%s on %s", doi, source)
        return parse_collection(self.execute(url))


def _raise_for_envelope_error(body: Any, status: int) -> None:
    if not isinstance(body, dict):
        return
    messages = body.get("messages")
    if not isinstance(messages, list) or not messages or not isinstance(messages[0], dict):
        return
    first = messages[0]
    if first.get("status") == "error":
        raise ApplicationUpstreamError(
            str(first.get("text") or "API returned an error"),
            status_code=status,
        )


def parse_collection(payload: Any) -> list[Preprint]:
    """Parse the ``collection`` array of an API envelope into Preprint objects."""
    if not isinstance(payload, dict):
        raise ApiError("Unexpected bioRxiv payload shape: expected an object")

    collection = payload.get("collection")
    if not isinstance(collection, list):
        return []

    return [_to_preprint(item) for item in collection if isinstance(item, dict)]


def _to_preprint(item: dict[str, Any]) -> Preprint:
    return Preprint(
        doi=_as_str(item.get("doi")),
        title=_as_str(item.get("title")),
        authors=_as_str(item.get("authors")),
        abstract=_as_str(item.get("abstract")),
        date=_as_str(item.get("date")),
        category=_as_str(item.get("category")),
        type=_as_str(item.get("type")),
        version=_as_str(item.get("version")),
        published=_as_str(item.get("published")),
        license=_as_str(item.get("license")),
        author_corresponding=_as_str(item.get("author_corresponding")),
        author_corresponding_institution=_as_str(item.get("author_corresponding_institution")),
        server=_as_str(item.get("server")),
    )


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
