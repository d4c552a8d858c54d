"""Asynchronous HTTP retrieval of catalog documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict
from urllib.parse import urljoin

import httpx
import structlog

from ..config import CatalogConfig


@dataclass(slots=True)
class FetchRequest:
    """Input for the fetcher."""

    url: str
    method: str = "GET"
    headers: dict[str, str] | None = None
    timeout: float | None = None


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)


class Fetcher:
    """Issue non-blocking requests with a bounded retry budget.

    Every request is retried up to ``config.retry_on_fail`` extra times; the
    caller decides how to handle the final ``RuntimeError``.
    """

    def __init__(
        self,
        config: CatalogConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("preset_catalog.fetcher")
        # Fan-out equals the document count; waiting for a pooled connection never times out
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=self._timeout(config.request_timeout),
            limits=httpx.Limits(max_connections=None, max_keepalive_connections=None),
            transport=transport,
        )

    async def __aenter__(self) -> "Fetcher":
        return self

    async def __aexit__(self, *_exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def resolve(self, reference: str) -> str:
        """Turn a manifest document reference into an absolute URL."""

        return urljoin(self.config.base_url, reference)

    async def fetch(self, request: FetchRequest) -> FetchResponse:
        max_attempts = self.config.retry_on_fail + 1
        last_error: Exception | None = None
        for attempt in range(1, max_attempts + 1):
            try:
                response = await self._client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    timeout=self._timeout(request.timeout or self.config.request_timeout),
                )
                if self._is_failure(response):
                    last_error = RuntimeError(f"Unexpected status {response.status_code}")
                else:
                    return FetchResponse(
                        url=str(response.url),
                        status_code=response.status_code,
                        text=response.text,
                        headers=dict(response.headers),
                        raw=response,
                    )
            except httpx.HTTPError as exc:
                last_error = exc
            self.logger.warning(
                "fetch_error",
                url=request.url,
                attempt=attempt,
                error=str(last_error),
            )

        raise RuntimeError(
            f"Fetch failed after {max_attempts} attempts: {request.url}"
        ) from last_error

    async def fetch_text(self, reference: str) -> str:
        response = await self.fetch(FetchRequest(url=self.resolve(reference)))
        return response.text

    @staticmethod
    def _timeout(seconds: float) -> httpx.Timeout:
        return httpx.Timeout(seconds, pool=None)

    @staticmethod
    def _is_failure(response: Any) -> bool:
        status = getattr(response, "status_code", 0)
        return status >= 400


__all__ = ["FetchRequest", "FetchResponse", "Fetcher"]
