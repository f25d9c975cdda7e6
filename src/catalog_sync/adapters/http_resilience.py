"""Retrying, rate-limited async HTTP client shared by the upstream adapters."""

from __future__ import annotations

from contextlib import nullcontext
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from catalog_sync.config.http_resilience import ResilienceConfig, RetryPolicy

log = getLogger(__name__)


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        backoff_jitter=policy.backoff_jitter,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=sorted(policy.allowed_methods),
        status_forcelist=sorted(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


def build_transport(
    config: ResilienceConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RetryTransport:
    """Wrap ``transport`` (the real network when omitted) in the configured retries."""

    return RetryTransport(transport=transport, retry=build_retry(config.retry))


class ResilientClient:
    """``httpx.AsyncClient`` behind a retry transport and an optional rate limiter.

    ``transport`` replaces the network transport underneath the retries; tests pass
    an ``httpx.MockTransport`` here. Requests sent with ``retry=False`` skip the
    retry transport but still wait on the same limiter.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        limit = config.ratelimit
        self._limiter = AsyncLimiter(limit.max_calls, limit.per_seconds) if limit else None
        self._client = self._build_client(build_transport(config, transport=transport))
        self._single_shot = self._build_client(transport or httpx.AsyncHTTPTransport())

    def _build_client(self, transport: httpx.AsyncBaseTransport) -> httpx.AsyncClient:
        config = self.config
        return httpx.AsyncClient(
            base_url=config.base_url or "",
            timeout=config.timeout_seconds,
            headers=dict(config.default_headers or {}),
            event_hooks={"request": [], "response": list(config.response_hooks)},
            transport=transport,
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        try:
            await self._client.aclose()
        finally:
            await self._single_shot.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: object = None,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        retry: bool = True,
    ) -> httpx.Response:
        client = self._client if retry else self._single_shot
        async with self._limiter or nullcontext():
            log.debug("%s: %s %s", self.config.name, method, url)
            return await client.request(method, url, json=json, params=params, headers=headers)

    async def get(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        return await self.request("GET", url, params=params, headers=headers)

    async def post(
        self,
        url: str,
        *,
        json: object = None,
        headers: Mapping[str, str] | None = None,
        retry: bool = True,
    ) -> httpx.Response:
        return await self.request("POST", url, json=json, headers=headers, retry=retry)

    async def delete(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        return await self.request("DELETE", url, headers=headers)
