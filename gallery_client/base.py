"""Async gallery API client with bounded concurrency and retries."""

import asyncio

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from settings import API_BASE_URL, API_TIMEOUT, MAX_CONCURRENT


def _is_retryable_error(exc: BaseException) -> bool:
    """Network failures and 5xx answers are worth another attempt."""
    if isinstance(exc, (httpx.ReadError, httpx.ConnectError, httpx.TimeoutException)):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


def _log_retry(retry_state) -> None:
    logger.warning(
        "Gallery API attempt {} failed: {}",
        retry_state.attempt_number,
        retry_state.outcome.exception(),
    )


class GalleryAPIError(Exception):
    """Gallery API refused the request or answered with unusable data."""


class BaseClient:
    """Shared transport for gallery endpoints. Use as ``async with``."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = API_TIMEOUT,
        max_concurrent: int = MAX_CONCURRENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._sem = asyncio.Semaphore(max_concurrent)
        self._request_count = 0

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )
        logger.debug("{} -> {}", type(self).__name__, self._base_url)
        return self

    async def __aexit__(self, *_):
        if self._client:
            await self._client.aclose()
            self._client = None
        logger.info("Gallery API requests: {}", self._request_count)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        retry=retry_if_exception(_is_retryable_error),
        before_sleep=_log_retry,
        reraise=True,
    )
    async def _post(self, path: str, payload: dict) -> dict:
        """POST JSON and return the decoded body. 4xx answers are not retried."""
        if self._client is None:
            raise RuntimeError(f"{type(self).__name__} used outside 'async with'")

        async with self._sem:
            self._request_count += 1
            resp = await self._client.post(f"/{path.lstrip('/')}", json=payload)

        if 400 <= resp.status_code < 500:
            raise GalleryAPIError(f"{path} rejected with {resp.status_code}: {resp.text[:100]}")
        resp.raise_for_status()
        try:
            return resp.json()
        except ValueError as e:
            raise GalleryAPIError(f"Invalid JSON from {path}: {resp.text[:100]}") from e
