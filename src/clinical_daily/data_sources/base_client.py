"""
Base client for external data source clients.

Provides: rate limiting, retry with exponential backoff, structured
logging, and a uniform DataSourceError for every transport failure.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import aiohttp
from pydantic import BaseModel

from clinical_daily.constants import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT

logger = logging.getLogger("clinical_daily.data_sources")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class RetryConfig(BaseModel):
    """Retry behaviour for failed requests."""

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    backoff_factor: float = 2.0
    retryable_status_codes: set[int] = {429, 500, 502, 503, 504}


class RateLimitConfig(BaseModel):
    """Token-bucket rate limiter settings."""

    # NCBI allows 3 req/s without an API key, 10 with one
    requests_per_second: float = 3.0
    burst: int = 3


class ClientConfig(BaseModel):
    """Top-level config aggregating retry and rate limit."""

    retry: RetryConfig = RetryConfig()
    rate_limit: RateLimitConfig = RateLimitConfig()
    timeout_seconds: float = DEFAULT_TIMEOUT


# ---------------------------------------------------------------------------
# Rate limiter (async token bucket)
# ---------------------------------------------------------------------------


class TokenBucketRateLimiter:
    """
    Async token-bucket rate limiter.

    Allows `burst` requests immediately, then refills at
    `requests_per_second`.  Callers await `acquire()` before
    making a request; it sleeps only when the bucket is empty.
    """

    def __init__(self, config: RateLimitConfig):
        self.rate = config.requests_per_second
        self.max_tokens = config.burst
        self.tokens = float(config.burst)
        self.last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self.last_refill
            self.tokens = min(self.max_tokens, self.tokens + elapsed * self.rate)
            self.last_refill = now

            if self.tokens < 1.0:
                wait = (1.0 - self.tokens) / self.rate
                logger.debug("Rate limiter: sleeping %.2fs", wait)
                await asyncio.sleep(wait)
                self.tokens = 0.0
                self.last_refill = time.monotonic()
            else:
                self.tokens -= 1.0


# ---------------------------------------------------------------------------
# Request context (for structured logging)
# ---------------------------------------------------------------------------


class RequestContext(BaseModel):
    """Metadata attached to every outgoing request for logging."""

    source: str  # e.g. "pubmed"
    method: str  # e.g. "search", "fetch_document"
    params: dict[str, Any] = {}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DataSourceError(Exception):
    """Base exception for data source failures."""

    def __init__(self, source: str, message: str, status_code: int | None = None):
        self.source = source
        self.status_code = status_code
        super().__init__(f"[{source}] {message}")


class RateLimitError(DataSourceError):
    """Raised when rate limit is exceeded and retries are exhausted."""

    pass


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class BaseClient(ABC):
    """
    Abstract base for REST data source clients.

    Subclasses implement `_source_name` and their own typed methods that
    call `_rest_get()` (JSON) or `_rest_get_xml()` (raw text).
    """

    def __init__(
        self, config: ClientConfig | None = None, max_retries: int | None = None
    ):
        self.config = config or ClientConfig()
        if max_retries is not None:
            self.config = self.config.model_copy(
                update={
                    "retry": self.config.retry.model_copy(
                        update={"max_retries": max_retries}
                    )
                }
            )
        self.rate_limiter = TokenBucketRateLimiter(self.config.rate_limit)
        self._session: aiohttp.ClientSession | None = None

    @property
    @abstractmethod
    def _source_name(self) -> str:
        """Identifier for this data source, e.g. 'pubmed'."""
        ...

    # -- Session management --------------------------------------------------

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # -- Core request with retry + rate limiting -----------------------------

    def _backoff(self, attempt: int) -> float:
        retry = self.config.retry
        return min(retry.base_delay * (retry.backoff_factor**attempt), retry.max_delay)

    async def _request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        context: RequestContext | None = None,
    ) -> str:
        """
        Make a GET request with rate limiting and retry; return the body text.

        Parameters
        ----------
        url : str
            Full URL.
        params : dict, optional
            Query string parameters.
        headers : dict, optional
            Additional HTTP headers.
        context : RequestContext, optional
            Logging context.

        Raises
        ------
        DataSourceError
            On a non-retryable HTTP status, or once retries are exhausted.
        """
        ctx = context or RequestContext(source=self._source_name, method="unknown")
        retry = self.config.retry

        last_error: DataSourceError | None = None
        start = time.monotonic()

        for attempt in range(retry.max_retries + 1):
            try:
                await self.rate_limiter.acquire()
                session = await self._get_session()

                logger.info(
                    "Request [%s.%s] attempt=%d url=%s",
                    ctx.source,
                    ctx.method,
                    attempt + 1,
                    url,
                )

                resp = await session.get(url, params=params, headers=headers)

                # --- Handle HTTP errors ---
                if resp.status in retry.retryable_status_codes:
                    body = await resp.text()
                    logger.warning(
                        "Retryable %d from %s.%s: %s",
                        resp.status,
                        ctx.source,
                        ctx.method,
                        body[:200],
                    )
                    error_cls = RateLimitError if resp.status == 429 else DataSourceError
                    last_error = error_cls(
                        ctx.source,
                        f"HTTP {resp.status}: {body[:200]}",
                        status_code=resp.status,
                    )
                    if attempt >= retry.max_retries:
                        break

                    delay = self._backoff(attempt)
                    if resp.status == 429:
                        # Respect Retry-After header if present
                        retry_after = resp.headers.get("Retry-After")
                        if retry_after and retry_after.isdigit():
                            delay = float(retry_after)
                    await asyncio.sleep(delay)
                    continue

                if resp.status >= 400:
                    body = await resp.text()
                    raise DataSourceError(
                        ctx.source,
                        f"HTTP {resp.status}: {body[:500]}",
                        status_code=resp.status,
                    )

                # --- Success ---
                body = await resp.text()
                logger.info(
                    "Success [%s.%s] elapsed=%.2fs",
                    ctx.source,
                    ctx.method,
                    time.monotonic() - start,
                )
                return body

            except (UnicodeDecodeError, aiohttp.ContentTypeError) as e:
                # Not retried
                logger.error(
                    "Undecodable response [%s.%s]: %s", ctx.source, ctx.method, e
                )
                raise DataSourceError(ctx.source, f"Undecodable response body: {e}")

            except asyncio.TimeoutError:
                elapsed = time.monotonic() - start
                last_error = DataSourceError(
                    ctx.source, f"Timeout after {elapsed:.1f}s"
                )
                logger.warning(
                    "Timeout [%s.%s] attempt=%d elapsed=%.1fs",
                    ctx.source,
                    ctx.method,
                    attempt + 1,
                    elapsed,
                )

            except aiohttp.ClientError as e:
                last_error = DataSourceError(ctx.source, f"Connection error: {e}")
                logger.warning(
                    "Connection error [%s.%s] attempt=%d: %s",
                    ctx.source,
                    ctx.method,
                    attempt + 1,
                    e,
                )

            # Exponential backoff before next attempt
            if attempt < retry.max_retries:
                await asyncio.sleep(self._backoff(attempt))

        # --- All retries exhausted ---
        logger.error(
            "All retries exhausted [%s.%s] after %.1fs: %s",
            ctx.source,
            ctx.method,
            time.monotonic() - start,
            last_error,
        )
        raise last_error or DataSourceError(ctx.source, "Request failed")

    # -- Convenience methods for subclasses ----------------------------------

    async def _rest_get(
        self,
        url: str,
        params: dict[str, Any],
        *,
        context: RequestContext | None = None,
    ) -> dict[str, Any]:
        """GET a JSON object. Anything other than a JSON object is an error."""
        body = await self._request(url, params=params, context=context)
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise DataSourceError(self._source_name, f"Malformed JSON: {e}")
        if not isinstance(data, dict):
            raise DataSourceError(
                self._source_name,
                f"Expected a JSON object, got {type(data).__name__}",
            )
        return data

    async def _rest_get_xml(
        self,
        url: str,
        params: dict[str, Any],
        *,
        context: RequestContext | None = None,
    ) -> str:
        """GET an XML document as raw text. Parsing is left to the caller."""
        return await self._request(url, params=params, context=context)
