import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from courtrecords.config import USER_AGENT, Settings
from courtrecords.models.search import ProviderId, ValidatedRequest
from courtrecords.providers.endpoints import EndpointSpec

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def is_retriable_status(status: int) -> bool:
    return status == 429 or status >= 500


class TransportFailure(Exception):
    """A provider call that did not produce a usable HTTP response.

    ``transient`` is True when retries were exhausted (timeouts, 429, 5xx)
    and False for a status that retrying cannot fix.
    """

    def __init__(self, message: str, *, transient: bool, status: int | None = None) -> None:
        super().__init__(message)
        self.transient = transient
        self.status = status


class _RetriableStatus(Exception):
    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


@dataclass(frozen=True)
class RawResponse:
    provider: ProviderId
    status: int
    url: str
    payload: Any  # decoded JSON, None when the body was not JSON
    text: str


class RetryingTransport:
    """HTTP calls to providers with bounded exponential-backoff retries.

    Retries 429, 5xx, timeouts and connection errors. Attempt ``n`` (from 0)
    waits ``retry_base_delay * 2**n`` before the next try, for at most
    ``max_retries`` retries.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self.client = client or httpx.AsyncClient(
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            },
            follow_redirects=True,
        )
        self._sleep = sleep

    async def close(self) -> None:
        await self.client.aclose()

    async def send(
        self,
        provider: ProviderId,
        spec: EndpointSpec,
        request: ValidatedRequest,
        timeout: float,
    ) -> RawResponse:
        """Call the endpoint ``spec`` describes for ``request``."""
        body = spec.build_body(request)
        path = spec.path(request)
        if spec.method == "GET":
            return await self.request(provider, "GET", path, params=body, timeout=timeout)
        return await self.request(provider, spec.method, path, json=body, timeout=timeout)

    async def request(
        self,
        provider: ProviderId,
        method: str,
        path: str,
        *,
        timeout: float,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> RawResponse:
        provider_settings = self.settings.provider(provider)
        url = f"{provider_settings.base_url}{path}"
        headers = {"Authorization": f"Bearer {provider_settings.api_key}"}
        tries = self.settings.max_retries + 1

        retrying = AsyncRetrying(
            stop=stop_after_attempt(tries),
            wait=wait_exponential(multiplier=self.settings.retry_base_delay, exp_base=2),
            retry=retry_if_exception_type((_RetriableStatus, httpx.TransportError)),
            sleep=self._sleep,
            before_sleep=self._log_retry(provider, method, url),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    response = await self.client.request(
                        method,
                        url,
                        params=params or None,
                        json=json,
                        headers=headers,
                        timeout=timeout,
                    )
                    if is_retriable_status(response.status_code):
                        raise _RetriableStatus(response)
        except _RetriableStatus as e:
            status = e.response.status_code
            raise TransportFailure(
                f"{provider.value}: HTTP {status} after {tries} attempts",
                transient=True,
                status=status,
            ) from e
        except httpx.TimeoutException as e:
            raise TransportFailure(
                f"{provider.value}: timed out after {tries} attempts ({timeout:.0f}s each)",
                transient=True,
            ) from e
        except httpx.TransportError as e:
            raise TransportFailure(
                f"{provider.value}: connection failed after {tries} attempts: {e}",
                transient=True,
            ) from e

        if response.status_code >= 400:
            raise TransportFailure(
                f"{provider.value}: HTTP {response.status_code} {response.reason_phrase}",
                transient=False,
                status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None

        return RawResponse(
            provider=provider,
            status=response.status_code,
            url=str(response.url),
            payload=payload,
            text=response.text,
        )

    @staticmethod
    def _log_retry(provider: ProviderId, method: str, url: str) -> Callable[[RetryCallState], None]:
        def log(state: RetryCallState) -> None:
            error = state.outcome.exception() if state.outcome else None
            delay = state.next_action.sleep if state.next_action else 0.0
            logger.info(
                f"{provider.value} {method} {url} failed ({error}), "
                f"retry {state.attempt_number} in {delay:.2f}s"
            )

        return log
