"""HTTP plumbing shared by provider adapters.

Transport failures are retried, then become NetworkError; any answer that
arrived but reports a failure becomes UploadError. Nothing from httpx escapes
these helpers.
"""

import asyncio
import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from mediaflowz.errors.exceptions import NetworkError, UploadError
from mediaflowz.logging.logger import Log

USER_AGENT = "mediaflowz/1.0"


@asynccontextmanager
async def http_client(
    client: httpx.AsyncClient | None,
    timeout: float,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
    ) as owned:
        yield owned


async def send(
    client: httpx.AsyncClient | None,
    method: str,
    url: str,
    *,
    timeout: float,
    provider: str,
    retries: int = 0,
    retry_delay: float = 0.0,
    **kwargs: Any,
) -> httpx.Response:
    """Perform one request, retrying transport failures up to `retries` times.

    Only failures where no response arrived are retried; any HTTP answer is
    returned as is. Raises NetworkError once every attempt has failed.
    """
    attempts = max(retries, 0) + 1
    async with http_client(client, timeout) as http:
        for attempt in range(1, attempts + 1):
            try:
                return await http.request(method, url, timeout=timeout, **kwargs)
            except httpx.TransportError as exc:
                if attempt == attempts:
                    Log.error(
                        f"{provider} request failed after {attempts} attempt(s)",
                        provider=provider,
                        attempts=attempts,
                    )
                    if isinstance(exc, httpx.TimeoutException):
                        raise NetworkError(f"{provider} request timed out: {exc}") from exc
                    raise NetworkError(f"{provider} network error: {exc}") from exc
                Log.warning(
                    f"{provider} request failed ({type(exc).__name__}), "
                    f"retrying in {retry_delay}s",
                    provider=provider,
                    attempt=attempt,
                    retries=retries,
                )
                await asyncio.sleep(retry_delay)
    raise AssertionError("unreachable")


def parse_json(response: httpx.Response, provider: str) -> dict[str, Any]:
    """Decode a JSON object body; UploadError if it is not one."""
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise UploadError(
            f"{provider} returned invalid JSON (HTTP {response.status_code}): {exc}"
        ) from exc
    if not isinstance(data, dict):
        raise UploadError(f"{provider} response must be a JSON object")
    return data


def error_detail(response: httpx.Response) -> str:
    """Best-effort human-readable reason from a failed response body."""
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text[:200] or response.reason_phrase
    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            return str(errors[0].get("message", errors[0]))
        error = data.get("error")
        if isinstance(error, dict) and "message" in error:
            return str(error["message"])
        if "Message" in data:
            return str(data["Message"])
    return response.text[:200] or response.reason_phrase


def ensure_success(response: httpx.Response, provider: str) -> None:
    """Raise UploadError for any HTTP error status."""
    if response.is_error:
        raise UploadError(
            f"{provider} request failed with HTTP {response.status_code}: "
            f"{error_detail(response)}"
        )


def strip_scheme(domain: str) -> str:
    """`https://cdn.example.com/` -> `cdn.example.com`."""
    for scheme in ("https://", "http://"):
        if domain.startswith(scheme):
            domain = domain[len(scheme):]
    return domain.rstrip("/")
