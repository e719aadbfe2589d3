from __future__ import annotations

import asyncio
from typing import Any

import httpx


class ProviderCallError(RuntimeError):
    def __init__(self, provider: str, detail: str, *, status_code: int | None = None) -> None:
        self.provider = provider
        self.detail = detail
        self.status_code = status_code
        suffix = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{provider}: {detail}{suffix}")


def provider_error_message(response: httpx.Response) -> str:
    message = response.text.strip()
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict):
            msg = err.get("message")
            if isinstance(msg, str) and msg.strip():
                return msg.strip()
        msg = payload.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return message or f"HTTP {response.status_code}"


async def post_json(
    *,
    provider: str,
    url: str,
    timeout_seconds: float,
    transport: httpx.AsyncBaseTransport | None = None,
    **request_kwargs: Any,
) -> dict[str, Any]:
    """POST to a provider and return its decoded JSON object.

    Every failure mode (timeout, connection error, non-2xx, non-JSON body)
    surfaces as ProviderCallError so callers only classify one exception.
    """
    timeout = httpx.Timeout(timeout_seconds, connect=min(10.0, timeout_seconds))
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await asyncio.wait_for(client.post(url, **request_kwargs), timeout_seconds)
    except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
        raise ProviderCallError(provider, "provider timed out") from exc
    except httpx.HTTPError as exc:
        raise ProviderCallError(provider, f"failed to reach provider: {exc}") from exc

    if response.status_code >= 400:
        raise ProviderCallError(provider, provider_error_message(response), status_code=response.status_code)

    try:
        payload = response.json()
    except ValueError as exc:
        raise ProviderCallError(provider, "provider returned invalid JSON", status_code=response.status_code) from exc
    if not isinstance(payload, dict):
        raise ProviderCallError(provider, "provider returned an unexpected payload", status_code=response.status_code)
    return payload
