"""HTTP transport for SendGrid requests.

Issues exactly one POST per request via httpx and hands back the raw status,
headers, and body. Nothing is interpreted or retried here; network-level
failures become :class:`~gridmail.domain.errors.TransportError`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from gridmail.domain.errors import TransportError

from .request import BuiltRequest
from .response import redact

logger = logging.getLogger(__name__)


def _empty_headers() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Raw provider answer: status, headers, and undecoded body."""

    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=_empty_headers)


def _transport_error(exc: httpx.TransportError, request: BuiltRequest, api_key: str) -> TransportError:
    kind = type(exc).__name__
    detail = redact(str(exc), api_key) or kind
    return TransportError(f"Could not reach SendGrid at {request.url} ({kind}): {detail}")


def _to_response(response: httpx.Response) -> TransportResponse:
    return TransportResponse(
        status_code=response.status_code,
        body=response.content,
        headers=dict(response.headers),
    )


def send_request(
    request: BuiltRequest,
    *,
    api_key: str,
    timeout: float = 30.0,
    client: httpx.Client | None = None,
) -> TransportResponse:
    """POST *request* and return the raw response.

    Args:
        request: Request produced by :func:`~.request.build_request`.
        api_key: The key used to authorize *request*; scrubbed from error text.
        timeout: Seconds before connect/read/write give up.
        client: Optional caller-owned client (left open). When None, a
            short-lived client is created for this call.

    Returns:
        Status, headers, and body exactly as received.

    Raises:
        TransportError: Connection refused, DNS failure, timeout, or any
            other error raised before a response arrived.
    """
    logger.debug("POST %s", request.url, extra={"body_size": len(request.body)})
    try:
        if client is not None:
            response = client.post(request.url, content=request.body, headers=dict(request.headers), timeout=timeout)
        else:
            with httpx.Client(timeout=timeout) as own_client:
                response = own_client.post(request.url, content=request.body, headers=dict(request.headers))
    except httpx.TransportError as exc:
        logger.debug("SendGrid transport failed", exc_info=True)
        raise _transport_error(exc, request, api_key) from exc
    return _to_response(response)


async def send_request_async(
    request: BuiltRequest,
    *,
    api_key: str,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
) -> TransportResponse:
    """Awaitable twin of :func:`send_request` built on ``httpx.AsyncClient``."""
    logger.debug("POST %s", request.url, extra={"body_size": len(request.body)})
    try:
        if client is not None:
            response = await client.post(
                request.url, content=request.body, headers=dict(request.headers), timeout=timeout
            )
        else:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.post(request.url, content=request.body, headers=dict(request.headers))
    except httpx.TransportError as exc:
        logger.debug("SendGrid transport failed", exc_info=True)
        raise _transport_error(exc, request, api_key) from exc
    return _to_response(response)


__all__ = [
    "TransportResponse",
    "send_request",
    "send_request_async",
]
