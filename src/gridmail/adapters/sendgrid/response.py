"""Classify SendGrid responses and redact the API key from failures.

The request text in a :class:`DeliveryError` is decoded from the very bytes
that were sent, then scrubbed of the key; it is never re-serialized from the
payload dictionary.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gridmail.domain.errors import FILTERED, DeliveryError

if TYPE_CHECKING:
    from .request import BuiltRequest
    from .transport import TransportResponse

MESSAGE_ID_HEADER = "x-message-id"


@dataclass(frozen=True, slots=True)
class DeliveryReceipt:
    """Successful hand-off to SendGrid.

    Attributes:
        status_code: 2xx status returned by SendGrid (202 in production).
        message_id: ``X-Message-Id`` response header when SendGrid sends one.
    """

    status_code: int
    message_id: str | None = None


def redact(text: str, secret: str) -> str:
    """Replace every occurrence of *secret* in *text* with ``[FILTERED]``.

    Example:
        >>> redact('{"auth": "Bearer 123_abc", "echo": "123_abc"}', "123_abc")
        '{"auth": "Bearer [FILTERED]", "echo": "[FILTERED]"}'
        >>> redact("nothing to hide", "")
        'nothing to hide'
    """
    if not secret:
        return text
    return text.replace(secret, FILTERED)


def _decode(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def is_success(status_code: int) -> bool:
    """True for any 2xx status."""
    return 200 <= status_code < 300


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def interpret_response(response: TransportResponse, request: BuiltRequest, api_key: str) -> DeliveryReceipt:
    """Return a receipt for 2xx responses; raise DeliveryError otherwise.

    Args:
        response: Raw transport response.
        request: The request that produced *response*.
        api_key: Key to scrub from everything attached to the error.

    Returns:
        Receipt with the status and provider message id.

    Raises:
        DeliveryError: Status outside 2xx. Request and response text are
            redacted, including provider echoes of the key.
    """
    if is_success(response.status_code):
        return DeliveryReceipt(
            status_code=response.status_code,
            message_id=_header(response.headers, MESSAGE_ID_HEADER),
        )
    raise DeliveryError(
        status_code=response.status_code,
        response_body=redact(_decode(response.body), api_key),
        request_body=redact(_decode(request.body), api_key),
        params={
            "url": request.url,
            "authorization": redact(request.headers.get("Authorization", ""), api_key),
        },
    )


__all__ = [
    "MESSAGE_ID_HEADER",
    "DeliveryReceipt",
    "interpret_response",
    "is_success",
    "redact",
]
