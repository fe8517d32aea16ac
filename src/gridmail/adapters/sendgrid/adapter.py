"""SendGrid delivery adapter: resolve, build, send, interpret.

Provides :func:`deliver` and :func:`deliver_async`, the single entry points
that turn a generic :class:`~gridmail.domain.message.Email` into a SendGrid
API call. The four steps run strictly in sequence; configuration errors
surface before any network I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from gridmail.domain.errors import DeliveryError
from gridmail.domain.message import Email

from .config import ResolvedConfig, SendGridConfig, resolve_config
from .request import BuiltRequest, build_request
from .response import DeliveryReceipt, interpret_response
from .transport import TransportResponse, send_request, send_request_async

logger = logging.getLogger(__name__)


def supports_attachments() -> bool:
    """SendGrid accepts attachments inline in the JSON body."""
    return True


def _prepare(email: Email, config: SendGridConfig | Mapping[str, Any]) -> tuple[ResolvedConfig, BuiltRequest]:
    resolved = resolve_config(config)
    request = build_request(email, resolved)
    logger.info(
        "Sending email via SendGrid",
        extra={
            "sender": email.from_.email,
            "recipient_count": len(email.recipients),
            "subject": email.subject,
            "template_id": email.sendgrid.template_id,
            "attachment_count": len(email.attachments),
            "sandbox": resolved.sandbox,
        },
    )
    return resolved, request


def _finish(response: TransportResponse, request: BuiltRequest, resolved: ResolvedConfig) -> DeliveryReceipt:
    try:
        receipt = interpret_response(response, request, resolved.api_key)
    except DeliveryError as exc:
        logger.error(
            "SendGrid rejected email",
            extra={"status_code": exc.status_code, "response": exc.response_body},
        )
        raise
    logger.info(
        "SendGrid accepted email",
        extra={"status_code": receipt.status_code, "message_id": receipt.message_id},
    )
    return receipt


def deliver(
    email: Email,
    config: SendGridConfig | Mapping[str, Any],
    *,
    client: httpx.Client | None = None,
) -> DeliveryReceipt:
    """Deliver *email* through the SendGrid v3 API.

    Args:
        email: Message to send, optionally decorated by the helpers.
        config: SendGrid configuration (model or plain mapping).
        client: Optional caller-owned httpx client, e.g. for connection
            reuse or a mock transport in tests.

    Returns:
        Receipt for the accepted message.

    Raises:
        ConfigurationError: API key missing or unresolved (before any I/O).
        TransportError: SendGrid could not be reached.
        DeliveryError: SendGrid answered with a non-2xx status.

    Example:
        >>> from gridmail.domain.message import new_email
        >>> deliver(new_email(from_="foo@bar.com"), {"api_key": None})  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        ConfigurationError: no API key set
    """
    resolved, request = _prepare(email, config)
    response = send_request(request, api_key=resolved.api_key, timeout=resolved.timeout, client=client)
    return _finish(response, request, resolved)


async def deliver_async(
    email: Email,
    config: SendGridConfig | Mapping[str, Any],
    *,
    client: httpx.AsyncClient | None = None,
) -> DeliveryReceipt:
    """Awaitable twin of :func:`deliver`; run one task per message for concurrency."""
    resolved, request = _prepare(email, config)
    response = await send_request_async(request, api_key=resolved.api_key, timeout=resolved.timeout, client=client)
    return _finish(response, request, resolved)


__all__ = [
    "deliver",
    "deliver_async",
    "supports_attachments",
]
