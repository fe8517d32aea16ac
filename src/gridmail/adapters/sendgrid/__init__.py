"""SendGrid adapter - HTTP JSON API delivery.

Structure:
    * :mod:`.config` - Configuration model, API-key resolution, and loader
    * :mod:`.request` - Email to ``mail/send`` request translation
    * :mod:`.transport` - httpx POST (sync and async)
    * :mod:`.response` - Response classification and secret redaction
    * :mod:`.adapter` - ``deliver`` entry points wiring the above

Contents:
    * :func:`.adapter.deliver` - Primary delivery interface
    * :func:`.adapter.deliver_async` - Awaitable delivery interface
    * :class:`.config.SendGridConfig` - Raw configuration
    * :func:`.config.resolve_config` - Pre-flight API-key resolution
    * :func:`.request.build_request` - Pure request builder
    * :func:`.response.interpret_response` - Response interpreter
"""

from __future__ import annotations

from .adapter import deliver, deliver_async, supports_attachments
from .config import (
    DEFAULT_BASE_URI,
    EnvKey,
    ResolvedConfig,
    SendGridConfig,
    load_sendgrid_config_from_dict,
    resolve_config,
)
from .request import BuiltRequest, build_headers, build_payload, build_request
from .response import DeliveryReceipt, interpret_response, redact
from .transport import TransportResponse, send_request, send_request_async

__all__ = [
    "DEFAULT_BASE_URI",
    "BuiltRequest",
    "DeliveryReceipt",
    "EnvKey",
    "ResolvedConfig",
    "SendGridConfig",
    "TransportResponse",
    "build_headers",
    "build_payload",
    "build_request",
    "deliver",
    "deliver_async",
    "interpret_response",
    "load_sendgrid_config_from_dict",
    "redact",
    "resolve_config",
    "send_request",
    "send_request_async",
    "supports_attachments",
]
