"""SendGrid delivery adapter for provider-agnostic email messages.

Public surface, routed through the architectural layers:

- Domain: message model, SendGrid helpers, errors
- Adapters: ``deliver`` / ``deliver_async`` and the SendGrid config model
- Composition: layered configuration loader
- Metadata: package information

Example:
    >>> from gridmail import new_email, with_template, deliver
    >>> email = with_template(new_email(from_="foo@bar.com", to=["to@bar.com"]), "d-123")
    >>> deliver(email, {"api_key": {"from_env": "SENDGRID_API_KEY"}})  # doctest: +SKIP
    DeliveryReceipt(status_code=202, message_id='...')
"""

from __future__ import annotations

# Metadata
from .__init__conf__ import print_info

# Adapter exports
from .adapters.sendgrid import (
    DeliveryReceipt,
    EnvKey,
    SendGridConfig,
    deliver,
    deliver_async,
    resolve_config,
    supports_attachments,
)

# Composition exports (wired adapters)
from .composition import get_config

# Domain exports
from .domain import (
    Address,
    ApiError,
    Attachment,
    ConfigurationError,
    DeliveryError,
    Email,
    TransportError,
    new_email,
    put_attachment,
    put_header,
    substitute,
    with_asm_group_id,
    with_bypass_list_management,
    with_custom_args,
    with_template,
)

__all__ = [
    "Address",
    "ApiError",
    "Attachment",
    "ConfigurationError",
    "DeliveryError",
    "DeliveryReceipt",
    "Email",
    "EnvKey",
    "SendGridConfig",
    "TransportError",
    "deliver",
    "deliver_async",
    "get_config",
    "new_email",
    "print_info",
    "put_attachment",
    "put_header",
    "resolve_config",
    "substitute",
    "supports_attachments",
    "with_asm_group_id",
    "with_bypass_list_management",
    "with_custom_args",
    "with_template",
]
