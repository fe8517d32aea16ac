"""Domain layer - pure business logic with no I/O or framework dependencies.

Contents:
    * :mod:`.message` - Provider-agnostic email message model and builders
    * :mod:`.helpers` - SendGrid template/extension decorators
    * :mod:`.errors` - Domain exception types
"""

from __future__ import annotations

from .enums import OutputFormat
from .errors import FILTERED, ApiError, ConfigurationError, DeliveryError, TransportError
from .helpers import (
    substitute,
    with_asm_group_id,
    with_bypass_list_management,
    with_custom_args,
    with_template,
)
from .message import (
    Address,
    Attachment,
    Email,
    Headers,
    SendGridExtensions,
    new_email,
    normalize_address,
    normalize_addresses,
    put_attachment,
    put_header,
)

__all__ = [
    # Message
    "Address",
    "Attachment",
    "Email",
    "Headers",
    "SendGridExtensions",
    "new_email",
    "normalize_address",
    "normalize_addresses",
    "put_attachment",
    "put_header",
    # Helpers
    "substitute",
    "with_asm_group_id",
    "with_bypass_list_management",
    "with_custom_args",
    "with_template",
    # Enums
    "OutputFormat",
    # Errors
    "FILTERED",
    "ApiError",
    "ConfigurationError",
    "DeliveryError",
    "TransportError",
]
