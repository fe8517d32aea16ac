"""Domain-specific exceptions for typed error handling at boundaries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

#: Marker substituted for the API key wherever a request is surfaced.
FILTERED = "[FILTERED]"


class ConfigurationError(Exception):
    """Missing, invalid, or incomplete configuration.

    Raised before any network I/O when the SendGrid API key cannot be
    resolved to a concrete value. Typically caught at CLI boundaries to
    provide user-friendly error messages.

    Example:
        >>> from gridmail.domain.errors import ConfigurationError
        >>> err = ConfigurationError("no API key set")
        >>> str(err)
        'no API key set'
    """


class TransportError(Exception):
    """The HTTP request never produced a provider response.

    Covers connection refusals, DNS failures, and timeouts. Distinct from
    :class:`DeliveryError`, which means SendGrid answered with a failure.

    Example:
        >>> err = TransportError("Connection refused")
        >>> str(err)
        'Connection refused'
    """


class DeliveryError(Exception):
    """SendGrid answered with a non-2xx status.

    Carries the HTTP status, the provider's response body, and the outbound
    request body. Both bodies are redacted before the error is built, so the
    API key never travels with the exception.

    Attributes:
        status_code: HTTP status returned by SendGrid.
        response_body: Response text with the API key replaced by ``[FILTERED]``.
        request_body: Text of the bytes that were sent, with the API key
            replaced by ``[FILTERED]``.
        params: Redacted request summary, always holding ``"key": "[FILTERED]"``.

    Example:
        >>> err = DeliveryError(status_code=500, response_body="Error!!", request_body="{}")
        >>> err.status_code
        500
        >>> err.params["key"]
        '[FILTERED]'
        >>> '"key": "[FILTERED]"' in str(err)
        True
    """

    def __init__(
        self,
        *,
        status_code: int,
        response_body: str,
        request_body: str,
        params: Mapping[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        self.request_body = request_body
        self.params: dict[str, Any] = {**dict(params or {}), "key": FILTERED}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        summary = ", ".join(f'"{name}": "{value}"' for name, value in self.params.items())
        return (
            f"There was a problem sending the email through the SendGrid API.\n\n"
            f"Here is the response:\n\n"
            f"status: {self.status_code}\n"
            f"body: {self.response_body}\n\n"
            f"Here are the params we sent:\n\n"
            f"{{{summary}}}\n"
            f"body: {self.request_body}"
        )

    def __reduce__(self) -> tuple[Any, tuple[Any, ...]]:
        fields = {
            "status_code": self.status_code,
            "response_body": self.response_body,
            "request_body": self.request_body,
            "params": self.params,
        }
        return _restore_delivery_error, (type(self), fields)


def _restore_delivery_error(cls: type[DeliveryError], fields: dict[str, Any]) -> DeliveryError:
    """Unpickle hook: rebuild through the keyword-only constructor."""
    return cls(**fields)


ApiError = DeliveryError


__all__ = [
    "FILTERED",
    "ApiError",
    "ConfigurationError",
    "DeliveryError",
    "TransportError",
]
