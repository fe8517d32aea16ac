"""In-memory SendGrid delivery for tests.

:class:`DeliverySpy` runs the real config resolver, request builder, and
response interpreter, but replaces the HTTP POST with a canned response, so
tests can assert on the exact payload without a network.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx
import orjson

from ..sendgrid.config import SendGridConfig, resolve_config
from ..sendgrid.request import BuiltRequest, build_request
from ..sendgrid.response import DeliveryReceipt, interpret_response
from ..sendgrid.transport import TransportResponse
from ...domain.message import Email


def _empty_request_list() -> list[BuiltRequest]:
    return []


@dataclass
class DeliverySpy:
    """Captures SendGrid requests instead of sending them.

    Each test should create its own spy to avoid cross-test pollution.

    Attributes:
        requests: Every request that would have been POSTed, in order.
        status_code: Status the fake provider answers with.
        response_body: Body the fake provider answers with.
        raise_exception: When set, raised after the request is captured
            (e.g. a ``TransportError``).

    Example:
        >>> from gridmail.domain.message import new_email
        >>> spy = DeliverySpy()
        >>> spy.deliver(new_email(from_="foo@bar.com"), {"api_key": "123_abc"}).status_code
        202
        >>> spy.last_payload["from"]
        {'email': 'foo@bar.com'}
    """

    requests: list[BuiltRequest] = field(default_factory=_empty_request_list)
    status_code: int = 202
    response_body: bytes = b""
    raise_exception: Exception | None = None

    def clear(self) -> None:
        """Reset captured data for next test."""
        self.requests.clear()
        self.raise_exception = None

    @property
    def last_payload(self) -> dict[str, Any]:
        """JSON payload of the most recent request, decoded from the sent bytes."""
        if not self.requests:
            raise LookupError("No SendGrid request captured")
        return orjson.loads(self.requests[-1].body)  # type: ignore[no-any-return]

    def deliver(
        self,
        email: Email,
        config: SendGridConfig | Mapping[str, Any],
        *,
        client: httpx.Client | None = None,
    ) -> DeliveryReceipt:
        """Resolve, build, and capture the request, then interpret the canned response.

        Raises:
            ConfigurationError: When the API key cannot be resolved.
            DeliveryError: When ``status_code`` is not 2xx.
            Exception: ``raise_exception`` when set.
        """
        resolved = resolve_config(config)
        request = build_request(email, resolved)
        self.requests.append(request)
        if self.raise_exception is not None:
            raise self.raise_exception
        response = TransportResponse(status_code=self.status_code, body=self.response_body)
        return interpret_response(response, request, resolved.api_key)


__all__ = ["DeliverySpy"]
