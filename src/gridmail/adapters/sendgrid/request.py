"""Translate an :class:`Email` into a SendGrid v3 ``mail/send`` request.

Pure and deterministic: the same message and configuration always produce
byte-identical bodies. The body is serialized once with orjson and those
exact bytes are what the transport sends and what error redaction scans.

Wire shape (optional keys are omitted, never sent empty)::

    {
      "personalizations": [{"to": [...], "cc": [...], "bcc": [...],
                            "custom_args": {...}, "substitutions": {...}}],
      "from": {"email": ..., "name": ...},
      "subject": ..., "content": [...], "attachments": [...],
      "reply_to": {...}, "headers": {...}, "template_id": ...,
      "asm": {"group_id": ...},
      "mail_settings": {"bypass_list_management": {"enable": ...},
                        "sandbox_mode": {"enable": true}}
    }
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import orjson

from gridmail import __init__conf__
from gridmail.domain.message import Address, Attachment, Email, Headers

from .config import ResolvedConfig

REPLY_TO_HEADER = "reply-to"

JsonObject = dict[str, Any]


@dataclass(frozen=True, slots=True)
class BuiltRequest:
    """Ready-to-send HTTP request for the SendGrid API.

    Attributes:
        url: Absolute ``mail/send`` URL.
        headers: HTTP headers including the bearer Authorization header.
        body: Serialized JSON payload; exactly the bytes put on the wire.
        payload: The dictionary *body* was serialized from.
    """

    url: str
    headers: Mapping[str, str]
    body: bytes
    payload: Mapping[str, Any]

    def __repr__(self) -> str:
        return f"BuiltRequest(url={self.url!r}, body_size={len(self.body)})"


def _address(address: Address) -> JsonObject:
    """Render an address, including ``name`` only when one was given.

    Example:
        >>> _address(Address(email="to@bar.com", name="To"))
        {'email': 'to@bar.com', 'name': 'To'}
        >>> _address(Address(email="noname@bar.com"))
        {'email': 'noname@bar.com'}
    """
    rendered: JsonObject = {"email": address.email}
    if address.has_name:
        rendered["name"] = address.name
    return rendered


def _reply_to(value: str | Address) -> JsonObject:
    if isinstance(value, Address):
        return _address(value)
    return {"email": value}


def _personalization(email: Email) -> JsonObject:
    personalization: JsonObject = {"to": [_address(a) for a in email.to]}
    if email.cc:
        personalization["cc"] = [_address(a) for a in email.cc]
    if email.bcc:
        personalization["bcc"] = [_address(a) for a in email.bcc]
    if email.sendgrid.custom_args is not None:
        personalization["custom_args"] = dict(email.sendgrid.custom_args)
    if email.sendgrid.substitutions is not None:
        personalization["substitutions"] = dict(email.sendgrid.substitutions)
    return personalization


def _content(email: Email) -> list[JsonObject]:
    content: list[JsonObject] = []
    if email.text_body is not None:
        content.append({"type": "text/plain", "value": email.text_body})
    if email.html_body is not None:
        content.append({"type": "text/html", "value": email.html_body})
    return content


def _attachment(attachment: Attachment) -> JsonObject:
    """Render an attachment with base64 content.

    Example:
        >>> _attachment(Attachment("attachment.txt", "text/plain", b"Test Attachment\\n"))["content"]
        'VGVzdCBBdHRhY2htZW50Cg=='
    """
    return {
        "type": attachment.content_type,
        "filename": attachment.filename,
        "content": base64.b64encode(attachment.data).decode("ascii"),
    }


def _custom_headers(headers: Headers) -> dict[str, str]:
    return {name: str(value) for name, value in headers.without(REPLY_TO_HEADER).items()}


def _mail_settings(email: Email, config: ResolvedConfig) -> JsonObject:
    settings: JsonObject = {}
    if email.sendgrid.bypass_list_management is not None:
        settings["bypass_list_management"] = {"enable": email.sendgrid.bypass_list_management}
    if config.sandbox:
        settings["sandbox_mode"] = {"enable": True}
    return settings


def build_payload(email: Email, config: ResolvedConfig) -> JsonObject:
    """Map *email* onto the SendGrid ``mail/send`` JSON structure.

    Args:
        email: Message to translate, optionally decorated by the helpers.
        config: Resolved configuration; only ``sandbox`` affects the body.

    Returns:
        Payload dictionary ready for serialization.

    Example:
        >>> from gridmail.domain.message import new_email
        >>> payload = build_payload(new_email(from_="foo@bar.com"), ResolvedConfig(api_key="k"))
        >>> payload
        {'personalizations': [{'to': []}], 'from': {'email': 'foo@bar.com'}}
    """
    extensions = email.sendgrid
    payload: JsonObject = {
        "personalizations": [_personalization(email)],
        "from": _address(email.from_),
    }
    if email.subject is not None:
        payload["subject"] = email.subject

    # Templated sends let SendGrid render the body.
    content = _content(email)
    if content and extensions.template_id is None:
        payload["content"] = content

    if email.attachments:
        payload["attachments"] = [_attachment(a) for a in email.attachments]

    if REPLY_TO_HEADER in email.headers:
        payload["reply_to"] = _reply_to(email.headers[REPLY_TO_HEADER])
    custom_headers = _custom_headers(email.headers)
    if custom_headers:
        payload["headers"] = custom_headers

    if extensions.template_id is not None:
        payload["template_id"] = extensions.template_id
    if extensions.asm_group_id is not None:
        payload["asm"] = {"group_id": extensions.asm_group_id}

    mail_settings = _mail_settings(email, config)
    if mail_settings:
        payload["mail_settings"] = mail_settings
    return payload


def build_headers(config: ResolvedConfig) -> dict[str, str]:
    """Return HTTP headers for a JSON request authorized with the API key.

    Example:
        >>> build_headers(ResolvedConfig(api_key="123_abc"))["Authorization"]
        'Bearer 123_abc'
    """
    return {
        "Authorization": f"Bearer {config.api_key}",
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": f"{__init__conf__.name}/{__init__conf__.version}",
    }


def build_request(email: Email, config: ResolvedConfig) -> BuiltRequest:
    """Build the complete ``POST mail/send`` request for *email*.

    Example:
        >>> from gridmail.domain.message import new_email
        >>> request = build_request(new_email(from_="foo@bar.com"), ResolvedConfig(api_key="123_abc"))
        >>> request.url
        'https://api.sendgrid.com/v3/mail/send'
        >>> request.body
        b'{"personalizations":[{"to":[]}],"from":{"email":"foo@bar.com"}}'
    """
    payload = build_payload(email, config)
    return BuiltRequest(
        url=config.send_url,
        headers=build_headers(config),
        body=orjson.dumps(payload),
        payload=payload,
    )


__all__ = [
    "REPLY_TO_HEADER",
    "BuiltRequest",
    "build_headers",
    "build_payload",
    "build_request",
]
