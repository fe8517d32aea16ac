"""SendGrid-specific message decorators.

Each helper returns a new :class:`~gridmail.domain.message.Email` with its
:class:`~gridmail.domain.message.SendGridExtensions` updated. Nothing here
touches the network; the request builder reads the values later.

Example:
    >>> from gridmail.domain.message import new_email
    >>> email = new_email(from_="foo@bar.com")
    >>> email = substitute(with_template(email, "a4ca8ac9"), "%foo%", "bar")
    >>> email.sendgrid.template_id, dict(email.sendgrid.substitutions or {})
    ('a4ca8ac9', {'%foo%': 'bar'})
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from .message import Email


def _update(email: Email, **changes: Any) -> Email:
    return replace(email, sendgrid=replace(email.sendgrid, **changes))


def with_template(email: Email, template_id: str) -> Email:
    """Send *email* through the SendGrid transactional template *template_id*.

    Raw text/html content is not sent for templated messages.
    """
    if not isinstance(template_id, str) or not template_id:
        raise TypeError(f"template_id must be a non-empty string, got {template_id!r}")
    return _update(email, template_id=template_id)


def substitute(email: Email, tag: str, value: str) -> Email:
    """Add a template substitution; earlier substitutions are kept.

    Example:
        >>> from gridmail.domain.message import new_email
        >>> email = substitute(substitute(new_email(from_="a@b.c"), "%a%", "1"), "%b%", "2")
        >>> dict(email.sendgrid.substitutions or {})
        {'%a%': '1', '%b%': '2'}
    """
    if not isinstance(tag, str):
        raise TypeError(f"substitution tag must be a string, got {tag!r}")
    merged = {**(email.sendgrid.substitutions or {}), tag: value}
    return _update(email, substitutions=MappingProxyType(merged))


def with_asm_group_id(email: Email, asm_group_id: int) -> Email:
    """Attach the unsubscribe (ASM) group *asm_group_id*."""
    if isinstance(asm_group_id, bool) or not isinstance(asm_group_id, int):
        raise TypeError(f"asm_group_id must be an integer, got {asm_group_id!r}")
    return _update(email, asm_group_id=asm_group_id)


def with_bypass_list_management(email: Email, enabled: bool) -> Email:
    """Toggle SendGrid's bypass_list_management mail setting."""
    if not isinstance(enabled, bool):
        raise TypeError(f"bypass_list_management must be a boolean, got {enabled!r}")
    return _update(email, bypass_list_management=enabled)


def with_custom_args(email: Email, custom_args: Mapping[str, str]) -> Email:
    """Merge *custom_args* into the personalization's custom arguments."""
    merged = {**(email.sendgrid.custom_args or {}), **{str(key): value for key, value in custom_args.items()}}
    return _update(email, custom_args=MappingProxyType(merged))


__all__ = [
    "substitute",
    "with_asm_group_id",
    "with_bypass_list_management",
    "with_custom_args",
    "with_template",
]
