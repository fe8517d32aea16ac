"""Provider-agnostic email message model.

Immutable value types describing an email before any provider formatting:

Contents:
    * :class:`Address` - display name + address pair.
    * :class:`Attachment` - filename, content type and raw bytes.
    * :class:`Headers` - case-insensitive header collection.
    * :class:`SendGridExtensions` - typed SendGrid directives (template, ASM, ...).
    * :class:`Email` - the message itself.
    * :func:`new_email`, :func:`put_header`, :func:`put_attachment` - builders.

Every builder returns a new value; a message handed to the adapter is never
mutated.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Union

AddressLike = Union["Address", str, tuple[str | None, str]]
HeaderValue = Union[str, "Address"]

_DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class Address:
    """Email address with an optional display name.

    Example:
        >>> Address(email="to@bar.com", name="To").has_name
        True
        >>> Address(email="to@bar.com", name="").has_name
        False
    """

    email: str
    name: str | None = None

    @property
    def has_name(self) -> bool:
        """True when a non-empty display name is present."""
        return bool(self.name)

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>" if self.has_name else self.email


def _is_pair(value: object) -> bool:
    """True for ``(name, email)``; a first element holding ``@`` is an address, not a name."""
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and (value[0] is None or (isinstance(value[0], str) and "@" not in value[0]))
        and isinstance(value[1], str)
    )


def normalize_address(value: AddressLike) -> Address:
    """Coerce a bare string, ``(name, email)`` tuple, or Address to Address.

    Example:
        >>> normalize_address("foo@bar.com")
        Address(email='foo@bar.com', name=None)
        >>> normalize_address(("Foo", "foo@bar.com"))
        Address(email='foo@bar.com', name='Foo')
    """
    if isinstance(value, Address):
        return value
    if isinstance(value, str):
        return Address(email=value)
    if _is_pair(value):
        name, email = value  # type: ignore[misc]
        return Address(email=email, name=name)
    raise TypeError(f"Cannot interpret {value!r} as an email address")


def normalize_addresses(values: AddressLike | Iterable[AddressLike] | None) -> tuple[Address, ...]:
    """Normalize a single address or a sequence of them, preserving order.

    ``("Name", "a@x.com")`` is one named recipient. A tuple whose first element
    contains ``@``, such as ``("a@x.com", "b@x.com")``, is a sequence of
    recipients.

    Example:
        >>> [a.email for a in normalize_addresses(("a@x.com", "b@x.com"))]
        ['a@x.com', 'b@x.com']
        >>> normalize_addresses(("A", "a@x.com"))
        (Address(email='a@x.com', name='A'),)
    """
    if values is None:
        return ()
    if isinstance(values, (str, Address)) or _is_pair(values):
        return (normalize_address(values),)
    return tuple(normalize_address(value) for value in values)


@dataclass(frozen=True, slots=True)
class Attachment:
    """File attached to an email."""

    filename: str
    content_type: str
    data: bytes

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> Attachment:
        """Read *path* and guess its content type from the extension.

        Raises:
            FileNotFoundError: When *path* does not exist.
        """
        file_path = Path(path)
        data = file_path.read_bytes()
        guessed, _ = mimetypes.guess_type(file_path.name)
        return cls(
            filename=filename or file_path.name,
            content_type=content_type or guessed or _DEFAULT_CONTENT_TYPE,
            data=data,
        )


class Headers(Mapping[str, HeaderValue]):
    """Immutable header collection with case-insensitive keys.

    Keys are compared lowercased. Setting a header that already exists under
    another casing replaces it and keeps the newest spelling, so when both
    ``reply-to`` and ``Reply-To`` are supplied the last one wins.

    Example:
        >>> headers = Headers({"reply-to": "a@x.com", "Reply-To": "b@x.com"})
        >>> headers["REPLY-TO"]
        'b@x.com'
        >>> list(headers)
        ['Reply-To']
    """

    __slots__ = ("_items",)

    def __init__(self, items: Mapping[str, HeaderValue] | Iterable[tuple[str, HeaderValue]] | None = None) -> None:
        self._items: dict[str, tuple[str, HeaderValue]] = {}
        pairs = items.items() if isinstance(items, Mapping) else (items or ())
        for name, value in pairs:
            self._items[name.lower()] = (name, _normalize_header_value(value))

    def __getitem__(self, name: str) -> HeaderValue:
        return self._items[name.lower()][1]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._items.items()))

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"

    def set(self, name: str, value: HeaderValue | tuple[str | None, str]) -> Headers:
        """Return a copy with *name* set to *value*."""
        merged = list(self.items())
        merged.append((name, _normalize_header_value(value)))
        return Headers(merged)

    def without(self, name: str) -> Headers:
        """Return a copy without *name* (any casing)."""
        return Headers((key, value) for key, value in self.items() if key.lower() != name.lower())


def _normalize_header_value(value: HeaderValue | tuple[str | None, str]) -> HeaderValue:
    if isinstance(value, (str, Address)):
        return value
    return normalize_address(value)


def _empty_headers() -> Headers:
    return Headers()


@dataclass(frozen=True, slots=True)
class SendGridExtensions:
    """SendGrid-only directives attached to a message.

    Populated through :mod:`gridmail.domain.helpers` and read only by the
    request builder. ``None`` means "not requested".
    """

    template_id: str | None = None
    substitutions: Mapping[str, str] | None = None
    asm_group_id: int | None = None
    bypass_list_management: bool | None = None
    custom_args: Mapping[str, str] | None = None

    def __hash__(self) -> int:
        return hash(
            (
                self.template_id,
                _frozen_items(self.substitutions),
                self.asm_group_id,
                self.bypass_list_management,
                _frozen_items(self.custom_args),
            )
        )


def _frozen_items(values: Mapping[str, str] | None) -> tuple[tuple[str, str], ...] | None:
    return None if values is None else tuple(sorted(values.items()))


@dataclass(frozen=True, slots=True)
class Email:
    """Immutable, provider-agnostic email message."""

    from_: Address
    to: tuple[Address, ...] = ()
    cc: tuple[Address, ...] = ()
    bcc: tuple[Address, ...] = ()
    subject: str | None = None
    text_body: str | None = None
    html_body: str | None = None
    headers: Headers = field(default_factory=_empty_headers)
    attachments: tuple[Attachment, ...] = ()
    sendgrid: SendGridExtensions = field(default_factory=SendGridExtensions)

    @property
    def recipients(self) -> tuple[Address, ...]:
        """All to/cc/bcc addresses in order."""
        return self.to + self.cc + self.bcc


def new_email(
    *,
    from_: AddressLike,
    to: AddressLike | Iterable[AddressLike] | None = None,
    cc: AddressLike | Iterable[AddressLike] | None = None,
    bcc: AddressLike | Iterable[AddressLike] | None = None,
    subject: str | None = None,
    text_body: str | None = None,
    html_body: str | None = None,
    headers: Mapping[str, HeaderValue | tuple[str | None, str]] | None = None,
) -> Email:
    """Build an :class:`Email` with normalized addresses and headers.

    Example:
        >>> email = new_email(from_=("From", "from@foo.com"), to=["to@bar.com"])
        >>> email.from_.name, email.to[0].email
        ('From', 'to@bar.com')
    """
    return Email(
        from_=normalize_address(from_),
        to=normalize_addresses(to),
        cc=normalize_addresses(cc),
        bcc=normalize_addresses(bcc),
        subject=subject,
        text_body=text_body,
        html_body=html_body,
        headers=Headers({name: _normalize_header_value(value) for name, value in (headers or {}).items()}),
    )


def put_header(email: Email, name: str, value: HeaderValue | tuple[str | None, str]) -> Email:
    """Return a copy of *email* with header *name* set."""
    return replace(email, headers=email.headers.set(name, value))


def put_attachment(email: Email, attachment: Attachment | str | Path) -> Email:
    """Return a copy of *email* with *attachment* appended.

    Paths are read immediately so the message stays self-contained.

    Raises:
        FileNotFoundError: When a path is given and does not exist.
    """
    item = attachment if isinstance(attachment, Attachment) else Attachment.from_path(attachment)
    return replace(email, attachments=(*email.attachments, item))


__all__ = [
    "Address",
    "AddressLike",
    "Attachment",
    "Email",
    "HeaderValue",
    "Headers",
    "SendGridExtensions",
    "new_email",
    "normalize_address",
    "normalize_addresses",
    "put_attachment",
    "put_header",
]
