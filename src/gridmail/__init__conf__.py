"""Static package metadata and layered-configuration identifiers."""

from __future__ import annotations

name = "gridmail"
title = "SendGrid delivery adapter for provider-agnostic email messages"
version = "1.0.0"
shell_command = "gridmail"

#: Identifiers passed to lib_layered_config.read_config for path discovery.
LAYEREDCONF_VENDOR = "gridmail"
LAYEREDCONF_APP = "gridmail"
LAYEREDCONF_SLUG = "gridmail"


def print_info() -> None:
    """Print the summarised metadata block for the package.

    Example:
        >>> print_info()  # doctest: +ELLIPSIS
        Info for gridmail:
        ...
    """
    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("shell_command", shell_command),
    )
    pad = max(len(label) for label, _ in fields)
    lines = [f"Info for {name}:", ""]
    lines.extend(f"    {label.ljust(pad)} = {value}" for label, value in fields)
    print("\n".join(lines))


__all__ = [
    "LAYEREDCONF_APP",
    "LAYEREDCONF_SLUG",
    "LAYEREDCONF_VENDOR",
    "name",
    "print_info",
    "shell_command",
    "title",
    "version",
]
