"""Render the merged configuration through lib_layered_config's Rich display."""

from __future__ import annotations

import lib_log_rich.runtime
from lib_layered_config import Config
from lib_layered_config import OutputFormat as LibOutputFormat
from lib_layered_config import display_config as _lib_display
from rich.console import Console

from gridmail.domain.enums import OutputFormat
from gridmail.domain.errors import FILTERED


def redact_api_key(config: Config) -> Config:
    """Replace a literal ``sendgrid.api_key`` with ``[FILTERED]``.

    ``{from_env = ...}`` references name a variable, not a secret, and stay visible.

    Examples:
        >>> redact_api_key(Config({"sendgrid": {"api_key": "SG.secret"}}, {}))["sendgrid"]["api_key"]
        '[FILTERED]'
        >>> cfg = Config({"sendgrid": {"api_key": {"from_env": "SENDGRID_API_KEY"}}}, {})
        >>> redact_api_key(cfg) is cfg
        True
    """
    section = config.as_dict().get("sendgrid")
    if not isinstance(section, dict):
        return config
    api_key = section.get("api_key")
    if isinstance(api_key, str) and api_key:
        return config.with_overrides({"sendgrid": {"api_key": FILTERED}})
    return config


def display_config(
    config: Config,
    *,
    output_format: OutputFormat = OutputFormat.HUMAN,
    section: str | None = None,
    console: Console | None = None,
    profile: str | None = None,
) -> None:
    """Print *config* (or one *section*) as TOML-like text or JSON.

    Pending log records are flushed first so they do not interleave with the
    output. Provenance comments name the layer each value came from.

    Raises:
        ValueError: If *section* does not exist.
    """
    if lib_log_rich.runtime.is_initialised():
        lib_log_rich.runtime.flush()

    _lib_display(
        redact_api_key(config),
        output_format=LibOutputFormat(output_format.value),
        section=section,
        profile=profile,
        console=console,
    )


__all__ = ["display_config", "redact_api_key"]
