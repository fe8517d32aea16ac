"""In-memory configuration adapters for testing.

Satisfy the same Protocols as the production adapters without touching the
filesystem.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from lib_layered_config import Config

from ...domain.enums import OutputFormat
from ..sendgrid.config import SendGridConfig


def get_config_in_memory(
    *,
    profile: str | None = None,
    start_dir: str | None = None,
) -> Config:
    """Return an empty in-memory Config."""
    return Config({}, {})


def display_config_in_memory(
    config: Config,
    *,
    output_format: OutputFormat = OutputFormat.HUMAN,
    section: str | None = None,
    profile: str | None = None,
) -> None:
    """No-op display -- satisfies the DisplayConfig protocol."""


def load_sendgrid_config_in_memory(config_dict: Mapping[str, Any]) -> SendGridConfig:
    """Parse the ``sendgrid`` section with the real Pydantic model."""
    section = config_dict.get("sendgrid", {})
    return SendGridConfig.model_validate(section if section else {})


__all__ = [
    "display_config_in_memory",
    "get_config_in_memory",
    "load_sendgrid_config_in_memory",
]
