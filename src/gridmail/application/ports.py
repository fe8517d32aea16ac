"""Application ports: callable Protocol definitions for adapter functions.

Each Protocol's ``__call__`` matches the corresponding adapter function, so
module-level functions and bound methods satisfy them structurally.
Infrastructure types are imported under ``TYPE_CHECKING`` only.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

from ..domain.enums import OutputFormat

if TYPE_CHECKING:
    import httpx
    from lib_layered_config import Config

    from ..adapters.sendgrid.config import SendGridConfig
    from ..adapters.sendgrid.response import DeliveryReceipt
    from ..domain.message import Email


class GetConfig(Protocol):
    """Load layered configuration with application defaults."""

    def __call__(self, *, profile: str | None = ..., start_dir: str | None = ...) -> Config: ...


class DisplayConfig(Protocol):
    """Display the provided configuration in the requested format."""

    def __call__(
        self, config: Config, *, output_format: OutputFormat = ..., section: str | None = ..., profile: str | None = ...
    ) -> None: ...


class LoadSendGridConfig(Protocol):
    """Load SendGridConfig from a configuration dictionary."""

    def __call__(self, config_dict: Mapping[str, Any]) -> SendGridConfig: ...


class Deliver(Protocol):
    """Deliver one email through SendGrid."""

    def __call__(
        self,
        email: Email,
        config: SendGridConfig | Mapping[str, Any],
        *,
        client: httpx.Client | None = ...,
    ) -> DeliveryReceipt: ...


class InitLogging(Protocol):
    """Initialize lib_log_rich runtime with the provided configuration."""

    def __call__(self, config: Config) -> None: ...


__all__ = [
    "Deliver",
    "DisplayConfig",
    "GetConfig",
    "InitLogging",
    "LoadSendGridConfig",
]
