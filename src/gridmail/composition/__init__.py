"""Composition root wiring adapters to application ports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

# Configuration services
from ..adapters.config.display import display_config
from ..adapters.config.loader import get_config, get_default_config_path

# Logging services
from ..adapters.logging.setup import init_logging

# SendGrid services
from ..adapters.sendgrid.adapter import deliver
from ..adapters.sendgrid.config import load_sendgrid_config_from_dict

# Static conformance assertions: each adapter structurally satisfies its Protocol.
if TYPE_CHECKING:
    from ..adapters.memory.delivery import DeliverySpy
    from ..application.ports import (
        Deliver,
        DisplayConfig,
        GetConfig,
        InitLogging,
        LoadSendGridConfig,
    )

    _assert_get_config: GetConfig = get_config
    _assert_display_config: DisplayConfig = display_config
    _assert_load_sendgrid_config: LoadSendGridConfig = load_sendgrid_config_from_dict
    _assert_deliver: Deliver = deliver
    _assert_init_logging: InitLogging = init_logging


@dataclass(frozen=True, slots=True)
class AppServices:
    """Frozen container holding all application port implementations."""

    get_config: GetConfig
    display_config: DisplayConfig
    load_sendgrid_config: LoadSendGridConfig
    deliver: Deliver
    init_logging: InitLogging


def build_production() -> AppServices:
    """Wire production adapters into an AppServices container."""
    return AppServices(
        get_config=get_config,
        display_config=display_config,
        load_sendgrid_config=load_sendgrid_config_from_dict,
        deliver=deliver,
        init_logging=init_logging,
    )


def build_testing(*, spy: DeliverySpy | None = None) -> AppServices:
    """Wire in-memory adapters into an AppServices container.

    Args:
        spy: Optional DeliverySpy for asserting on captured requests. When
            None, a fresh spy is created.
    """
    from ..adapters.memory import (
        DeliverySpy,
        display_config_in_memory,
        get_config_in_memory,
        init_logging_in_memory,
        load_sendgrid_config_in_memory,
    )

    delivery_spy = spy if spy is not None else DeliverySpy()

    return AppServices(
        get_config=get_config_in_memory,
        display_config=display_config_in_memory,
        load_sendgrid_config=load_sendgrid_config_in_memory,
        deliver=delivery_spy.deliver,
        init_logging=init_logging_in_memory,
    )


__all__ = [
    # Configuration
    "get_config",
    "get_default_config_path",
    "display_config",
    # SendGrid
    "deliver",
    "load_sendgrid_config_from_dict",
    # Logging
    "init_logging",
    # Composition
    "AppServices",
    "build_production",
    "build_testing",
]
