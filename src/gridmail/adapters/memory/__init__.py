"""In-memory adapter implementations for testing.

Lightweight implementations of the application ports -- no filesystem, no
network, no logging framework.

Contents:
    * :mod:`.config` - In-memory configuration adapters
    * :mod:`.delivery` - In-memory SendGrid delivery (DeliverySpy class)
    * :mod:`.logging` - In-memory logging adapter
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .config import (
    display_config_in_memory,
    get_config_in_memory,
    load_sendgrid_config_in_memory,
)
from .delivery import DeliverySpy
from .logging import init_logging_in_memory

# Static conformance assertions
if TYPE_CHECKING:
    from gridmail.application.ports import (
        Deliver,
        DisplayConfig,
        GetConfig,
        InitLogging,
        LoadSendGridConfig,
    )

    _assert_get_config: GetConfig = get_config_in_memory
    _assert_display_config: DisplayConfig = display_config_in_memory
    _assert_load_sendgrid_config: LoadSendGridConfig = load_sendgrid_config_in_memory
    _assert_deliver: Deliver = DeliverySpy().deliver
    _assert_init_logging: InitLogging = init_logging_in_memory

__all__ = [
    "DeliverySpy",
    "display_config_in_memory",
    "get_config_in_memory",
    "init_logging_in_memory",
    "load_sendgrid_config_in_memory",
]
