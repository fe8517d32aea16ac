"""Application layer - port definitions consumed by the composition root.

Contents:
    * :mod:`.ports` - Callable Protocol definitions for adapter functions
"""

from __future__ import annotations

from .ports import (
    Deliver,
    DisplayConfig,
    GetConfig,
    InitLogging,
    LoadSendGridConfig,
)

__all__ = [
    "Deliver",
    "DisplayConfig",
    "GetConfig",
    "InitLogging",
    "LoadSendGridConfig",
]
