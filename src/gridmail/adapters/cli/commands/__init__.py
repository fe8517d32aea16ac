"""CLI command implementations.

Contents:
    * :func:`cli_info` from :mod:`.info`
    * :func:`cli_config` from :mod:`.config`
    * :func:`cli_send` from :mod:`.send`
"""

from __future__ import annotations

from .config import cli_config
from .info import cli_info
from .send import cli_send

__all__ = ["cli_config", "cli_info", "cli_send"]
