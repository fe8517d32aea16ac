"""In-memory logging adapter: leaves lib_log_rich untouched during tests."""

from __future__ import annotations

from lib_layered_config import Config


def init_logging_in_memory(config: Config) -> None:
    """Accept *config* and do nothing -- satisfies the InitLogging protocol."""


__all__ = ["init_logging_in_memory"]
