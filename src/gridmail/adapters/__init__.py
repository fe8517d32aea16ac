"""Adapters connecting the application to SendGrid, configuration, logging, and the CLI.

Contents:
    * :mod:`.sendgrid` - SendGrid v3 mail/send adapter
    * :mod:`.config` - Layered configuration loading and display
    * :mod:`.logging` - lib_log_rich setup
    * :mod:`.memory` - In-memory doubles for tests
    * :mod:`.cli` - Click CLI
"""

from __future__ import annotations

__all__: list[str] = []
