"""Layered configuration loader with caching and profile support.

Reads the bundled ``defaultconfig.toml`` and layers app, host, user, ``.env``
and environment overrides on top via lib_layered_config. The SendGrid
settings live in the ``[sendgrid]`` section; environment variables follow
the ``GRIDMAIL___SENDGRID__API_KEY`` naming scheme.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Protocol, cast

from lib_layered_config import (
    DEFAULT_MAX_PROFILE_LENGTH,
    Config,
    read_config,
    validate_profile_name,
)

from gridmail import __init__conf__


class ConfigLoaderProtocol(Protocol):
    """Callable config loader exposing ``cache_clear``."""

    def __call__(self, *, profile: str | None = None, start_dir: str | None = None) -> Config: ...
    def cache_clear(self) -> None: ...


def validate_profile(profile: str, max_length: int | None = None) -> None:
    """Reject profile names that are empty, too long, or path-like.

    Raises:
        ValueError: If lib_layered_config refuses the profile name.

    Examples:
        >>> validate_profile("sandbox")

        >>> validate_profile("../secrets")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        ValueError: profile contains invalid characters: ../secrets
    """
    length = max_length if max_length is not None else DEFAULT_MAX_PROFILE_LENGTH
    validate_profile_name(profile, max_length=length)


@lru_cache(maxsize=1)
def get_default_config_path() -> Path:
    """Return the path of the ``defaultconfig.toml`` shipped next to this module.

    Example:
        >>> get_default_config_path().name
        'defaultconfig.toml'
    """
    return Path(__file__).parent / "defaultconfig.toml"


@lru_cache(maxsize=4)
def _get_config_impl(*, profile: str | None = None, start_dir: str | None = None) -> Config:
    return read_config(
        vendor=__init__conf__.LAYEREDCONF_VENDOR,
        app=__init__conf__.LAYEREDCONF_APP,
        slug=__init__conf__.LAYEREDCONF_SLUG,
        profile=profile,
        default_file=get_default_config_path(),
        start_dir=start_dir,
    )


def _get_config(*, profile: str | None = None, start_dir: str | None = None) -> Config:
    """Load layered configuration with application defaults.

    Precedence: defaults -> app -> host -> user -> dotenv -> env. Results are
    cached per ``(profile, start_dir)`` for the process lifetime.

    Args:
        profile: Optional profile name (e.g. ``sandbox``); inserts a
            ``profile/<name>/`` directory into every search path.
        start_dir: Directory that seeds ``.env`` discovery; current working
            directory when None.

    Returns:
        Immutable configuration object with provenance tracking.

    Raises:
        ValueError: If *profile* is not a valid profile name.

    Example:
        >>> get_config().get("sendgrid.sandbox", default=False)  # doctest: +SKIP
        False
    """
    if profile is not None:
        validate_profile(profile)
    return _get_config_impl(profile=profile, start_dir=start_dir)


def _cache_clear() -> None:
    """Forget cached configuration so the next call re-reads every layer."""
    _get_config_impl.cache_clear()


_get_config.cache_clear = _cache_clear  # type: ignore[attr-defined]
get_config: ConfigLoaderProtocol = cast(ConfigLoaderProtocol, _get_config)


__all__ = [
    "validate_profile",
    "get_config",
    "get_default_config_path",
]
