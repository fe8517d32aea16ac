"""SendGrid configuration model, resolver, and loader.

Two phases keep API-key handling explicit:

* :class:`SendGridConfig` is the raw, validated configuration. Its
  ``api_key`` may be a literal, ``None``, or an :class:`EnvKey` indirection
  (``api_key = { from_env = "SENDGRID_API_KEY" }`` in TOML).
* :func:`resolve_config` turns it into a :class:`ResolvedConfig` holding a
  concrete key, failing fast with :class:`ConfigurationError` before any
  request is built.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from gridmail.domain.errors import ConfigurationError

#: Production endpoint of the SendGrid v3 API.
DEFAULT_BASE_URI = "https://api.sendgrid.com/v3"


class EnvKey(BaseModel):
    """Read the API key from the environment variable *from_env* at resolve time.

    Example:
        >>> EnvKey(from_env="SENDGRID_API").from_env
        'SENDGRID_API'
    """

    model_config = ConfigDict(frozen=True)

    from_env: str

    @field_validator("from_env")
    @classmethod
    def _require_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("from_env must name an environment variable")
        return v


class SendGridConfig(BaseModel):
    """Validated, immutable SendGrid configuration.

    Example:
        >>> config = SendGridConfig(api_key="123_abc", sandbox=True)
        >>> config.sandbox
        True
        >>> config.base_uri
        'https://api.sendgrid.com/v3'
    """

    model_config = ConfigDict(frozen=True)

    api_key: str | EnvKey | None = None
    sandbox: bool = False
    base_uri: str = DEFAULT_BASE_URI
    timeout: float = 30.0

    @field_validator("api_key", mode="before")
    @classmethod
    def _coerce_empty_key_to_none(cls, v: Any) -> Any:
        """Treat empty or whitespace-only keys from config files as "not configured"."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("base_uri", mode="before")
    @classmethod
    def _default_blank_base_uri(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_BASE_URI
        return v

    @model_validator(mode="after")
    def _validate_config(self) -> SendGridConfig:
        """Reject values that would only fail later at request time.

        Raises:
            ValueError: When timeout is not positive or base_uri is not http(s).
        """
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if not self.base_uri.startswith(("http://", "https://")):
            raise ValueError(f"base_uri must be an http(s) URL, got {self.base_uri!r}")
        return self

    def __repr__(self) -> str:
        """Return string representation with a literal api_key redacted.

        Example:
            >>> "123_abc" in repr(SendGridConfig(api_key="123_abc"))
            False
        """
        fields: list[str] = []
        for name, value in self:
            if name == "api_key" and isinstance(value, str):
                fields.append(f"{name}='[REDACTED]'")
            else:
                fields.append(f"{name}={value!r}")
        return f"SendGridConfig({', '.join(fields)})"

    __str__ = __repr__


@dataclass(frozen=True, slots=True)
class ResolvedConfig:
    """SendGrid settings with a concrete API key, ready for request building."""

    api_key: str
    sandbox: bool = False
    base_uri: str = DEFAULT_BASE_URI
    timeout: float = 30.0

    @property
    def send_url(self) -> str:
        """Absolute URL of the ``mail/send`` endpoint.

        Example:
            >>> ResolvedConfig(api_key="k", base_uri="http://localhost:4000/").send_url
            'http://localhost:4000/mail/send'
        """
        return f"{self.base_uri.rstrip('/')}/mail/send"

    def __repr__(self) -> str:
        return (
            f"ResolvedConfig(api_key='[REDACTED]', sandbox={self.sandbox!r}, "
            f"base_uri={self.base_uri!r}, timeout={self.timeout!r})"
        )


def _lookup_api_key(api_key: str | EnvKey | None) -> str | None:
    if isinstance(api_key, EnvKey):
        value = os.environ.get(api_key.from_env)
        return value if value and value.strip() else None
    return api_key


def resolve_config(config: SendGridConfig | Mapping[str, Any]) -> ResolvedConfig:
    """Resolve the API key and return a ready-to-use configuration.

    Args:
        config: Raw configuration model, or a mapping validated into one.

    Returns:
        Configuration with a concrete, non-empty API key.

    Raises:
        ConfigurationError: When the key is missing, empty, or points at an
            unset environment variable.
        pydantic.ValidationError: When a mapping does not validate.

    Example:
        >>> resolve_config({"api_key": "123_abc"}).api_key
        '123_abc'
        >>> resolve_config({})  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        ConfigurationError: no API key set
    """
    model = config if isinstance(config, SendGridConfig) else SendGridConfig.model_validate(dict(config))
    api_key = _lookup_api_key(model.api_key)
    if not api_key:
        raise ConfigurationError(
            f"There was no API key set for the SendGrid adapter. Here are the config options "
            f"that were passed in:\n\n{model!r}"
        )
    return ResolvedConfig(
        api_key=api_key,
        sandbox=model.sandbox,
        base_uri=model.base_uri.rstrip("/"),
        timeout=model.timeout,
    )


def load_sendgrid_config_from_dict(config_dict: Mapping[str, Any]) -> SendGridConfig:
    """Load SendGridConfig from a layered configuration dictionary.

    Bridges lib_layered_config's dictionary output with the typed model.
    Reads the ``sendgrid`` section; a missing section yields defaults.

    Example:
        >>> load_sendgrid_config_from_dict({"sendgrid": {"api_key": {"from_env": "SENDGRID_API"}}}).api_key
        EnvKey(from_env='SENDGRID_API')
        >>> load_sendgrid_config_from_dict({}).api_key is None
        True
    """
    section: Any = config_dict.get("sendgrid", {})
    if not isinstance(section, Mapping):
        return SendGridConfig.model_validate(section)
    return SendGridConfig.model_validate(dict(cast(Mapping[str, Any], section)))


__all__ = [
    "DEFAULT_BASE_URI",
    "EnvKey",
    "ResolvedConfig",
    "SendGridConfig",
    "load_sendgrid_config_from_dict",
    "resolve_config",
]
