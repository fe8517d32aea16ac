"""Logging configuration model and runtime-config mapping.

init_logging itself runs through the CLI tests in test_cli_core.py.
"""

from __future__ import annotations

import logging

import pytest
from lib_layered_config import Config

from gridmail.adapters.logging.setup import LoggingConfigModel, _build_runtime_config
from gridmail.adapters.sendgrid import deliver
from gridmail.domain.errors import DeliveryError
from gridmail.domain.message import new_email


@pytest.mark.os_agnostic
def test_logging_config_model_allows_extra_fields() -> None:
    parsed = LoggingConfigModel.model_validate({"service": "test", "environment": "dev", "console_level": "DEBUG"})

    assert parsed.service == "test"
    assert parsed.model_dump(exclude={"service", "environment"}, exclude_none=True) == {"console_level": "DEBUG"}


@pytest.mark.os_agnostic
def test_logging_config_model_defaults() -> None:
    parsed = LoggingConfigModel.model_validate({})

    assert parsed.service is None
    assert parsed.environment == "prod"


@pytest.mark.os_agnostic
def test_runtime_config_defaults_service_to_package_name() -> None:
    runtime_config = _build_runtime_config(Config({"lib_log_rich": {"environment": "test"}}, {}))

    assert runtime_config.service == "gridmail"
    assert runtime_config.environment == "test"


@pytest.mark.os_agnostic
def test_delivery_logs_never_include_the_key(caplog: pytest.LogCaptureFixture) -> None:
    """Adapter log records carry context fields but not the API key."""
    import httpx

    def _reject(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text=f"bad key {request.headers['authorization']}")

    caplog.set_level(logging.DEBUG, logger="gridmail")
    with httpx.Client(transport=httpx.MockTransport(_reject)) as client, pytest.raises(DeliveryError):
        deliver(new_email(from_="foo@bar.com", to=["to@bar.com"]), {"api_key": "123_abc"}, client=client)

    messages = [record.getMessage() for record in caplog.records]
    assert "Sending email via SendGrid" in messages
    assert "SendGrid rejected email" in messages
    for record in caplog.records:
        assert "123_abc" not in record.getMessage()
        assert "123_abc" not in str(record.__dict__)
