"""Shared pytest fixtures for the SendGrid adapter, CLI, and configuration tests.

- All shared fixtures live here
- The fake SendGrid server is an ``httpx.MockTransport``; no sockets are opened
- Fixtures use descriptive names that read as plain English
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
import lib_cli_exit_tools
import orjson
import pytest
from click.testing import CliRunner
from lib_layered_config import Config
from lib_layered_config.domain.config import SourceInfo

if TYPE_CHECKING:
    from gridmail.adapters.memory.delivery import DeliverySpy
    from gridmail.composition import AppServices

#: Literal key used wherever a test needs a configured account.
API_KEY = "123_abc"

#: Base URI the fake SendGrid server answers on.
FAKE_BASE_URI = "http://localhost:4000"


def _load_dotenv() -> None:
    """Load .env file when it exists for integration test configuration."""
    from dotenv import load_dotenv

    env_file = Path(__file__).parent.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)


_load_dotenv()

ANSI_ESCAPE_PATTERN = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
CONFIG_FIELDS: tuple[str, ...] = tuple(field.name for field in fields(type(lib_cli_exit_tools.config)))


def _remove_ansi_codes(text: str) -> str:
    """Return *text* stripped of ANSI escape sequences."""
    return ANSI_ESCAPE_PATTERN.sub("", text)


def _snapshot_cli_config() -> dict[str, object]:
    """Capture every attribute from ``lib_cli_exit_tools.config``."""
    return {name: getattr(lib_cli_exit_tools.config, name) for name in CONFIG_FIELDS}


def _restore_cli_config(snapshot: dict[str, object]) -> None:
    """Reapply a configuration snapshot captured by ``_snapshot_cli_config``."""
    for name, value in snapshot.items():
        setattr(lib_cli_exit_tools.config, name, value)


# ======================== Fake SendGrid ========================


def _empty_requests() -> list[httpx.Request]:
    return []


@dataclass
class FakeSendGrid:
    """In-process stand-in for the ``mail/send`` endpoint.

    Answers ``500 Error!!`` when the sender is ``INVALID_EMAIL`` and
    ``202`` with an ``X-Message-Id`` header otherwise. Every request is
    recorded for assertions.

    Attributes:
        requests: Requests received, in order.
        echo_authorization: When True, failure bodies repeat the
            Authorization header the way a misbehaving provider might.
    """

    requests: list[httpx.Request] = field(default_factory=_empty_requests)
    echo_authorization: bool = False

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path != "/mail/send":
            return httpx.Response(404, text="Not Found")
        payload = orjson.loads(request.content)
        if payload.get("from", {}).get("email") == "INVALID_EMAIL":
            body = "Error!!"
            if self.echo_authorization:
                body += f" (received {request.headers.get('authorization')})"
            return httpx.Response(500, text=body)
        return httpx.Response(202, headers={"X-Message-Id": "msg-0001"})

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_payload(self) -> dict[str, Any]:
        return orjson.loads(self.last_request.content)  # type: ignore[no-any-return]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handle))

    def async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


@pytest.fixture
def fake_sendgrid() -> FakeSendGrid:
    """Provide a fresh fake SendGrid server per test.

    Example:
        def test_path(fake_sendgrid: FakeSendGrid, sendgrid_client: httpx.Client) -> None:
            deliver(email, {"api_key": "k", "base_uri": FAKE_BASE_URI}, client=sendgrid_client)
            assert fake_sendgrid.last_request.url.path == "/mail/send"
    """
    return FakeSendGrid()


@pytest.fixture
def sendgrid_client(fake_sendgrid: FakeSendGrid) -> Iterator[httpx.Client]:
    """Provide an httpx.Client routed to the fake SendGrid server."""
    with fake_sendgrid.client() as client:
        yield client


@pytest.fixture
def sendgrid_config() -> dict[str, Any]:
    """Plain-mapping configuration pointing at the fake server with a literal key."""
    return {"api_key": API_KEY, "base_uri": FAKE_BASE_URI}


@pytest.fixture
def sandbox_sendgrid_config(sendgrid_config: dict[str, Any]) -> dict[str, Any]:
    """Same as ``sendgrid_config`` with sandbox mode enabled."""
    return {**sendgrid_config, "sandbox": True}


@pytest.fixture
def attachment_file(tmp_path: Path) -> Path:
    """Write ``attachment.txt`` containing ``Test Attachment\\n``."""
    path = tmp_path / "attachment.txt"
    path.write_bytes(b"Test Attachment\n")
    return path


# ======================== CLI infrastructure ========================


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a fresh CliRunner per test.

    Use result.stdout for clean output (e.g., JSON parsing) to avoid
    log messages on stderr contaminating the output.
    """
    return CliRunner()


@pytest.fixture
def production_factory() -> Callable[[], AppServices]:
    """Provide the production services factory for tests."""
    from gridmail.composition import build_production

    return build_production


@pytest.fixture
def strip_ansi() -> Callable[[str], str]:
    """Return a helper that strips ANSI escape sequences from a string."""

    def _strip(value: str) -> str:
        return _remove_ansi_codes(value)

    return _strip


@pytest.fixture
def managed_traceback_state() -> Iterator[None]:
    """Reset traceback flags to a known baseline and restore after the test.

    Use this whenever a test reads or mutates the global
    ``lib_cli_exit_tools.config`` traceback flags.
    """
    lib_cli_exit_tools.reset_config()
    lib_cli_exit_tools.config.traceback = False
    lib_cli_exit_tools.config.traceback_force_color = False
    snapshot = _snapshot_cli_config()
    try:
        yield
    finally:
        _restore_cli_config(snapshot)


@pytest.fixture
def clear_config_cache() -> Iterator[None]:
    """Clear the get_config lru_cache before each test.

    Only clears before, not after, because a monkeypatched get_config has
    no ``cache_clear``.
    """
    from gridmail.adapters.config import loader as config_mod

    config_mod.get_config.cache_clear()
    yield


@pytest.fixture
def config_factory() -> Callable[[dict[str, Any]], Config]:
    """Create real Config instances from test data dicts without filesystem I/O.

    Example:
        def test_section(config_factory: Callable[[dict[str, Any]], Config]) -> None:
            config = config_factory({"sendgrid": {"sandbox": True}})
            assert config.get("sendgrid.sandbox") is True
    """

    def _factory(data: dict[str, Any]) -> Config:
        return Config(data, {})

    return _factory


@pytest.fixture
def source_info_factory() -> Callable[[str, str, str | None], SourceInfo]:
    """Create SourceInfo dicts for provenance-tracking tests."""

    def _factory(key: str, layer: str, path: str | None = None) -> SourceInfo:
        return {"layer": layer, "path": path, "key": key}

    return _factory


@dataclass
class SendGridCliContext:
    """Services factory plus the spy capturing what ``send`` would POST.

    Attributes:
        factory: Callable that returns wired AppServices for CLI invocation.
        spy: DeliverySpy holding every built request.
    """

    factory: Callable[[], Any]
    spy: DeliverySpy


@pytest.fixture
def sendgrid_cli_context(
    clear_config_cache: None,
) -> Callable[[dict[str, Any]], SendGridCliContext]:
    """Create a CLI test context from the ``sendgrid`` section contents.

    Configuration loading and logging are production adapters; delivery is
    replaced by a :class:`DeliverySpy`.

    Example:
        def test_send(cli_runner, sendgrid_cli_context) -> None:
            ctx = sendgrid_cli_context({"api_key": "123_abc"})
            result = cli_runner.invoke(cli, ["send", "--from", "a@b.com"], obj=ctx.factory)
            assert ctx.spy.last_payload["from"] == {"email": "a@b.com"}
    """
    from gridmail.adapters.memory import DeliverySpy as DeliverySpyImpl
    from gridmail.composition import AppServices, build_production

    def _create(sendgrid_data: dict[str, Any]) -> SendGridCliContext:
        spy = DeliverySpyImpl()
        config = Config({"sendgrid": sendgrid_data}, {})
        prod = build_production()

        def _fake_get_config(**_kwargs: Any) -> Config:
            return config

        test_services = AppServices(
            get_config=_fake_get_config,
            display_config=prod.display_config,
            load_sendgrid_config=prod.load_sendgrid_config,
            deliver=spy.deliver,
            init_logging=prod.init_logging,
        )
        return SendGridCliContext(factory=lambda: test_services, spy=spy)

    return _create


@pytest.fixture
def inject_config_with_profile_capture(
    clear_config_cache: None,
) -> Callable[[Config, list[str | None]], Callable[[], AppServices]]:
    """Return a factory whose get_config records the profile it was asked for."""
    from gridmail.composition import AppServices, build_production

    def _inject(config: Config, captured_profiles: list[str | None]) -> Callable[[], AppServices]:
        def _capturing_get_config(*, profile: str | None = None, **_kwargs: Any) -> Config:
            captured_profiles.append(profile)
            return config

        prod = build_production()
        test_services = AppServices(
            get_config=_capturing_get_config,
            display_config=prod.display_config,
            load_sendgrid_config=prod.load_sendgrid_config,
            deliver=prod.deliver,
            init_logging=prod.init_logging,
        )
        return lambda: test_services

    return _inject
