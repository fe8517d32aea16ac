"""CLI send stories: payload mapping, overrides, and exit codes."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
from click.testing import CliRunner, Result

from gridmail.adapters import cli as cli_mod
from gridmail.adapters.cli.commands.send import parse_address, parse_pairs
from gridmail.domain.errors import TransportError
from gridmail.domain.message import Address

if TYPE_CHECKING:
    from conftest import SendGridCliContext

CONFIGURED = {"api_key": "123_abc"}


def _send(cli_runner: CliRunner, ctx: SendGridCliContext, *args: str, root: tuple[str, ...] = ()) -> Result:
    return cli_runner.invoke(cli_mod.cli, [*root, "send", "--from", "sender@test.com", *args], obj=ctx.factory)


# ======================== Success ========================


@pytest.mark.os_agnostic
def test_send_builds_request_from_options(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    ctx = sendgrid_cli_context(CONFIGURED)

    result = _send(
        cli_runner,
        ctx,
        "--to",
        "To <to@bar.com>",
        "--to",
        "noname@bar.com",
        "--cc",
        "cc@bar.com",
        "--subject",
        "Test Subject",
        "--text",
        "TEXT BODY",
        "--html",
        "HTML BODY",
    )

    assert result.exit_code == 0, result.output
    assert "Email accepted by SendGrid (status 202)" in result.output
    payload = ctx.spy.last_payload
    assert payload["from"] == {"email": "sender@test.com"}
    assert payload["subject"] == "Test Subject"
    assert payload["personalizations"][0]["to"] == [{"email": "to@bar.com", "name": "To"}, {"email": "noname@bar.com"}]
    assert payload["personalizations"][0]["cc"] == [{"email": "cc@bar.com"}]
    assert [c["type"] for c in payload["content"]] == ["text/plain", "text/html"]


@pytest.mark.os_agnostic
def test_send_with_template_and_extensions(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    ctx = sendgrid_cli_context(CONFIGURED)

    result = _send(
        cli_runner,
        ctx,
        "--to",
        "to@bar.com",
        "--text",
        "ignored",
        "--template-id",
        "d-123",
        "--substitution",
        "%foo%=bar",
        "--asm-group-id",
        "1234",
        "--bypass-list-management",
        "--custom-arg",
        "post_code=123",
    )

    assert result.exit_code == 0, result.output
    payload = ctx.spy.last_payload
    assert "content" not in payload
    assert payload["template_id"] == "d-123"
    assert payload["asm"] == {"group_id": 1234}
    assert payload["mail_settings"] == {"bypass_list_management": {"enable": True}}
    assert payload["personalizations"][0]["substitutions"] == {"%foo%": "bar"}
    assert payload["personalizations"][0]["custom_args"] == {"post_code": "123"}


@pytest.mark.os_agnostic
def test_send_reply_to_and_attachment(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
    attachment_file: Path,
) -> None:
    ctx = sendgrid_cli_context(CONFIGURED)

    result = _send(cli_runner, ctx, "--reply-to", "Foo Bar <foo@bar.com>", "--attachment", str(attachment_file))

    assert result.exit_code == 0, result.output
    payload = ctx.spy.last_payload
    assert payload["reply_to"] == {"email": "foo@bar.com", "name": "Foo Bar"}
    assert payload["attachments"][0]["content"] == "VGVzdCBBdHRhY2htZW50Cg=="


@pytest.mark.os_agnostic
def test_send_sandbox_flag_overrides_config(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    ctx = sendgrid_cli_context({**CONFIGURED, "sandbox": False})

    result = _send(cli_runner, ctx, "--sandbox")

    assert result.exit_code == 0, result.output
    assert ctx.spy.last_payload["mail_settings"] == {"sandbox_mode": {"enable": True}}


@pytest.mark.os_agnostic
def test_send_honours_root_set_override(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    ctx = sendgrid_cli_context(CONFIGURED)

    result = _send(cli_runner, ctx, root=("--set", "sendgrid.sandbox=true"))

    assert result.exit_code == 0, result.output
    assert ctx.spy.last_payload["mail_settings"]["sandbox_mode"] == {"enable": True}


@pytest.mark.os_agnostic
def test_send_resolves_key_from_environment(
    monkeypatch: pytest.MonkeyPatch,
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    monkeypatch.setenv("GRIDMAIL_TEST_KEY", "from-env")
    ctx = sendgrid_cli_context({"api_key": {"from_env": "GRIDMAIL_TEST_KEY"}})

    result = _send(cli_runner, ctx)

    assert result.exit_code == 0, result.output
    assert ctx.spy.requests[-1].headers["Authorization"] == "Bearer from-env"


# ======================== Exit codes ========================


@pytest.mark.os_agnostic
def test_send_without_key_exits_with_config_error(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    ctx = sendgrid_cli_context({})

    result = _send(cli_runner, ctx, "--to", "to@bar.com")

    assert result.exit_code == 78
    assert "no API key set" in result.output
    assert ctx.spy.requests == []


@pytest.mark.os_agnostic
def test_send_rejected_by_provider_exits_69_without_key(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    ctx = sendgrid_cli_context(CONFIGURED)
    ctx.spy.status_code = 400
    ctx.spy.response_body = b'{"errors":[{"message":"bad"}]}'

    result = _send(cli_runner, ctx)

    assert result.exit_code == 69
    assert "[FILTERED]" in result.output
    assert "123_abc" not in result.output


@pytest.mark.os_agnostic
def test_send_unreachable_provider_exits_69(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    ctx = sendgrid_cli_context(CONFIGURED)
    ctx.spy.raise_exception = TransportError("Connection refused")

    result = _send(cli_runner, ctx)

    assert result.exit_code == 69
    assert "Could not reach SendGrid" in result.output


@pytest.mark.os_agnostic
def test_send_missing_attachment_exits_2(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
    tmp_path: Path,
) -> None:
    ctx = sendgrid_cli_context(CONFIGURED)

    result = _send(cli_runner, ctx, "--attachment", str(tmp_path / "missing.txt"))

    assert result.exit_code == 2
    assert "Attachment file not found" in result.output


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    "args",
    [
        ("--substitution", "no-equals-sign"),
        ("--custom-arg", "=value"),
        ("--to", ""),
    ],
)
def test_send_malformed_values_exit_22(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
    args: tuple[str, ...],
) -> None:
    ctx = sendgrid_cli_context(CONFIGURED)

    result = _send(cli_runner, ctx, *args)

    assert result.exit_code == 22
    assert "Invalid email parameters" in result.output


@pytest.mark.os_agnostic
def test_send_invalid_config_exits_22(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    ctx = sendgrid_cli_context({**CONFIGURED, "timeout": -1})

    result = _send(cli_runner, ctx)

    assert result.exit_code == 22
    assert "timeout must be positive" in result.output


@pytest.mark.os_agnostic
def test_send_unexpected_error_exits_1(
    monkeypatch: pytest.MonkeyPatch,
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    monkeypatch.delenv("DEVELOPMENT_MODE", raising=False)
    ctx = sendgrid_cli_context(CONFIGURED)
    ctx.spy.raise_exception = RuntimeError("boom")

    result = _send(cli_runner, ctx)

    assert result.exit_code == 1
    assert "Unexpected error" in result.output


@pytest.mark.os_agnostic
def test_send_unexpected_error_propagates_in_development_mode(
    monkeypatch: pytest.MonkeyPatch,
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    monkeypatch.setenv("DEVELOPMENT_MODE", "1")
    ctx = sendgrid_cli_context(CONFIGURED)
    ctx.spy.raise_exception = RuntimeError("boom")

    result = _send(cli_runner, ctx)

    assert isinstance(result.exception, RuntimeError)


@pytest.mark.os_agnostic
def test_send_requires_from(
    cli_runner: CliRunner,
    sendgrid_cli_context: Callable[[dict[str, Any]], SendGridCliContext],
) -> None:
    ctx = sendgrid_cli_context(CONFIGURED)

    result = cli_runner.invoke(cli_mod.cli, ["send", "--to", "to@bar.com"], obj=ctx.factory)

    assert result.exit_code == 2
    assert "--from" in result.output


# ======================== Option parsing ========================


@pytest.mark.os_agnostic
def test_parse_address_forms() -> None:
    assert parse_address("Foo Bar <foo@bar.com>") == Address(email="foo@bar.com", name="Foo Bar")
    assert parse_address("foo@bar.com") == Address(email="foo@bar.com")


@pytest.mark.os_agnostic
def test_parse_pairs_keeps_value_equals_signs() -> None:
    assert parse_pairs(("query=a=b",), "--custom-arg") == {"query": "a=b"}
