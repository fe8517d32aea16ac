"""Send an email through SendGrid from the command line.

Builds a provider-agnostic message from the options, decorates it with the
SendGrid helpers, and hands it to the wired ``deliver`` service. Domain
errors map to :class:`ExitCode` values.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from email.utils import parseaddr
from typing import Any, NoReturn

import lib_log_rich.runtime
import rich_click as click
from pydantic import ValidationError

from gridmail.adapters.sendgrid.config import SendGridConfig
from gridmail.adapters.sendgrid.response import DeliveryReceipt
from gridmail.domain.errors import ConfigurationError, DeliveryError, TransportError
from gridmail.domain.helpers import (
    substitute,
    with_asm_group_id,
    with_bypass_list_management,
    with_custom_args,
    with_template,
)
from gridmail.domain.message import Address, Email, new_email, put_attachment, put_header

from ..constants import CLICK_CONTEXT_SETTINGS
from ..context import get_cli_context
from ..exit_codes import ExitCode

logger = logging.getLogger(__name__)


def parse_address(raw: str) -> Address:
    """Accept ``user@example.com`` or ``Display Name <user@example.com>``.

    Example:
        >>> parse_address("Foo Bar <foo@bar.com>")
        Address(email='foo@bar.com', name='Foo Bar')
        >>> parse_address("foo@bar.com")
        Address(email='foo@bar.com', name=None)
    """
    name, email = parseaddr(raw)
    if not email:
        raise ValueError(f"Cannot parse email address {raw!r}")
    return Address(email=email, name=name or None)


def parse_pairs(values: tuple[str, ...], option: str) -> dict[str, str]:
    """Split repeated ``KEY=VALUE`` options into a dict (later keys win).

    Example:
        >>> parse_pairs(("%name%=Ada", "%team%=ops"), "--substitution")
        {'%name%': 'Ada', '%team%': 'ops'}
    """
    pairs: dict[str, str] = {}
    for raw in values:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            raise ValueError(f"{option} expects KEY=VALUE, got {raw!r}")
        pairs[key] = value
    return pairs


def apply_validated_overrides(base_config: SendGridConfig, overrides: dict[str, Any]) -> SendGridConfig:
    """Merge *overrides* into *base_config* and re-run validation.

    Raises:
        ValidationError: When an override is invalid.
    """
    if not overrides:
        return base_config
    return SendGridConfig.model_validate({**base_config.model_dump(), **overrides})


def _build_email(
    *,
    from_address: str,
    recipients: tuple[str, ...],
    cc: tuple[str, ...],
    bcc: tuple[str, ...],
    subject: str | None,
    text: str | None,
    html: str | None,
    reply_to: str | None,
    attachments: tuple[str, ...],
    template_id: str | None,
    substitutions: tuple[str, ...],
    asm_group_id: int | None,
    bypass_list_management: bool | None,
    custom_args: tuple[str, ...],
) -> Email:
    email = new_email(
        from_=parse_address(from_address),
        to=[parse_address(r) for r in recipients],
        cc=[parse_address(r) for r in cc],
        bcc=[parse_address(r) for r in bcc],
        subject=subject,
        text_body=text,
        html_body=html,
    )
    if reply_to:
        email = put_header(email, "Reply-To", parse_address(reply_to))
    for path in attachments:
        email = put_attachment(email, path)
    if template_id:
        email = with_template(email, template_id)
    for tag, value in parse_pairs(substitutions, "--substitution").items():
        email = substitute(email, tag, value)
    if asm_group_id is not None:
        email = with_asm_group_id(email, asm_group_id)
    if bypass_list_management is not None:
        email = with_bypass_list_management(email, bypass_list_management)
    if custom_args:
        email = with_custom_args(email, parse_pairs(custom_args, "--custom-arg"))
    return email


def _fail(exc: Exception, log_message: str, user_message: str, exit_code: ExitCode, *, log_traceback: bool = False) -> NoReturn:
    logger.error(
        log_message,
        extra={"error": str(exc), "error_type": type(exc).__name__},
        exc_info=log_traceback,
    )
    click.echo(f"\nError: {user_message} - {exc}", err=True)
    raise SystemExit(exit_code)


def execute_with_delivery_error_handling(operation: Callable[[], DeliveryReceipt]) -> DeliveryReceipt:
    """Run *operation*, translating failures into exit codes.

    Exceptions are caught most specific first:

    1. ConfigurationError -> CONFIG_ERROR (78)
    2. DeliveryError / TransportError -> DELIVERY_FAILURE (69)
    3. FileNotFoundError -> FILE_NOT_FOUND (2)
    4. ValidationError / ValueError / TypeError -> INVALID_ARGUMENT (22)
    5. anything else -> GENERAL_ERROR (1), re-raised when DEVELOPMENT_MODE is set

    Raises:
        SystemExit: On any failure.
    """
    try:
        return operation()
    except ConfigurationError as exc:
        _fail(exc, "SendGrid configuration error", "Configuration error", ExitCode.CONFIG_ERROR)
    except DeliveryError as exc:
        _fail(exc, "SendGrid rejected the request", "SendGrid rejected the email", ExitCode.DELIVERY_FAILURE)
    except TransportError as exc:
        _fail(exc, "SendGrid unreachable", "Could not reach SendGrid", ExitCode.DELIVERY_FAILURE)
    except FileNotFoundError as exc:
        _fail(exc, "Attachment file not found", "Attachment file not found", ExitCode.FILE_NOT_FOUND)
    except (ValidationError, ValueError, TypeError) as exc:
        _fail(exc, "Invalid email parameters", "Invalid email parameters", ExitCode.INVALID_ARGUMENT)
    except Exception as exc:
        if os.environ.get("DEVELOPMENT_MODE"):
            raise
        _fail(exc, "Unexpected error sending email", "Unexpected error", ExitCode.GENERAL_ERROR, log_traceback=True)


@click.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--from", "from_address", required=True, help="Sender, 'user@example.com' or 'Name <user@example.com>'")
@click.option("--to", "recipients", multiple=True, help="Recipient (repeatable)")
@click.option("--cc", multiple=True, help="CC recipient (repeatable)")
@click.option("--bcc", multiple=True, help="BCC recipient (repeatable)")
@click.option("--subject", default=None, help="Subject line (omitted when not given)")
@click.option("--text", default=None, help="Plain-text body")
@click.option("--html", default=None, help="HTML body")
@click.option("--reply-to", default=None, help="Reply-To address")
@click.option(
    "--attachment",
    "attachments",
    multiple=True,
    type=click.Path(path_type=str),
    help="File to attach (repeatable)",
)
@click.option("--template-id", default=None, help="SendGrid transactional template id")
@click.option("--substitution", "substitutions", multiple=True, metavar="TAG=VALUE", help="Template substitution")
@click.option("--asm-group-id", type=int, default=None, help="Unsubscribe group id")
@click.option(
    "--bypass-list-management/--no-bypass-list-management",
    default=None,
    help="Set mail_settings.bypass_list_management",
)
@click.option("--custom-arg", "custom_args", multiple=True, metavar="KEY=VALUE", help="Personalization custom arg")
@click.option("--sandbox/--no-sandbox", default=None, help="Override sendgrid.sandbox")
@click.pass_context
def cli_send(
    ctx: click.Context,
    from_address: str,
    recipients: tuple[str, ...],
    cc: tuple[str, ...],
    bcc: tuple[str, ...],
    subject: str | None,
    text: str | None,
    html: str | None,
    reply_to: str | None,
    attachments: tuple[str, ...],
    template_id: str | None,
    substitutions: tuple[str, ...],
    asm_group_id: int | None,
    bypass_list_management: bool | None,
    custom_args: tuple[str, ...],
    sandbox: bool | None,
) -> None:
    """Send one email through the SendGrid v3 mail/send API."""
    cli_ctx = get_cli_context(ctx)
    extra = {"command": "send", "recipients": list(recipients), "subject": subject, "template_id": template_id}

    with lib_log_rich.runtime.bind(job_id="cli-send", extra=extra):

        def _operation() -> DeliveryReceipt:
            base = cli_ctx.services.load_sendgrid_config(cli_ctx.config.as_dict())
            config = apply_validated_overrides(base, {} if sandbox is None else {"sandbox": sandbox})
            email = _build_email(
                from_address=from_address,
                recipients=recipients,
                cc=cc,
                bcc=bcc,
                subject=subject,
                text=text,
                html=html,
                reply_to=reply_to,
                attachments=attachments,
                template_id=template_id,
                substitutions=substitutions,
                asm_group_id=asm_group_id,
                bypass_list_management=bypass_list_management,
                custom_args=custom_args,
            )
            return cli_ctx.services.deliver(email, config)

        receipt = execute_with_delivery_error_handling(_operation)
        logger.info("Email sent via CLI", extra={"status_code": receipt.status_code})
        suffix = f", message id {receipt.message_id}" if receipt.message_id else ""
        click.echo(f"\nEmail accepted by SendGrid (status {receipt.status_code}{suffix}).")


__all__ = [
    "apply_validated_overrides",
    "cli_send",
    "execute_with_delivery_error_handling",
    "parse_address",
    "parse_pairs",
]
