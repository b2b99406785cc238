"""Command line interface for kvlifecycle."""

from typing import Any, Optional

import typer
from pydantic import ValidationError

from kvlifecycle.auth.credentials import load_credentials
from kvlifecycle.common.exceptions import (
    AuthenticationFailedError,
    LifecycleError,
    MalformedIdentifierError,
)
from kvlifecycle.constants import ClientBackend, LogFormat, TeardownMode, VAULT_SUBSCRIPTION_FILTER
from kvlifecycle.logging import get_logger, setup_logging
from kvlifecycle.orchestration import LifecycleContext, LifecycleOrchestrator
from kvlifecycle.presenter import format_resource_summary, format_vault
from kvlifecycle.settings import LifecycleSettings, get_settings

app = typer.Typer(
    name="kvlifecycle",
    help="Create, configure, list and delete Azure Key Vaults in a scratch resource group",
    no_args_is_help=True,
)

logger = get_logger(__name__)


def _cause(exc: BaseException) -> str:
    if isinstance(exc, LifecycleError):
        return exc.message
    return str(exc) or type(exc).__name__


def _fail(step: str, exc: BaseException) -> typer.Exit:
    typer.echo(f"{step} failed: {_cause(exc)}", err=True)
    return typer.Exit(1)


def _pause(prompt: str) -> None:
    typer.prompt(prompt, default="", show_default=False, prompt_suffix="")


def _load_settings(**overrides: Any) -> LifecycleSettings:
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if not overrides:
        return get_settings()
    return LifecycleSettings(**overrides)


def _bootstrap(settings: LifecycleSettings) -> LifecycleContext:
    """Load credentials and build the run context, exiting on failure."""
    try:
        credentials = load_credentials()
    except LifecycleError as exc:
        raise _fail("load_credentials", exc)

    try:
        return LifecycleContext.bootstrap(credentials, settings)
    except MalformedIdentifierError as exc:
        raise _fail("load_credentials", exc)
    except AuthenticationFailedError as exc:
        raise _fail("authenticate", exc)
    except LifecycleError as exc:
        raise _fail("bootstrap", exc)


@app.command("run")
def run(
    unattended: Optional[bool] = typer.Option(
        None,
        "--unattended/--interactive",
        help="Delete without waiting for enter (default from KVLIFECYCLE_TEARDOWN_MODE)",
    ),
    second_vault: Optional[bool] = typer.Option(
        None,
        "--second-vault/--single-vault",
        help="Also create a vault in the second location",
    ),
    group: Optional[str] = typer.Option(None, "--group", help="Resource group name"),
    location: Optional[str] = typer.Option(None, "--location", help="Location of the group and primary vault"),
    backend: Optional[ClientBackend] = typer.Option(
        None,
        "--backend",
        case_sensitive=False,
        help="azure or memory",
    ),
):
    """Run the full vault lifecycle and tear everything down."""
    teardown_mode = None
    if unattended is not None:
        teardown_mode = TeardownMode.AUTO if unattended else TeardownMode.PROMPT

    try:
        settings = _load_settings(
            teardown_mode=teardown_mode,
            create_second_vault=second_vault,
            group_name=group,
            location=location,
            backend=backend,
        )
    except ValidationError as exc:
        raise _fail("configuration", exc)

    setup_logging(settings.log_level, LogFormat(settings.log_format).value)
    context = _bootstrap(settings)

    orchestrator = LifecycleOrchestrator(context, echo=typer.echo, pause=_pause)
    try:
        orchestrator.run()
    except Exception as exc:
        report = orchestrator.report
        logger.error("Lifecycle run failed", extra={"report": report.to_dict()})
        typer.echo(f"{report.failed_step} failed: {_cause(exc)}", err=True)
        if report.cleanup_error:
            typer.echo(
                f"cleanup of resource group '{settings.group_name}' failed: {report.cleanup_error}",
                err=True,
            )
        raise typer.Exit(1)

    typer.echo("Done")


@app.command("list-vaults")
def list_vaults(
    group: Optional[str] = typer.Option(
        None,
        "--group",
        help="List the vaults of this resource group instead of the whole subscription",
    ),
    backend: Optional[ClientBackend] = typer.Option(None, "--backend", case_sensitive=False),
):
    """List Key Vaults at subscription or resource group scope."""
    try:
        settings = _load_settings(backend=backend)
    except ValidationError as exc:
        raise _fail("configuration", exc)

    setup_logging(settings.log_level, LogFormat(settings.log_format).value)
    context = _bootstrap(settings)
    vaults = context.clients.vaults

    try:
        if group:
            for vault in vaults.list_by_resource_group(group):
                typer.echo(format_vault(vault))
        else:
            resources = vaults.list_by_subscription(VAULT_SUBSCRIPTION_FILTER)
            if not resources:
                typer.echo("No Key Vaults found")
            for resource in resources:
                typer.echo(format_resource_summary(resource))
    except LifecycleError as exc:
        raise _fail("list_vaults", exc)


def main() -> None:
    app(prog_name="kvlifecycle")


if __name__ == "__main__":
    main()
