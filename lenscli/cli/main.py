"""
lenscli Root Command.

Wires the resource command groups under one Typer app, applies the global
options and turns application errors into `Error: ...` on stderr with
exit code 1.

Usage:
    lenscli --help
    lenscli topics --names
    lenscli -o json topic --name=orders
    lenscli connectors --clusterName="*"
    lenscli --host=http://lenses:9991 --token=... alerts

Options:
    --output, -o      table (default) or json
    --host            Control plane URL, overrides config and LENSES_HOST
    --token           Service account token, overrides LENSES_TOKEN
    --timeout         Request timeout in seconds
    --verbose, -v     INFO level logging on stderr
    --debug, -d       DEBUG level logging on stderr
"""

from typing import Any, Optional

import click
import structlog
import typer
from typer.core import TyperGroup

from lenscli.cli.commands import (
    alert_app,
    alerts,
    connector_app,
    connectors_app,
    dataset_app,
    topic_app,
    topics_app,
)
from lenscli.cli.context import CliContext
from lenscli.cli.output import OutputFormat
from lenscli.core.config import get_app_config
from lenscli.core.exceptions import ApplicationError
from lenscli.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


class ErrorHandlingGroup(TyperGroup):
    """Root group that reports ApplicationError on stderr and exits with 1."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except ApplicationError as e:
            logger.debug("Command failed", code=e.code, error=e.message)
            click.echo(f"Error: {e}", err=True)
            raise typer.Exit(1) from e


app = typer.Typer(
    name="lenscli",
    cls=ErrorHandlingGroup,
    help="Kafka control plane CLI: topics, connectors, alerts and datasets.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(topics_app, name="topics")
app.add_typer(topic_app, name="topic")
app.add_typer(connectors_app, name="connectors")
app.add_typer(connector_app, name="connector")
app.add_typer(alert_app, name="alert")
app.add_typer(dataset_app, name="dataset")
app.command("alerts")(alerts)


@app.callback()
def main(
    ctx: typer.Context,
    output: Optional[OutputFormat] = typer.Option(
        None,
        "--output",
        "-o",
        case_sensitive=False,
        help="Output format (default from application.yaml)",
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Control plane URL"),
    token: Optional[str] = typer.Option(None, "--token", help="Service account token"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds"),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Kafka control plane CLI.

    Manage topics, topic metadata, connectors, alerts and datasets over
    the control plane REST API.
    """
    if debug:
        setup_logging(level="DEBUG")
    elif verbose:
        setup_logging(level="INFO")
    else:
        setup_logging()
    structlog.contextvars.bind_contextvars(source="cli")

    state = ctx.ensure_object(CliContext)
    if output is not None:
        state.output = output.value
    elif state.output is None:
        state.output = get_app_config().application.output.format
    state.host = host or state.host
    state.token = token or state.token
    state.timeout = timeout if timeout is not None else state.timeout

    ctx.call_on_close(state.close)
    logger.debug("CLI invoked", command=ctx.invoked_subcommand, output=state.output)


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
