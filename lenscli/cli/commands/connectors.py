"""
Connector Commands.

`connectors` lists connectors, connect clusters and plugins, fanning out
over every connect cluster with --clusterName="*". `connector` manages a
single connector and its tasks.
"""

from typing import Any, Optional

import typer

from lenscli.api.client import LensesClient
from lenscli.api.fanout import ALL_CLUSTERS, FanoutResult, fan_out
from lenscli.api.models import (
    ConnectCluster,
    Connector,
    ConnectorPlugin,
    ConnectorTaskStatus,
    CreateUpdateConnectorPayload,
)
from lenscli.cli.context import get_state
from lenscli.cli.output import Renderer
from lenscli.cli.payload import PayloadResolver
from lenscli.cli.validation import check_required
from lenscli.core.exceptions import RemoteError, not_found_hint
from lenscli.core.logging import get_logger

logger = get_logger(__name__)

connectors_app = typer.Typer(help="List of active connectors")
connector_app = typer.Typer(help="Manage a particular connector: retrieve, create, update, pause or delete it")
task_app = typer.Typer(help="Work with a particular connector task", no_args_is_help=True)

connector_app.add_typer(task_app, name="task")

UNKNOWN_PLUGIN_VERSION = "X.X.X"

STATUS_COLUMNS = [
    ("Name", lambda row: row.get("name")),
    ("State", lambda row: row.get("connector", {}).get("state")),
    ("Worker ID", lambda row: row.get("connector", {}).get("workerId")),
    ("Tasks", lambda row: ", ".join(f"{t.get('id')}:{t.get('state')}" for t in row.get("tasks", []))),
]


def _cluster_option(help_text: str = "Connect cluster name") -> Any:
    return typer.Option(None, "--clusterName", help=help_text)


def _name_option() -> Any:
    return typer.Option(None, "--name", help="Connector name")


def _silent_option() -> Any:
    return typer.Option(False, "--silent", help="Do not print info messages")


def _report_failure(out: Renderer, what: str) -> Any:
    def report(member: str, error: RemoteError) -> None:
        out.error(f"{what} '{member}': {error}")

    return report


def _log_partial(outcome: FanoutResult) -> None:
    """Summarise a fan-out that lost some, but not all, members."""
    error = outcome.error
    if error is not None:
        logger.info("Fan-out incomplete", code=error.code, failed=error.members, error=error.message)


def _connector_names(client: LensesClient, cluster_name: str, out: Renderer) -> list[tuple[str, str]]:
    """(cluster, connector) pairs, from one cluster or every cluster for "*"."""
    if cluster_name != ALL_CLUSTERS:
        return [(cluster_name, name) for name in client.get_connectors(cluster_name)]

    clusters = client.get_connect_clusters()
    outcome = fan_out(
        clusters,
        lambda cluster: client.get_connectors(cluster.name),
        key=lambda cluster: cluster.name,
        on_failure=_report_failure(out, "unable to list connectors of cluster"),
    )
    _log_partial(outcome)
    return [(cluster, name) for cluster, names in outcome.results for name in names]


# =============================================================================
# connectors
# =============================================================================


@connectors_app.callback(invoke_without_command=True)
def list_connectors(
    ctx: typer.Context,
    cluster_name: Optional[str] = _cluster_option('Connect cluster name, or "*" for all clusters'),
    names: bool = typer.Option(False, "--names", help="Print connector names only"),
) -> None:
    """
    List connectors of one connect cluster, or of every cluster with "*".

    Details are fetched per connector; a connector that cannot be
    retrieved is reported on stderr and left out.

    Examples:
        lenscli connectors --clusterName=dev
        lenscli connectors --clusterName="*" --names
    """
    if ctx.invoked_subcommand is not None:
        return

    state = get_state(ctx)
    client = state.get_client()
    out = state.renderer(names=names)

    pairs = _connector_names(client, cluster_name or ALL_CLUSTERS, out)

    if names:
        out.render([name for _, name in pairs])
        return

    outcome = fan_out(
        pairs,
        lambda pair: client.get_connector(*pair),
        key=lambda pair: f"{pair[0]}:{pair[1]}",
        on_failure=_report_failure(out, "unable to retrieve connector"),
    )
    out.render(outcome.values(), model=Connector)
    _log_partial(outcome)


@connectors_app.command()
def plugins(
    ctx: typer.Context,
    cluster_name: Optional[str] = _cluster_option('Connect cluster name, or "*" for all clusters'),
) -> None:
    """
    List the connector plugins available in a connect cluster.

    Examples:
        lenscli connectors plugins --clusterName=dev
        lenscli connectors plugins --clusterName="*"
    """
    check_required({"clusterName": cluster_name})

    state = get_state(ctx)
    client = state.get_client()
    out = state.renderer()

    if cluster_name == ALL_CLUSTERS:
        outcome = fan_out(
            client.get_connect_clusters(),
            lambda cluster: client.get_connector_plugins(cluster.name),
            key=lambda cluster: cluster.name,
            on_failure=_report_failure(out, "unable to list plugins of cluster"),
        )
        found = [plugin for cluster_plugins in outcome.values() for plugin in cluster_plugins]
        _log_partial(outcome)
    else:
        found = client.get_connector_plugins(cluster_name)

    for plugin in found:
        if plugin.version in ("", "null"):
            plugin.version = UNKNOWN_PLUGIN_VERSION

    out.render(found, model=ConnectorPlugin, name=lambda plugin: plugin.class_name)


@connectors_app.command()
def clusters(
    ctx: typer.Context,
    names: bool = typer.Option(False, "--names", help="Print cluster names only"),
    no_newline: bool = typer.Option(False, "--no-newline", help="Separate names with spaces instead of new lines"),
) -> None:
    """
    List the available connect clusters.

    Examples:
        lenscli connectors clusters
        lenscli connectors clusters --names --no-newline
    """
    state = get_state(ctx)
    connect_clusters = state.get_client().get_connect_clusters()
    state.renderer(names=names, no_newline=no_newline).render(
        connect_clusters,
        model=ConnectCluster,
        name=lambda cluster: cluster.name,
    )


# =============================================================================
# connector
# =============================================================================


@connector_app.callback(invoke_without_command=True)
def get_connector(
    ctx: typer.Context,
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
) -> None:
    """
    Retrieve a connector.

    Examples:
        lenscli connector --clusterName=dev --name=orders-sink
    """
    if ctx.invoked_subcommand is not None:
        return

    check_required({"clusterName": cluster_name, "name": name})

    state = get_state(ctx)
    with not_found_hint(f"connector '{cluster_name}:{name}' does not exist"):
        connector = state.get_client().get_connector(cluster_name, name)
    state.renderer().render(connector, model=Connector)


def _resolve_connector(
    file: Optional[str],
    config: Optional[str],
    cluster_name: Optional[str],
    name: Optional[str],
) -> CreateUpdateConnectorPayload:
    payload = PayloadResolver(CreateUpdateConnectorPayload, inline_field="config").resolve(
        file=file,
        inline=config,
        flags={"cluster_alias": cluster_name, "name": name},
    )
    check_required({"clusterName": payload.cluster_alias, "name": payload.name})
    return payload


@connector_app.command()
def create(
    ctx: typer.Context,
    file: Optional[str] = typer.Argument(None, help="YAML or JSON file with the connector definition"),
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
    config: Optional[str] = typer.Option(None, "--config", help='Connector config as JSON or a file, e.g. "{\\"key\\": \\"value\\"}"'),
    silent: bool = _silent_option(),
    print_result: bool = typer.Option(False, "--print", help="Print the created connector"),
) -> None:
    """
    Create a new connector.

    Examples:
        lenscli connector create --clusterName=dev --name=orders-sink --config='{"connector.class": "..."}'
        lenscli connector create ./connector.yml
    """
    payload = _resolve_connector(file, config, cluster_name, name)

    state = get_state(ctx)
    connector = state.get_client().create_connector(payload.cluster_alias, payload.name, payload.config)

    out = state.renderer(silent=silent)
    out.info(f"Connector {payload.name} created")
    if print_result:
        out.render(connector, model=Connector)


@connector_app.command()
def update(
    ctx: typer.Context,
    file: Optional[str] = typer.Argument(None, help="YAML or JSON file with the connector definition"),
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
    config: Optional[str] = typer.Option(None, "--config", help='Connector config as JSON or a file, e.g. "{\\"key\\": \\"value\\"}"'),
    silent: bool = _silent_option(),
    print_result: bool = typer.Option(False, "--print", help="Print the updated connector"),
) -> None:
    """
    Update a connector's config, or create it if missing.

    Examples:
        lenscli connector update --clusterName=dev --name=orders-sink --config=./config.json
        lenscli connector update ./connector.yml
    """
    payload = _resolve_connector(file, config, cluster_name, name)

    state = get_state(ctx)
    with not_found_hint(f"unable to update, connector '{payload.cluster_alias}:{payload.name}' does not exist"):
        connector = state.get_client().update_connector(payload.cluster_alias, payload.name, payload.config)

    out = state.renderer(silent=silent)
    out.info(f"Connector {payload.name} updated")
    if print_result:
        out.render(connector, model=Connector)


@connector_app.command("config")
def show_config(
    ctx: typer.Context,
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
) -> None:
    """
    Print a connector's config.

    Examples:
        lenscli connector config --clusterName=dev --name=orders-sink
    """
    check_required({"clusterName": cluster_name, "name": name})

    state = get_state(ctx)
    with not_found_hint(f"unable to retrieve config, connector '{cluster_name}:{name}' does not exist"):
        connector_config = state.get_client().get_connector_config(cluster_name, name)
    state.renderer().render_mapping(connector_config)


@connector_app.command()
def status(
    ctx: typer.Context,
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
) -> None:
    """
    Print a connector's status and the status of its tasks.

    Examples:
        lenscli connector status --clusterName=dev --name=orders-sink
    """
    check_required({"clusterName": cluster_name, "name": name})

    state = get_state(ctx)
    with not_found_hint(f"unable to retrieve status, connector '{cluster_name}:{name}' does not exist"):
        connector_status = state.get_client().get_connector_status(cluster_name, name)
    state.renderer().render(connector_status, columns=STATUS_COLUMNS)


def _connector_action(
    ctx: typer.Context,
    action: str,
    cluster_name: Optional[str],
    name: Optional[str],
    silent: bool,
) -> None:
    check_required({"clusterName": cluster_name, "name": name})

    state = get_state(ctx)
    client = state.get_client()
    calls = {
        "pause": (client.pause_connector, "paused"),
        "resume": (client.resume_connector, "resumed"),
        "restart": (client.restart_connector, "restarted"),
        "delete": (client.delete_connector, "deleted"),
    }
    call, past = calls[action]

    with not_found_hint(f"unable to {action}, connector '{cluster_name}:{name}' does not exist"):
        call(cluster_name, name)
    state.renderer(silent=silent).info(f"Connector {cluster_name}:{name} {past}")


@connector_app.command()
def pause(
    ctx: typer.Context,
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
    silent: bool = _silent_option(),
) -> None:
    """
    Pause a connector.

    Examples:
        lenscli connector pause --clusterName=dev --name=orders-sink
    """
    _connector_action(ctx, "pause", cluster_name, name, silent)


@connector_app.command()
def resume(
    ctx: typer.Context,
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
    silent: bool = _silent_option(),
) -> None:
    """Resume a paused connector."""
    _connector_action(ctx, "resume", cluster_name, name, silent)


@connector_app.command()
def restart(
    ctx: typer.Context,
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
    silent: bool = _silent_option(),
) -> None:
    """Restart a connector."""
    _connector_action(ctx, "restart", cluster_name, name, silent)


@connector_app.command()
def delete(
    ctx: typer.Context,
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
    silent: bool = _silent_option(),
) -> None:
    """
    Delete a running connector.

    Examples:
        lenscli connector delete --clusterName=dev --name=orders-sink
    """
    _connector_action(ctx, "delete", cluster_name, name, silent)


@connector_app.command()
def tasks(
    ctx: typer.Context,
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
) -> None:
    """
    List a connector's tasks.

    Examples:
        lenscli connector tasks --clusterName=dev --name=orders-sink
    """
    check_required({"clusterName": cluster_name, "name": name})

    state = get_state(ctx)
    with not_found_hint(f"unable to retrieve tasks, connector '{cluster_name}:{name}' does not exist"):
        connector_tasks = state.get_client().get_connector_tasks(cluster_name, name)
    state.renderer().render(connector_tasks)


# =============================================================================
# connector task
# =============================================================================


@task_app.command("status")
def task_status(
    ctx: typer.Context,
    task: int = typer.Option(..., "--task", help="The task ID"),
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
) -> None:
    """
    Get the current status of a connector task.

    Examples:
        lenscli connector task status --clusterName=dev --name=orders-sink --task=1
    """
    check_required({"clusterName": cluster_name, "name": name})

    state = get_state(ctx)
    with not_found_hint("task does not exist"):
        task_state = state.get_client().get_connector_task_status(cluster_name, name, task)
    state.renderer().render(task_state, model=ConnectorTaskStatus)


@task_app.command("restart")
def task_restart(
    ctx: typer.Context,
    task: int = typer.Option(..., "--task", help="The task ID"),
    cluster_name: Optional[str] = _cluster_option(),
    name: Optional[str] = _name_option(),
    silent: bool = _silent_option(),
) -> None:
    """
    Restart a connector task.

    Examples:
        lenscli connector task restart --clusterName=dev --name=orders-sink --task=1
    """
    check_required({"clusterName": cluster_name, "name": name})

    state = get_state(ctx)
    with not_found_hint("task does not exist"):
        state.get_client().restart_connector_task(cluster_name, name, task)
    state.renderer(silent=silent).info(f"Connector task {cluster_name}:{name}:{task} restarted")
