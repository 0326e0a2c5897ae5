"""
Dataset Commands.

Set or remove the description and tags of a dataset, addressed by its
connection and name.
"""

from typing import Any, Optional

import typer

from lenscli.cli.context import get_state
from lenscli.cli.validation import check_required
from lenscli.core.exceptions import ValidationError, not_found_hint

app = typer.Typer(help="Manage dataset metadata: description and tags", no_args_is_help=True)


def _connection_option() -> Any:
    return typer.Option(None, "--connection", help="Name of the connection")


def _name_option() -> Any:
    return typer.Option(None, "--name", help="Name of the dataset")


def _silent_option() -> Any:
    return typer.Option(False, "--silent", help="Do not print info messages")


def _hint(connection: str, name: str) -> str:
    return f"dataset '{connection}/{name}' does not exist"


@app.command("update-description")
def update_description(
    ctx: typer.Context,
    connection: Optional[str] = _connection_option(),
    name: Optional[str] = _name_option(),
    description: Optional[str] = typer.Option(None, "--description", help="Description of the dataset"),
    silent: bool = _silent_option(),
) -> None:
    """
    Set a dataset description.

    Examples:
        lenscli dataset update-description --connection=kafka --name=orders --description="Customer orders"
    """
    check_required({"connection": connection, "name": name, "description": description})
    if not description.strip():
        raise ValidationError("--description value cannot be blank")

    state = get_state(ctx)
    with not_found_hint(_hint(connection, name)):
        state.get_client().update_dataset_description(connection, name, description)
    state.renderer(silent=silent).info("Dataset description has been updated successfully")


@app.command("update-tags")
def update_tags(
    ctx: typer.Context,
    connection: Optional[str] = _connection_option(),
    name: Optional[str] = _name_option(),
    tags: Optional[list[str]] = typer.Option(None, "--tag", help="Tag to assign, can be given multiple times"),
    silent: bool = _silent_option(),
) -> None:
    """
    Set a dataset's tags, replacing the existing ones.

    Examples:
        lenscli dataset update-tags --connection=kafka --name=orders --tag=pii --tag=finance
    """
    check_required({"connection": connection, "name": name})
    if not tags:
        raise ValidationError("Tags cannot be empty")

    state = get_state(ctx)
    with not_found_hint(_hint(connection, name)):
        state.get_client().update_dataset_tags(connection, name, list(tags))
    state.renderer(silent=silent).info("Dataset tags have been updated successfully")


@app.command("remove-description")
def remove_description(
    ctx: typer.Context,
    connection: Optional[str] = _connection_option(),
    name: Optional[str] = _name_option(),
    silent: bool = _silent_option(),
) -> None:
    """
    Unset a dataset description.

    Examples:
        lenscli dataset remove-description --connection=kafka --name=orders
    """
    check_required({"connection": connection, "name": name})

    state = get_state(ctx)
    with not_found_hint(_hint(connection, name)):
        state.get_client().update_dataset_description(connection, name, "")
    state.renderer(silent=silent).info("Dataset description has been removed")


@app.command("remove-tags")
def remove_tags(
    ctx: typer.Context,
    connection: Optional[str] = _connection_option(),
    name: Optional[str] = _name_option(),
    silent: bool = _silent_option(),
) -> None:
    """
    Remove all tags of a dataset.

    Examples:
        lenscli dataset remove-tags --connection=kafka --name=orders
    """
    check_required({"connection": connection, "name": name})

    state = get_state(ctx)
    with not_found_hint(_hint(connection, name)):
        state.get_client().update_dataset_tags(connection, name, [])
    state.renderer(silent=silent).info("Dataset tags have been removed")
