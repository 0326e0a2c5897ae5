"""
Topic Commands.

`topics` lists topics, their config keys and metadata; `topic` retrieves,
creates, updates and deletes a single topic.
"""

from typing import Optional

import typer

from lenscli.api.models import (
    CreateTopicPayload,
    Topic,
    TopicMetadata,
    TopicMetadataView,
    TopicView,
    UpdateTopicPayload,
)
from lenscli.cli.context import get_state
from lenscli.cli.payload import PayloadResolver
from lenscli.cli.validation import check_required
from lenscli.core.exceptions import not_found_hint

topics_app = typer.Typer(help="List all available topics")
metadata_app = typer.Typer(help="List all available topics metadata")
topic_app = typer.Typer(help="Manage a particular topic: retrieve, create, update or delete it")

topics_app.add_typer(metadata_app, name="metadata")


def _not_control_topic(view: TopicView) -> bool:
    return not view.topic.is_control_topic


# =============================================================================
# topics
# =============================================================================


@topics_app.callback(invoke_without_command=True)
def list_topics(
    ctx: typer.Context,
    names: bool = typer.Option(False, "--names", help="Print topic names only"),
    unwrap: bool = typer.Option(False, "--unwrap", help="Print names one per line, no table or JSON"),
) -> None:
    """
    List all available topics.

    Control topics are hidden in the table view and kept in JSON.

    Examples:
        lenscli topics
        lenscli topics --names
        lenscli -o json topics
    """
    if ctx.invoked_subcommand is not None:
        return

    state = get_state(ctx)
    client = state.get_client()
    out = state.renderer(names=names, unwrap=unwrap)

    if names or unwrap:
        out.render(sorted(client.get_topics_names()))
        return

    topics = sorted(client.get_topics(), key=lambda t: t.topic_name)
    out.render(
        [TopicView.from_topic(topic) for topic in topics],
        model=Topic,
        row_filter=_not_control_topic,
    )


@topics_app.command()
def keys(
    ctx: typer.Context,
    unwrap: bool = typer.Option(False, "--unwrap", help="Print keys one per line, no table or JSON"),
) -> None:
    """
    List all available config keys for topics.

    Examples:
        lenscli topics keys --unwrap
    """
    state = get_state(ctx)
    config_keys = sorted(state.get_client().get_available_topic_config_keys())
    state.renderer(unwrap=unwrap).render(config_keys, columns=[("Key", lambda row: row)])


# =============================================================================
# topics metadata
# =============================================================================


@metadata_app.callback(invoke_without_command=True)
def list_metadata(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Topic to return metadata for"),
) -> None:
    """
    List all topics metadata, or a single topic's metadata with --name.

    Examples:
        lenscli topics metadata
        lenscli topics metadata --name=orders
    """
    if ctx.invoked_subcommand is not None:
        return

    state = get_state(ctx)
    client = state.get_client()
    out = state.renderer()

    if name:
        with not_found_hint(f"metadata for topic '{name}' does not exist"):
            metadata = client.get_topic_metadata(name)
        out.render(TopicMetadataView.from_metadata(metadata), model=TopicMetadata)
        return

    metas = sorted(client.get_topics_metadata(), key=lambda m: m.topic_name)
    out.render([TopicMetadataView.from_metadata(m) for m in metas], model=TopicMetadata)


@metadata_app.command("delete")
def delete_metadata(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Topic to delete metadata for"),
    silent: bool = typer.Option(False, "--silent", help="Do not print info messages"),
) -> None:
    """
    Delete a topic's metadata.

    Examples:
        lenscli topics metadata delete --name=orders
    """
    check_required({"name": name})

    state = get_state(ctx)
    with not_found_hint(f"metadata for topic '{name}' does not exist"):
        state.get_client().delete_topic_metadata(name)
    state.renderer(silent=silent).info(f"Metadata for topic [{name}] deleted")


def set_metadata(
    ctx: typer.Context,
    file: Optional[str] = typer.Argument(None, help="YAML or JSON file with the topic metadata"),
    name: Optional[str] = typer.Option(None, "--name", help="Topic name to update/create metadata for"),
    key_type: Optional[str] = typer.Option(None, "--key-type", help="Topic key type"),
    value_type: Optional[str] = typer.Option(None, "--value-type", help="Topic value type"),
    key_schema: Optional[str] = typer.Option(None, "--key-schema", help="Topic key schema"),
    value_schema: Optional[str] = typer.Option(None, "--value-schema", help="Topic value schema"),
    silent: bool = typer.Option(False, "--silent", help="Do not print info messages"),
) -> None:
    """
    Create or update a topic's metadata.

    Examples:
        lenscli topics metadata set ./topic_metadata.yml
        lenscli topics metadata set --name=orders --key-type=STRING --value-type=AVRO
    """
    meta = PayloadResolver(TopicMetadata, name_field="topic_name").resolve(
        file=file,
        flags={
            "topic_name": name,
            "key_type": key_type,
            "value_type": value_type,
            "key_schema": key_schema,
            "value_schema": value_schema,
        },
    )
    check_required({"name": meta.topic_name})

    state = get_state(ctx)
    state.get_client().create_or_update_topic_metadata(meta)
    state.renderer(silent=silent).info(f"Metadata for topic [{meta.topic_name}] created/updated")


metadata_app.command("set")(set_metadata)
metadata_app.command("create", hidden=True)(set_metadata)
metadata_app.command("update", hidden=True)(set_metadata)


# =============================================================================
# topic
# =============================================================================


@topic_app.callback(invoke_without_command=True)
def get_topic(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Topic name"),
) -> None:
    """
    Retrieve a topic, including its decoded key and value schemas.

    Examples:
        lenscli topic --name=orders
        lenscli topic create --name=orders --partitions=3
    """
    if ctx.invoked_subcommand is not None:
        return

    check_required({"name": name})

    state = get_state(ctx)
    with not_found_hint(f"topic '{name}' does not exist"):
        topic = state.get_client().get_topic(name)
    state.renderer().render(TopicView.from_topic(topic), model=Topic)


@topic_app.command()
def create(
    ctx: typer.Context,
    file: Optional[str] = typer.Argument(None, help="YAML or JSON file with the topic definition"),
    name: Optional[str] = typer.Option(None, "--name", help="Topic name"),
    replication: int = typer.Option(1, "--replication", help="Topic replication factor"),
    partitions: int = typer.Option(1, "--partitions", help="Number of partitions"),
    configs: Optional[str] = typer.Option(
        None, "--configs", help='Topic configs as JSON or a file, e.g. "{\\"max.message.bytes\\": \\"1000010\\"}"'
    ),
    silent: bool = typer.Option(False, "--silent", help="Do not print info messages"),
) -> None:
    """
    Create a new topic.

    Examples:
        lenscli topic create --name=orders --replication=1 --partitions=3
        lenscli topic create ./topic.yml
    """
    topic = PayloadResolver(CreateTopicPayload, inline_field="configs", name_field="topic_name").resolve(
        file=file,
        inline=configs,
        flags={"topic_name": name, "replication": replication, "partitions": partitions},
    )
    check_required({"name": topic.topic_name})

    state = get_state(ctx)
    state.get_client().create_topic(topic.topic_name, topic.replication, topic.partitions, topic.configs)
    state.renderer(silent=silent).info(f"Topic [{topic.topic_name}] created")


@topic_app.command()
def update(
    ctx: typer.Context,
    file: Optional[str] = typer.Argument(None, help="YAML or JSON file with the topic configs"),
    name: Optional[str] = typer.Option(None, "--name", help="Topic to update"),
    configs: Optional[str] = typer.Option(
        None,
        "--configs",
        help='Topic configs as JSON or a file: a name-to-value map, or a list of {"key", "value"} entries',
    ),
    partitions: int = typer.Option(0, "--partitions", help="Number of partitions (can only be increased)"),
    silent: bool = typer.Option(False, "--silent", help="Do not print info messages"),
) -> None:
    """
    Update a topic's configs and, optionally, increase its partitions.

    Examples:
        lenscli topic update --name=orders --configs='{"max.message.bytes": "1000020"}'
        lenscli topic update ./topic.yml
    """
    topic = PayloadResolver(UpdateTopicPayload, inline_field="configs", name_field="topic_name").resolve(
        file=file,
        inline=configs,
        flags={"topic_name": name, "partitions": partitions},
    )
    check_required({"name": topic.topic_name})

    state = get_state(ctx)
    with not_found_hint(f"topic '{topic.topic_name}' does not exist"):
        state.get_client().update_topic(topic.topic_name, topic.configs, topic.partitions)
    state.renderer(silent=silent).info(f"Config updated for topic [{topic.topic_name}]")


@topic_app.command()
def delete(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Topic name to delete from"),
    partition: int = typer.Option(-1, "--partition", help="Delete records from this partition (needs --offset)"),
    offset: int = typer.Option(-1, "--offset", help="Delete records up to this offset (needs --partition)"),
    silent: bool = typer.Option(False, "--silent", help="Do not print info messages"),
) -> None:
    """
    Delete a topic, or its records up to an offset of one partition.

    Examples:
        lenscli topic delete --name=orders
        lenscli topic delete --name=orders --partition=0 --offset=1260
    """
    check_required({"name": name})

    state = get_state(ctx)
    client = state.get_client()
    out = state.renderer(silent=silent)

    with not_found_hint(f"topic '{name}' does not exist"):
        if partition >= 0 and offset >= 0:
            client.delete_topic_records(name, partition, offset)
            out.info(
                f"Records from topic [{name}] and partition [{partition}] up to offset [{offset}] "
                "are marked for deletion. This may take a few moments to have effect"
            )
            return

        client.delete_topic(name)
    out.info(f"Topic [{name}] marked for deletion. This may take a few moments to have effect")
