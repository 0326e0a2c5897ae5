"""
API Schemas.

Pydantic models for the control plane's request and response bodies.

Wire keys are camelCase. Decoding matches keys case-insensitively, so
`TopicName`, `topicName` and `topic_name` all land in `topic_name`.
Encoding (model_dump(by_alias=True)) always emits camelCase.

View types (TopicView, TopicMetadataView) compose the base resource with
display-only derived fields instead of subclassing it.
"""

import json
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from lenscli.core.exceptions import NameMismatchError

KV = dict[str, Any]


def _field_keys(name: str, field: Any) -> list[str]:
    """All keys a field may be populated from."""
    keys = [name]
    if field.alias:
        keys.append(field.alias)
    alias = field.validation_alias
    if isinstance(alias, str):
        keys.append(alias)
    elif isinstance(alias, AliasChoices):
        keys.extend(choice for choice in alias.choices if isinstance(choice, str))
    return keys


class ApiModel(BaseModel):
    """Base for all wire models: camelCase aliases, case-insensitive decoding."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _match_keys_case_insensitively(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known: dict[str, str] = {}
        for name, field in cls.model_fields.items():
            for key in _field_keys(name, field):
                known.setdefault(key.lower(), key)
        return {
            known.get(key.lower(), key) if isinstance(key, str) else key: value
            for key, value in data.items()
        }

    def to_wire(self) -> dict[str, Any]:
        """Dump with camelCase keys, ready for json=."""
        return self.model_dump(by_alias=True, mode="json")


def decode_schema(raw: str | None) -> Any:
    """Decode a schema string into JSON; non-JSON schemas are kept as text."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw


# =============================================================================
# Connect
# =============================================================================


class ConnectCluster(ApiModel):
    name: str
    url: str = Field(default="", json_schema_extra={"header": False})
    statuses: str = ""
    configs: str = ""
    offsets: str = ""


class ConnectorTaskID(ApiModel):
    connector: str
    task: int


class Connector(ApiModel):
    name: str
    cluster_alias: str = Field(default="", title="Cluster")
    type: str = ""
    config: dict[str, Any] = Field(default_factory=dict, json_schema_extra={"header": False})
    tasks: list[ConnectorTaskID] = Field(default_factory=list, json_schema_extra={"header": False})


class ConnectorState(ApiModel):
    state: str
    worker_id: str = ""
    trace: str = ""


class ConnectorTaskStatus(ApiModel):
    id: int
    state: str
    worker_id: str = ""
    trace: str = Field(default="", json_schema_extra={"header": False})


class ConnectorStatus(ApiModel):
    name: str
    connector: ConnectorState
    tasks: list[ConnectorTaskStatus] = Field(default_factory=list)


class ConnectorPlugin(ApiModel):
    class_name: str = Field(
        title="Class",
        alias="class",
        validation_alias=AliasChoices("class", "className", "class_name"),
    )
    type: str = ""
    version: str = ""


class CreateUpdateConnectorPayload(ApiModel):
    """Body for connector create/update; also the shape of a connector file."""

    cluster_alias: str = Field(
        default="",
        validation_alias=AliasChoices("clusterAlias", "clusterName", "cluster_alias"),
    )
    name: str = ""
    config: dict[str, Any] = Field(default_factory=dict)

    def normalize(self) -> None:
        """
        Reconcile the payload name with config["name"].

        Whichever is set fills the other; both set and different is an error.
        """
        config_name = self.config.get("name") or ""
        if not self.name:
            self.name = str(config_name)
        elif not config_name:
            self.config["name"] = self.name
        elif str(config_name) != self.name:
            raise NameMismatchError(self.name, str(config_name))


# =============================================================================
# Topics
# =============================================================================


class Topic(ApiModel):
    topic_name: str = Field(title="Name")
    key_type: str = ""
    value_type: str = ""
    partitions: int = 0
    replication: int = 0
    is_control_topic: bool = Field(default=False, json_schema_extra={"header": False})
    key_schema: str | None = Field(default=None, json_schema_extra={"header": False})
    value_schema: str | None = Field(default=None, json_schema_extra={"header": False})
    messages_per_second: int = Field(default=0, title="Msg/sec")
    total_messages: int = Field(default=0, title="Total Msg")
    timestamp: int = Field(default=0, json_schema_extra={"header": False})
    configs: list[KV] = Field(default_factory=list, json_schema_extra={"header": False})


class TopicView(BaseModel):
    """A topic plus its decoded key/value schemas."""

    topic: Topic
    key_schema: Any = None
    value_schema: Any = None

    @classmethod
    def from_topic(cls, topic: Topic) -> "TopicView":
        return cls(
            topic=topic,
            key_schema=decode_schema(topic.key_schema),
            value_schema=decode_schema(topic.value_schema),
        )

    def to_wire(self) -> dict[str, Any]:
        data = self.topic.to_wire()
        data["keySchema"] = self.key_schema
        data["valueSchema"] = self.value_schema
        return data


class CreateTopicPayload(ApiModel):
    topic_name: str = Field(
        default="",
        validation_alias=AliasChoices("topicName", "name", "topic_name"),
    )
    replication: int = 1
    partitions: int = 1
    configs: KV = Field(default_factory=dict)


class TopicConfig(ApiModel):
    """One topic config entry, as the configs endpoint takes it."""

    key: str
    value: Any = None


class UpdateTopicPayload(ApiModel):
    topic_name: str = Field(
        default="",
        validation_alias=AliasChoices("topicName", "name", "topic_name"),
    )
    partitions: int = 0
    configs: list[TopicConfig] = Field(default_factory=list)

    @field_validator("configs", mode="before")
    @classmethod
    def _pairs_from_mapping(cls, value: Any) -> Any:
        """A mapping is always config name to value; a list holds {key, value} entries."""
        if isinstance(value, dict):
            return [{"key": key, "value": item} for key, item in value.items()]
        return value


class TopicMetadata(ApiModel):
    topic_name: str = Field(
        default="",
        title="Name",
        validation_alias=AliasChoices("topicName", "name", "topic_name"),
    )
    key_type: str = ""
    value_type: str = ""
    key_schema: str | None = Field(
        default=None,
        json_schema_extra={"header": False},
        validation_alias=AliasChoices("keySchema", "keySchemaRaw", "key_schema"),
    )
    value_schema: str | None = Field(
        default=None,
        json_schema_extra={"header": False},
        validation_alias=AliasChoices("valueSchema", "valueSchemaRaw", "value_schema"),
    )


class TopicMetadataView(BaseModel):
    """Topic metadata plus decoded key/value schemas."""

    metadata: TopicMetadata
    key_schema: Any = None
    value_schema: Any = None

    @classmethod
    def from_metadata(cls, metadata: TopicMetadata) -> "TopicMetadataView":
        return cls(
            metadata=metadata,
            key_schema=decode_schema(metadata.key_schema),
            value_schema=decode_schema(metadata.value_schema),
        )

    def to_wire(self) -> dict[str, Any]:
        data = self.metadata.to_wire()
        data["keySchema"] = self.key_schema
        data["valueSchema"] = self.value_schema
        return data


# =============================================================================
# Alerts
# =============================================================================


class Alert(ApiModel):
    alert_id: int = Field(default=0, title="ID")
    event_id: int = Field(default=0, json_schema_extra={"header": False})
    level: str = ""
    category: str = ""
    summary: str = ""
    instance: str = ""
    timestamp: int = 0
    labels: dict[str, str] = Field(default_factory=dict, json_schema_extra={"header": False})


class AlertSetting(ApiModel):
    id: int = Field(title="ID")
    description: str = ""
    category: str = ""
    enabled: bool = False
    is_available: bool = Field(default=False, title="Available")
    docs: str = Field(default="", json_schema_extra={"header": False})
    conditions: dict[str, str] = Field(default_factory=dict, json_schema_extra={"header": False})


class AlertSettingsCategories(ApiModel):
    infrastructure: list[AlertSetting] = Field(default_factory=list)
    consumers: list[AlertSetting] = Field(default_factory=list)
    producers: list[AlertSetting] = Field(default_factory=list)


class AlertSettings(ApiModel):
    categories: AlertSettingsCategories = Field(default_factory=AlertSettingsCategories)


class AlertSettingConditionPayload(ApiModel):
    alert: int = Field(
        default=0,
        validation_alias=AliasChoices("alert", "alertID", "alertId", "alert_id"),
    )
    condition: str = ""


class AlertSettingConditionsPayload(ApiModel):
    alert: int = Field(
        default=0,
        validation_alias=AliasChoices("alert", "alertID", "alertId", "alert_id"),
    )
    conditions: list[str] = Field(default_factory=list)
