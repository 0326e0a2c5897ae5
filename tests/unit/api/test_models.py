"""Unit tests for wire models."""

import json

import pytest

from lenscli.api.models import (
    AlertSettingConditionPayload,
    ConnectorPlugin,
    CreateTopicPayload,
    CreateUpdateConnectorPayload,
    Topic,
    TopicConfig,
    TopicMetadata,
    TopicMetadataView,
    TopicView,
    UpdateTopicPayload,
    decode_schema,
)
from lenscli.core.exceptions import NameMismatchError


class TestCaseInsensitiveDecoding:
    """Wire keys match fields regardless of case."""

    def test_pascal_case_keys(self, topic_payload):
        """Test PascalCase keys are decoded."""
        topic = Topic.model_validate(topic_payload)

        assert topic.topic_name == "orders"
        assert topic.partitions == 3
        assert topic.key_type == "STRING"

    def test_snake_case_keys(self):
        """Test snake_case keys are decoded."""
        topic = Topic.model_validate({"topic_name": "orders", "total_messages": 7})
        assert topic.total_messages == 7

    def test_unknown_keys_ignored(self):
        """Test keys with no field are ignored."""
        topic = Topic.model_validate({"topicName": "orders", "somethingNew": 1})
        assert topic.topic_name == "orders"

    def test_alias_choices_are_matched(self):
        """Test alternative aliases match in any case."""
        payload = AlertSettingConditionPayload.model_validate({"ALERTID": 1001, "Condition": "lag > 1"})
        assert payload.alert == 1001
        assert payload.condition == "lag > 1"

    def test_plugin_class_key(self):
        """Test the plugin class key maps both ways."""
        plugin = ConnectorPlugin.model_validate({"class": "io.lenses.Sink", "type": "sink"})
        assert plugin.class_name == "io.lenses.Sink"
        assert plugin.to_wire()["class"] == "io.lenses.Sink"


class TestWireEncoding:
    """Tests for encoding models back to the wire."""

    def test_to_wire_uses_camel_case(self, topic_payload):
        """Test encoded keys are camelCase."""
        wire = Topic.model_validate(topic_payload).to_wire()

        assert wire["topicName"] == "orders"
        assert wire["messagesPerSecond"] == 12
        assert "topic_name" not in wire

    def test_json_round_trip_is_stable(self, topic_payload):
        """Test a decoded topic survives encoding unchanged."""
        topic = Topic.model_validate(topic_payload)
        decoded = Topic.model_validate(json.loads(json.dumps(topic.to_wire())))
        assert decoded == topic

    def test_topic_config_entry(self):
        """Test a config entry encodes as key and value."""
        assert TopicConfig(key="retention.ms", value="1000").to_wire() == {"key": "retention.ms", "value": "1000"}


class TestViews:
    """View types compose the base resource with decoded schemas."""

    def test_topic_view_decodes_json_schema(self, topic_payload):
        """Test a JSON value schema is decoded."""
        view = TopicView.from_topic(Topic.model_validate(topic_payload))
        wire = view.to_wire()

        assert wire["topicName"] == "orders"
        assert wire["valueSchema"] == {"type": "record", "name": "Order", "fields": []}
        assert wire["keySchema"] is None

    def test_non_json_schema_kept_as_text(self):
        """Test non-JSON schemas stay text and empty ones are None."""
        assert decode_schema("not json") == "not json"
        assert decode_schema("") is None

    def test_metadata_view_reads_raw_schema_keys(self):
        """Test metadata views decode the raw schema keys."""
        meta = TopicMetadata.model_validate({"topicName": "orders", "keySchemaRaw": '{"type": "string"}'})
        wire = TopicMetadataView.from_metadata(meta).to_wire()

        assert wire["topicName"] == "orders"
        assert wire["keySchema"] == {"type": "string"}


class TestPayloads:
    """Tests for payload model defaults and normalisation."""

    def test_create_topic_defaults(self):
        """Test create topic defaults to one partition and replica."""
        payload = CreateTopicPayload.model_validate({"name": "orders"})

        assert payload.topic_name == "orders"
        assert payload.replication == 1
        assert payload.partitions == 1
        assert payload.configs == {}

    def test_update_topic_map_configs(self):
        """Test a config map becomes entries."""
        payload = UpdateTopicPayload.model_validate({"name": "orders", "configs": {"cleanup.policy": "compact"}})
        assert payload.configs == [TopicConfig(key="cleanup.policy", value="compact")]

    def test_update_topic_defaults(self):
        """Test update topic leaves partitions and configs empty."""
        payload = UpdateTopicPayload.model_validate({"name": "orders"})
        assert payload.partitions == 0
        assert payload.configs == []

    def test_connector_name_filled_from_config(self):
        """Test the connector name is taken from config."""
        payload = CreateUpdateConnectorPayload(cluster_alias="dev", config={"name": "orders-sink"})
        payload.normalize()
        assert payload.name == "orders-sink"

    def test_connector_config_filled_from_name(self):
        """Test config name is filled from the connector name."""
        payload = CreateUpdateConnectorPayload(cluster_alias="dev", name="orders-sink")
        payload.normalize()
        assert payload.config["name"] == "orders-sink"

    def test_connector_name_conflict(self):
        """Test differing names raise."""
        payload = CreateUpdateConnectorPayload(name="orders-sink", config={"name": "payments-sink"})
        with pytest.raises(NameMismatchError):
            payload.normalize()

    def test_connector_cluster_name_key(self):
        """Test clusterName is accepted for the cluster alias."""
        payload = CreateUpdateConnectorPayload.model_validate({"clusterName": "dev", "name": "orders-sink"})
        assert payload.cluster_alias == "dev"
