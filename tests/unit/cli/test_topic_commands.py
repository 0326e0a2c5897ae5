"""Unit tests for the topics and topic commands."""

import json

import pytest


@pytest.fixture
def topics_listing(topic_payload):
    """Three topics, one of them a control topic."""
    return [
        topic_payload,
        {"topicName": "__consumer_offsets", "partitions": 50, "isControlTopic": True},
        {"topicName": "audit", "partitions": 1},
    ]


class TestGetTopic:
    """Tests for showing one topic."""

    def test_json_output(self, stub, invoke, topic_payload):
        """Test a topic prints as JSON with a decoded schema."""
        stub.add("GET", "/api/topics/orders", json=topic_payload)

        result = invoke("-o", "json", "topic", "--name=orders")

        assert result.exit_code == 0
        printed = json.loads(result.stdout)
        assert printed["topicName"] == "orders"
        assert printed["partitions"] == 3
        assert printed["valueSchema"] == {"type": "record", "name": "Order", "fields": []}

    def test_table_output(self, stub, invoke, topic_payload):
        """Test a topic prints as a table."""
        stub.add("GET", "/api/topics/orders", json=topic_payload)

        result = invoke("topic", "--name=orders")

        assert result.exit_code == 0
        assert "orders" in result.stdout
        assert "Partitions" in result.stdout

    def test_missing_name(self, stub, invoke):
        """Test a missing name is reported without a call."""
        result = invoke("topic")

        assert result.exit_code == 1
        assert 'required flag(s) "name" not set' in result.stderr
        assert stub.count == 0

    def test_not_found_hint(self, stub, invoke):
        """Test a missing topic is reported with the hint."""
        stub.add("GET", "/api/topics/ghost", 404, json={"message": "Topic not found"})

        result = invoke("topic", "--name=ghost")

        assert result.exit_code == 1
        assert "Error: topic 'ghost' does not exist" in result.stderr


class TestListTopics:
    """Tests for listing topics and config keys."""

    def test_table_hides_control_topics(self, stub, invoke, topics_listing):
        """Test control topics are hidden from the table."""
        stub.add("GET", "/api/topics", json=topics_listing)

        result = invoke("topics")

        assert result.exit_code == 0
        assert "orders" in result.stdout
        assert "audit" in result.stdout
        assert "__consumer_offsets" not in result.stdout

    def test_json_keeps_control_topics_sorted(self, stub, invoke, topics_listing):
        """Test JSON keeps control topics, sorted by name."""
        stub.add("GET", "/api/topics", json=topics_listing)

        result = invoke("-o", "json", "topics")

        names = [topic["topicName"] for topic in json.loads(result.stdout)]
        assert names == ["__consumer_offsets", "audit", "orders"]

    def test_names(self, stub, invoke):
        """Test names are listed sorted from the names endpoint."""
        stub.add("GET", "/api/topic-names", json=["orders", "audit"])

        result = invoke("topics", "--names")

        assert result.stdout == "audit\norders\n"
        assert stub.paths() == ["GET /api/topic-names"]

    def test_config_keys_unwrapped(self, stub, invoke):
        """Test config keys print one per line, sorted."""
        stub.add("GET", "/api/configs/default/topics", json=["retention.ms", "cleanup.policy"])

        result = invoke("topics", "keys", "--unwrap")

        assert result.stdout == "cleanup.policy\nretention.ms\n"


class TestCreateTopic:
    """Tests for creating topics."""

    def test_from_flags(self, stub, invoke):
        """Test a topic is created from flags."""
        stub.add("POST", "/api/topics", 201)

        result = invoke(
            "topic", "create", "--name=orders", "--partitions=3", '--configs={"cleanup.policy": "compact"}'
        )

        assert result.exit_code == 0
        assert "Topic [orders] created" in result.stdout
        assert json.loads(stub.calls[0].content) == {
            "topicName": "orders",
            "replication": 1,
            "partitions": 3,
            "configs": {"cleanup.policy": "compact"},
        }

    def test_from_file(self, stub, invoke, write_file):
        """Test a topic is created from a file."""
        stub.add("POST", "/api/topics", 201)
        path = write_file("topic.yml", "name: orders\nreplication: 3\npartitions: 6\n")

        result = invoke("topic", "create", path)

        assert result.exit_code == 0
        body = json.loads(stub.calls[0].content)
        assert (body["topicName"], body["replication"], body["partitions"]) == ("orders", 3, 6)

    def test_missing_name_makes_no_calls(self, stub, invoke):
        """Test a missing name makes no calls."""
        result = invoke("topic", "create", "--partitions=3")

        assert result.exit_code != 0
        assert "name" in result.stderr
        assert stub.count == 0

    def test_name_mismatch(self, stub, invoke, write_file):
        """Test a conflicting name flag fails."""
        path = write_file("topic.yml", "name: orders\n")

        result = invoke("topic", "create", path, "--name=payments")

        assert result.exit_code == 1
        assert "payments" in result.stderr
        assert stub.count == 0

    def test_bad_inline_configs(self, stub, invoke):
        """Test unparsable configs fail without a call."""
        result = invoke("topic", "create", "--name=orders", "--configs=cleanup.policy=compact")

        assert result.exit_code == 1
        assert "unable to parse the configs" in result.stderr
        assert stub.count == 0

    def test_silent(self, stub, invoke):
        """Test silent mutes the narration."""
        stub.add("POST", "/api/topics", 201)

        result = invoke("topic", "create", "--name=orders", "--silent")

        assert result.exit_code == 0
        assert result.stdout == ""

    def test_server_rejects(self, stub, invoke):
        """Test the server's rejection is reported."""
        stub.add("POST", "/api/topics", 400, json={"message": "Topic already exists"})

        result = invoke("topic", "create", "--name=orders")

        assert result.exit_code == 1
        assert "Topic already exists" in result.stderr


class TestUpdateTopic:
    """Tests for updating topic configs."""

    def test_configs_sent_as_pairs(self, stub, invoke):
        """Test a config map is sent as key/value entries."""
        stub.add("PUT", "/api/configs/topics/orders", 200)

        result = invoke("topic", "update", "--name=orders", '--configs={"max.message.bytes": "1000020"}')

        assert result.exit_code == 0
        assert "Config updated for topic [orders]" in result.stdout
        assert json.loads(stub.calls[0].content) == {
            "configs": [{"key": "max.message.bytes", "value": "1000020"}],
        }

    def test_configs_named_key_and_value(self, stub, invoke):
        """Test configs literally named key and value are two entries."""
        stub.add("PUT", "/api/configs/topics/orders", 200)

        result = invoke("topic", "update", "--name=orders", '--configs={"key": "a", "value": "b"}')

        assert result.exit_code == 0
        assert json.loads(stub.calls[0].content) == {
            "configs": [{"key": "key", "value": "a"}, {"key": "value", "value": "b"}],
        }

    def test_configs_as_entry_list(self, stub, invoke):
        """Test a list of key/value entries is sent as given."""
        stub.add("PUT", "/api/configs/topics/orders", 200)

        result = invoke(
            "topic", "update", "--name=orders", "--partitions=6", '--configs=[{"key": "retention.ms", "value": "1000"}]'
        )

        assert result.exit_code == 0
        assert json.loads(stub.calls[0].content) == {
            "configs": [{"key": "retention.ms", "value": "1000"}],
            "partitions": 6,
        }

    def test_missing_topic(self, stub, invoke):
        """Test updating a missing topic is reported with the hint."""
        stub.add("PUT", "/api/configs/topics/ghost", 404, json={"message": "not found"})

        result = invoke("topic", "update", "--name=ghost", '--configs={"a": "b"}')

        assert result.exit_code == 1
        assert "topic 'ghost' does not exist" in result.stderr


class TestDeleteTopic:
    """Tests for deleting topics and records."""

    def test_delete_topic(self, stub, invoke):
        """Test a topic is deleted."""
        stub.add("DELETE", "/api/topics/orders", 200)

        result = invoke("topic", "delete", "--name=orders")

        assert result.exit_code == 0
        assert "Topic [orders] marked for deletion" in result.stdout
        assert stub.paths() == ["DELETE /api/topics/orders"]

    def test_delete_records(self, stub, invoke):
        """Test records are deleted up to an offset."""
        stub.add("DELETE", "/api/topics/orders/0/1260", 200)

        result = invoke("topic", "delete", "--name=orders", "--partition=0", "--offset=1260")

        assert result.exit_code == 0
        assert "up to offset [1260]" in result.stdout
        assert stub.paths() == ["DELETE /api/topics/orders/0/1260"]

    def test_partition_without_offset_deletes_topic(self, stub, invoke):
        """Test a partition alone deletes the topic."""
        stub.add("DELETE", "/api/topics/orders", 200)

        invoke("topic", "delete", "--name=orders", "--partition=0")

        assert stub.paths() == ["DELETE /api/topics/orders"]


class TestTopicMetadata:
    """Tests for topic metadata commands."""

    def test_single(self, stub, invoke):
        """Test metadata prints with decoded schemas."""
        stub.add(
            "GET",
            "/api/metadata/topics/orders",
            json={"topicName": "orders", "keyType": "STRING", "valueType": "JSON", "valueSchema": '{"type": "object"}'},
        )

        result = invoke("-o", "json", "topics", "metadata", "--name=orders")

        printed = json.loads(result.stdout)
        assert printed["keyType"] == "STRING"
        assert printed["valueSchema"] == {"type": "object"}

    def test_set_from_file(self, stub, invoke, write_file):
        """Test metadata is set from a file and flags."""
        stub.add("POST", "/api/metadata/topics/orders", 200)
        path = write_file("metadata.yml", "topicName: orders\nkeyType: STRING\n")

        result = invoke("topics", "metadata", "set", path, "--value-type=AVRO")

        assert result.exit_code == 0
        assert "Metadata for topic [orders] created/updated" in result.stdout
        body = json.loads(stub.calls[0].content)
        assert body["keyType"] == "STRING"
        assert body["valueType"] == "AVRO"

    def test_hidden_alias(self, stub, invoke):
        """Test the hidden update alias works."""
        stub.add("POST", "/api/metadata/topics/orders", 200)

        result = invoke("topics", "metadata", "update", "--name=orders", "--key-type=STRING")

        assert result.exit_code == 0

    def test_delete(self, stub, invoke):
        """Test metadata is deleted."""
        stub.add("DELETE", "/api/metadata/topics/orders", 200)

        result = invoke("topics", "metadata", "delete", "--name=orders")

        assert result.exit_code == 0
        assert "Metadata for topic [orders] deleted" in result.stdout
