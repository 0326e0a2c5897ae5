"""
Unit Test Fixtures.

Fixtures for unit tests - the control plane is always stubbed.
Unit tests should be fast and isolated, never touching the network.
"""

from pathlib import Path
from typing import Any

import pytest


# =============================================================================
# Remote Response Fixtures
# =============================================================================


@pytest.fixture
def topic_payload() -> dict[str, Any]:
    """A topic as returned by GET api/topics/{name}, PascalCase keys included."""
    return {
        "TopicName": "orders",
        "Partitions": 3,
        "replication": 1,
        "keyType": "STRING",
        "valueType": "AVRO",
        "isControlTopic": False,
        "valueSchema": '{"type": "record", "name": "Order", "fields": []}',
        "messagesPerSecond": 12,
        "totalMessages": 1500,
    }


@pytest.fixture
def connector_payload() -> dict[str, Any]:
    return {
        "name": "orders-sink",
        "type": "sink",
        "config": {"connector.class": "io.lenses.Sink", "name": "orders-sink"},
        "tasks": [{"connector": "orders-sink", "task": 0}],
    }


@pytest.fixture
def alert_settings_payload() -> dict[str, Any]:
    return {
        "categories": {
            "infrastructure": [
                {"id": 1001, "description": "Broker is down", "category": "Infrastructure", "enabled": True},
            ],
            "consumers": [
                {
                    "id": 2000,
                    "description": "Consumer lag",
                    "category": "Consumers",
                    "enabled": False,
                    "conditions": {"28bbad2b": "lag >= 100000"},
                },
            ],
            "producers": [],
        }
    }


# =============================================================================
# Payload File Fixtures
# =============================================================================


@pytest.fixture
def write_file(tmp_path: Path):
    """
    Write a payload file under tmp_path and return its path as a string.

    Usage:
        path = write_file("topic.yml", "name: orders\\npartitions: 3\\n")
    """

    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write
