"""
CLI Commands.

Organized by resource.
"""

from lenscli.cli.commands.alerts import alert_app, alerts
from lenscli.cli.commands.connectors import connector_app, connectors_app
from lenscli.cli.commands.datasets import app as dataset_app
from lenscli.cli.commands.topics import topic_app, topics_app

__all__ = [
    "alert_app",
    "alerts",
    "connector_app",
    "connectors_app",
    "dataset_app",
    "topic_app",
    "topics_app",
]
