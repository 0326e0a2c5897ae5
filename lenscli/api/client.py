"""
HTTP Client for the control plane.

One method per remote operation. Every method is synchronous, performs
exactly one round trip (plus a one-time login when authenticating with
user/password) and returns a typed model or raises a typed RemoteError.
"""

from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from lenscli.api.models import (
    KV,
    Alert,
    AlertSetting,
    AlertSettings,
    ConnectCluster,
    Connector,
    ConnectorPlugin,
    ConnectorStatus,
    ConnectorTaskStatus,
    Topic,
    TopicConfig,
    TopicMetadata,
)
from lenscli.core.config import get_remote_base_url, get_settings
from lenscli.core.exceptions import BadResponseError, RemoteError, remote_error_for
from lenscli.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

TOKEN_HEADER = "X-Kafka-Lenses-Token"

LOGIN_PATH = "api/login"

CONNECT_CLUSTERS_PATH = "api/kafka-connect/clusters"
CONNECTORS_PATH = "api/proxy-connect/{cluster}/connectors"
CONNECTOR_PATH = CONNECTORS_PATH + "/{name}"
CONNECTOR_PLUGINS_PATH = "api/proxy-connect/{cluster}/connector-plugins"

TOPICS_PATH = "api/topics"
TOPIC_PATH = "api/topics/{name}"
TOPIC_NAMES_PATH = "api/topic-names"
TOPIC_RECORDS_PATH = "api/topics/{name}/{partition}/{offset}"
TOPIC_CONFIGS_PATH = "api/configs/topics/{name}"
TOPIC_CONFIG_KEYS_PATH = "api/configs/default/topics"
TOPICS_METADATA_PATH = "api/metadata/topics"
TOPIC_METADATA_PATH = "api/metadata/topics/{name}"

ALERTS_PATH = "api/alerts"
ALERTS_LIVE_PATH = "api/sse/alerts"
ALERT_SETTINGS_PATH = "api/alerts/settings"
ALERT_SETTING_PATH = "api/alerts/settings/{id}"
ALERT_SETTING_CONDITIONS_PATH = "api/alerts/settings/{id}/condition"
ALERT_SETTING_CONDITION_PATH = "api/alerts/settings/{id}/condition/{uuid}"

DATASET_DESCRIPTION_PATH = "api/v1/datasets/{connection}/{name}/description"
DATASET_TAGS_PATH = "api/v1/datasets/{connection}/{name}/tags"


def _path(template: str, **params: Any) -> str:
    """Fill a path template, URL-quoting every parameter."""
    return template.format(**{k: quote(str(v), safe="") for k, v in params.items()})


class LensesClient:
    """
    HTTP client for control plane communication.

    Features:
    - Base URL and timeout from settings unless given explicitly
    - Token header or one-time user/password login
    - Structured logging of requests/responses
    - Non-2xx responses mapped to RemoteError subclasses by status bucket

    Usage:
        client = LensesClient(base_url="http://localhost:9991", token="...")
        topic = client.get_topic("orders")
        client.close()
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        user: str | None = None,
        password: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Control plane base URL.
            token: Service account token, sent as X-Kafka-Lenses-Token.
            user: User name for login when no token is given.
            password: Password for login when no token is given.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self.token = token or None
        self.user = user
        self.password = password
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    @classmethod
    def from_config(
        cls,
        host: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
    ) -> "LensesClient":
        """Build a client from application.yaml and LENSES_* secrets, with overrides."""
        config_base_url, config_timeout = get_remote_base_url()
        settings = get_settings()
        return cls(
            base_url=host or config_base_url,
            token=token or settings.token,
            user=settings.user,
            password=settings.password,
            timeout=timeout if timeout is not None else config_timeout,
        )

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()
        self._client = None

    def _auth_headers(self) -> dict[str, str]:
        if self.token is None and self.user and self.password:
            self.token = self._login()
        if self.token:
            return {TOKEN_HEADER: self.token}
        return {}

    def _login(self) -> str:
        response = self._send("POST", LOGIN_PATH, json={"user": self.user, "password": self.password})
        self._raise_for_status(response)
        return response.text.strip().strip('"')

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = self._get_client()

        log_with_source(logger, "api", "debug", "API request", method=method, path=path)

        try:
            response = client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                "api",
                "debug",
                "API request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise RemoteError(f"{method} {self.base_url}/{path}: {e}") from e

        log_with_source(
            logger,
            "api",
            "debug",
            "API response",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            detail = str(body["message"])
        else:
            detail = response.text.strip() or response.reason_phrase
        request = response.request
        raise remote_error_for(
            response.status_code,
            f"{request.method} {request.url}: {response.status_code}: {detail}",
        )

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Make an authenticated HTTP request to the control plane.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path relative to the base URL (e.g., api/topics)
            **kwargs: Additional arguments for httpx

        Returns:
            httpx.Response with a 2xx status

        Raises:
            RemoteError: On transport failure or non-2xx status
        """
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        response = self._send(method, path, headers=headers, **kwargs)
        self._raise_for_status(response)
        return response

    def _decode(self, response: httpx.Response, annotation: Any) -> Any:
        try:
            return TypeAdapter(annotation).validate_python(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise BadResponseError(
                f"{response.request.method} {response.request.url}: unexpected response body: {e}",
                response.status_code,
            ) from e

    def fetch(self, path: str, annotation: Any, **kwargs: Any) -> Any:
        """GET and decode the body into annotation."""
        return self._decode(self.request("GET", path, **kwargs), annotation)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a PUT request."""
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a DELETE request."""
        return self.request("DELETE", path, **kwargs)

    # =========================================================================
    # Connect
    # =========================================================================

    def get_connect_clusters(self) -> list[ConnectCluster]:
        return self.fetch(CONNECT_CLUSTERS_PATH, list[ConnectCluster])

    def get_connectors(self, cluster: str) -> list[str]:
        """Names of the connectors running in a connect cluster."""
        return self.fetch(_path(CONNECTORS_PATH, cluster=cluster), list[str])

    def get_connector(self, cluster: str, name: str) -> Connector:
        connector = self.fetch(_path(CONNECTOR_PATH, cluster=cluster, name=name), Connector)
        connector.cluster_alias = connector.cluster_alias or cluster
        return connector

    def get_connector_config(self, cluster: str, name: str) -> dict[str, Any]:
        return self.fetch(_path(CONNECTOR_PATH, cluster=cluster, name=name) + "/config", dict[str, Any])

    def get_connector_status(self, cluster: str, name: str) -> ConnectorStatus:
        return self.fetch(_path(CONNECTOR_PATH, cluster=cluster, name=name) + "/status", ConnectorStatus)

    def get_connector_tasks(self, cluster: str, name: str) -> list[dict[str, Any]]:
        return self.fetch(_path(CONNECTOR_PATH, cluster=cluster, name=name) + "/tasks", list[dict[str, Any]])

    def get_connector_task_status(self, cluster: str, name: str, task_id: int) -> ConnectorTaskStatus:
        path = _path(CONNECTOR_PATH, cluster=cluster, name=name) + f"/tasks/{task_id}/status"
        return self.fetch(path, ConnectorTaskStatus)

    def restart_connector_task(self, cluster: str, name: str, task_id: int) -> None:
        self.post(_path(CONNECTOR_PATH, cluster=cluster, name=name) + f"/tasks/{task_id}/restart")

    def create_connector(self, cluster: str, name: str, config: dict[str, Any]) -> Connector:
        response = self.post(
            _path(CONNECTORS_PATH, cluster=cluster),
            json={"name": name, "config": config},
        )
        return self._decode(response, Connector)

    def update_connector(self, cluster: str, name: str, config: dict[str, Any]) -> Connector:
        response = self.put(_path(CONNECTOR_PATH, cluster=cluster, name=name) + "/config", json=config)
        return self._decode(response, Connector)

    def pause_connector(self, cluster: str, name: str) -> None:
        self.put(_path(CONNECTOR_PATH, cluster=cluster, name=name) + "/pause")

    def resume_connector(self, cluster: str, name: str) -> None:
        self.put(_path(CONNECTOR_PATH, cluster=cluster, name=name) + "/resume")

    def restart_connector(self, cluster: str, name: str) -> None:
        self.post(_path(CONNECTOR_PATH, cluster=cluster, name=name) + "/restart")

    def delete_connector(self, cluster: str, name: str) -> None:
        self.delete(_path(CONNECTOR_PATH, cluster=cluster, name=name))

    def get_connector_plugins(self, cluster: str) -> list[ConnectorPlugin]:
        return self.fetch(_path(CONNECTOR_PLUGINS_PATH, cluster=cluster), list[ConnectorPlugin])

    # =========================================================================
    # Topics
    # =========================================================================

    def get_topics_names(self) -> list[str]:
        return self.fetch(TOPIC_NAMES_PATH, list[str])

    def get_topics(self) -> list[Topic]:
        return self.fetch(TOPICS_PATH, list[Topic])

    def get_topic(self, name: str) -> Topic:
        return self.fetch(_path(TOPIC_PATH, name=name), Topic)

    def create_topic(self, name: str, replication: int, partitions: int, configs: KV) -> None:
        self.post(
            TOPICS_PATH,
            json={
                "topicName": name,
                "replication": replication,
                "partitions": partitions,
                "configs": configs,
            },
        )

    def update_topic(self, name: str, configs: list[TopicConfig], partitions: int = 0) -> None:
        """Update a topic's configs; partitions can only be increased, 0 leaves them."""
        body: dict[str, Any] = {"configs": [config.to_wire() for config in configs]}
        if partitions:
            body["partitions"] = partitions
        self.put(_path(TOPIC_CONFIGS_PATH, name=name), json=body)

    def delete_topic(self, name: str) -> None:
        self.delete(_path(TOPIC_PATH, name=name))

    def delete_topic_records(self, name: str, partition: int, offset: int) -> None:
        self.delete(_path(TOPIC_RECORDS_PATH, name=name, partition=partition, offset=offset))

    def get_available_topic_config_keys(self) -> list[str]:
        return self.fetch(TOPIC_CONFIG_KEYS_PATH, list[str])

    def get_topics_metadata(self) -> list[TopicMetadata]:
        return self.fetch(TOPICS_METADATA_PATH, list[TopicMetadata])

    def get_topic_metadata(self, name: str) -> TopicMetadata:
        return self.fetch(_path(TOPIC_METADATA_PATH, name=name), TopicMetadata)

    def create_or_update_topic_metadata(self, metadata: TopicMetadata) -> None:
        self.post(_path(TOPIC_METADATA_PATH, name=metadata.topic_name), json=metadata.to_wire())

    def delete_topic_metadata(self, name: str) -> None:
        self.delete(_path(TOPIC_METADATA_PATH, name=name))

    # =========================================================================
    # Alerts
    # =========================================================================

    def get_alerts(self, page_size: int) -> list[Alert]:
        response = self.request("GET", ALERTS_PATH, params={"pageSize": page_size})
        try:
            body = response.json()
            if isinstance(body, dict) and "values" in body:
                body = body["values"]
            return TypeAdapter(list[Alert]).validate_python(body)
        except (ValueError, PydanticValidationError) as e:
            raise BadResponseError(f"GET {ALERTS_PATH}: unexpected response body: {e}", response.status_code) from e

    def get_alerts_live(self, handler: Callable[[Alert], None]) -> None:
        """
        Stream alerts pushed by the server as server-sent events.

        Calls handler once per `data:` event until the server closes the stream.
        """
        client = self._get_client()
        headers = {**self._auth_headers(), "Accept": "text/event-stream"}

        log_with_source(logger, "api", "debug", "API stream opened", path=ALERTS_LIVE_PATH)

        try:
            with client.stream("GET", ALERTS_LIVE_PATH, headers=headers, timeout=None) as response:
                if not response.is_success:
                    response.read()
                    self._raise_for_status(response)
                for line in response.iter_lines():
                    if not line.startswith("data:"):
                        continue
                    payload = line[len("data:"):].strip()
                    if not payload:
                        continue
                    try:
                        alert = Alert.model_validate_json(payload)
                    except PydanticValidationError as e:
                        raise BadResponseError(f"GET {ALERTS_LIVE_PATH}: unexpected event: {e}") from e
                    handler(alert)
        except httpx.HTTPError as e:
            raise RemoteError(f"GET {self.base_url}/{ALERTS_LIVE_PATH}: {e}") from e

    def get_alert_settings(self) -> AlertSettings:
        return self.fetch(ALERT_SETTINGS_PATH, AlertSettings)

    def get_alert_setting(self, setting_id: int) -> AlertSetting:
        return self.fetch(_path(ALERT_SETTING_PATH, id=setting_id), AlertSetting)

    def enable_alert_setting(self, setting_id: int, enable: bool) -> None:
        self.put(_path(ALERT_SETTING_PATH, id=setting_id), params={"enable": str(enable).lower()})

    def get_alert_setting_conditions(self, setting_id: int) -> dict[str, str]:
        """Conditions of an alert setting, keyed by condition UUID."""
        return self.fetch(_path(ALERT_SETTING_CONDITIONS_PATH, id=setting_id), dict[str, str])

    def create_or_update_alert_setting_condition(self, setting_id: int, condition: str) -> None:
        self.post(_path(ALERT_SETTING_CONDITIONS_PATH, id=setting_id), content=condition)

    def delete_alert_setting_condition(self, setting_id: int, condition_uuid: str) -> None:
        self.delete(_path(ALERT_SETTING_CONDITION_PATH, id=setting_id, uuid=condition_uuid))

    # =========================================================================
    # Datasets
    # =========================================================================

    def update_dataset_description(self, connection: str, name: str, description: str) -> None:
        """Set a dataset description; an empty description unsets it."""
        body = {"description": description} if description else {}
        self.put(_path(DATASET_DESCRIPTION_PATH, connection=connection, name=name), json=body)

    def update_dataset_tags(self, connection: str, name: str, tags: list[str]) -> None:
        """Replace a dataset's tags; an empty list removes them all."""
        body = {"tags": [{"name": tag} for tag in tags]}
        self.put(_path(DATASET_TAGS_PATH, connection=connection, name=name), json=body)
