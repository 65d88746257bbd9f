import logging
from pathlib import Path
from typing import Any, Callable, Mapping

import requests

from ._config import load_connection_config
from ._logging import get_logger, redact_config
from .config import AdapterProperties
from .connector import ServiceNowConnector
from .data_contract import AdapterStatus, RequestCallback, RequestResult
from .events import EventHandler, EventPublisher


class ServiceNowAdapter:
    """Change request adapter exposing the host platform's plugin lifecycle.

    Status changes are published as ``ONLINE`` / ``OFFLINE`` events carrying
    ``{"id": <adapter id>}``; the adapter itself keeps no status.
    """

    def __init__(
        self,
        id: str,
        properties: AdapterProperties | Mapping[str, Any],
        *,
        events: EventPublisher | None = None,
        logger: logging.Logger | None = None,
        http_request: Callable[..., requests.Response] | None = None,
    ):
        self.id = id
        self.props = (
            properties
            if isinstance(properties, AdapterProperties)
            else AdapterProperties.model_validate(dict(properties))
        )
        self.logger = logger or get_logger("adapter")
        self.events = events or EventPublisher(logger=self.logger)
        self.connector = ServiceNowConnector(
            self.props.to_connector_config(),
            logger=self.logger,
            http_request=http_request,
        )

    @classmethod
    def from_config(
        cls,
        id: str,
        config: dict[str, Any] | None = None,
        *,
        file_path: str | Path | None = None,
        env_prefix: str | None = "SERVICENOW",
        **kwargs: Any,
    ) -> "ServiceNowAdapter":
        """Build an adapter from layered defaults, config file, environment and explicit properties."""
        properties = load_connection_config(
            config,
            file_path=file_path,
            env_prefix=env_prefix,
            required=("url", "auth", "serviceNowTable"),
            defaults={"serviceNowTable": "change_request"},
        )
        adapter = cls(id, properties, **kwargs)
        adapter.logger.info("Created adapter %s with properties=%s", id, redact_config(properties))
        return adapter

    def connect(self) -> None:
        self.healthcheck()

    def healthcheck(self, callback: RequestCallback | None = None) -> Any:
        callback = callback or RequestResult

        def on_result(result, error):
            if error is not None:
                self.logger.error("Error with external system with ID: %s", self.id)
                self.emit_offline()
                return callback(result, error)

            self.logger.debug("External system %s is available and healthy", self.id)
            self.emit_online()
            return callback(result, None)

        return self.get_record(on_result)

    def emit_offline(self) -> None:
        self.emit_status(AdapterStatus.OFFLINE)
        self.logger.warning("ServiceNow: Instance is unavailable.")

    def emit_online(self) -> None:
        self.emit_status(AdapterStatus.ONLINE)
        self.logger.info("ServiceNow: Instance is available.")

    def emit_status(self, status: AdapterStatus | str) -> None:
        self.events.emit(status, {"id": self.id})

    def on(self, status: AdapterStatus | str, handler: EventHandler) -> None:
        self.events.subscribe(status, handler)

    def off(self, status: AdapterStatus | str, handler: EventHandler) -> None:
        self.events.unsubscribe(status, handler)

    def get_record(self, callback: RequestCallback | None = None) -> Any:
        return self.connector.get(callback)

    def post_record(self, callback: RequestCallback | None = None) -> Any:
        return self.connector.post(callback)
