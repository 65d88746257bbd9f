"""ServiceNow change request adapter and table API connector."""

from .adapter import ServiceNowAdapter
from .config import AdapterProperties, AuthConfig, ConnectorConfig
from .connector import REMOVED_FIELDS, RENAMED_FIELDS, ServiceNowConnector, project_record
from .data_contract import AdapterStatus, RequestResult
from .errors import HIBERNATING_INSTANCE, MalformedResponseError, ServiceNowAdapterError
from .events import EventPublisher

__all__ = [
    "ServiceNowAdapter",
    "ServiceNowConnector",
    "AdapterProperties",
    "AuthConfig",
    "ConnectorConfig",
    "AdapterStatus",
    "RequestResult",
    "EventPublisher",
    "HIBERNATING_INSTANCE",
    "MalformedResponseError",
    "ServiceNowAdapterError",
    "REMOVED_FIELDS",
    "RENAMED_FIELDS",
    "project_record",
]
