import json
import logging
import re
from typing import Any, Callable
from urllib.parse import urljoin

import requests
from requests.auth import HTTPBasicAuth

from ._logging import get_logger
from .config import ConnectorConfig
from .data_contract import RequestCallback, RequestResult
from .errors import HIBERNATING_INSTANCE, MalformedResponseError

_VALID_STATUS = re.compile(r"2\d\d")
_HIBERNATING_MARKER = "Instance Hibernating page"

RENAMED_FIELDS = {
    "number": "change_ticket_number",
    "sys_id": "change_ticket_key",
}

# Change request metadata that downstream consumers never receive.
REMOVED_FIELDS = frozenset(
    {
        "parent",
        "reason",
        "watch_list",
        "upon_reject",
        "sys_updated_on",
        "type",
        "approval_history",
        "test_plan",
        "cab_delegate",
        "requested_by_date",
        "state",
        "sys_created_by",
        "knowledge",
        "order",
        "phase",
        "cmdb_ci",
        "delivery_plan",
        "contract",
        "impact",
        "work_notes_list",
        "sys_domain_path",
        "cab_recommendation",
        "production_system",
        "review_date",
        "business_duration",
        "group_list",
        "requested_by",
        "change_plan",
        "approval_set",
        "implementation_plan",
        "correlation_display",
        "delivery_task",
        "additional_assignee_list",
        "outside_maintenance_schedule",
        "end_date",
        "short_description",
        "std_change_producer_version",
        "service_offering",
        "sys_class_name",
        "closed_by",
        "follow_up",
        "reassignment_count",
        "review_status",
        "assigned_to",
        "start_date",
        "sla_due",
        "comments_and_work_notes",
        "escalation",
        "upon_approval",
        "correlation_id",
        "made_sla",
        "backout_plan",
        "conflict_status",
        "sys_updated_by",
        "opened_by",
        "user_input",
        "sys_created_on",
        "on_hold_task",
        "sys_domain",
        "closed_at",
        "review_comments",
        "business_service",
        "time_worked",
        "expected_start",
        "opened_at",
        "phase_state",
        "cab_date",
        "work_notes",
        "close_code",
        "assignment_group",
        "on_hold_reason",
        "calendar_duration",
        "close_notes",
        "contact_type",
        "cab_required",
        "urgency",
        "scope",
        "company",
        "justification",
        "activity_due",
        "comments",
        "approval",
        "due_date",
        "sys_mod_count",
        "on_hold",
        "sys_tags",
        "conflict_last_run",
        "unauthorized",
        "location",
        "risk",
        "category",
        "risk_impact_analysis",
    }
)


def project_record(record: dict[str, Any]) -> dict[str, Any]:
    """Rename the ticket identifiers and drop the removed metadata fields."""
    projected = {
        key: value
        for key, value in record.items()
        if key not in REMOVED_FIELDS and key not in RENAMED_FIELDS
    }
    for source_key, target_key in RENAMED_FIELDS.items():
        if source_key in record:
            projected[target_key] = record[source_key]
    return projected


def _build_request_url(base_url: str, uri: str) -> str:
    return urljoin(base_url.rstrip("/") + "/", uri.lstrip("/"))


def _extract_results(body: str | bytes, response: Any) -> list[dict[str, Any]]:
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise MalformedResponseError(f"Response body is not valid JSON: {exc}", response) from exc

    if not isinstance(payload, dict) or "result" not in payload:
        raise MalformedResponseError("Response body has no 'result' member", response)

    results = payload["result"]
    # Single record endpoints (POST) answer with an object instead of an array.
    if isinstance(results, dict):
        results = [results]
    if not isinstance(results, list) or not all(isinstance(item, dict) for item in results):
        raise MalformedResponseError("Response 'result' must be a list of records", response)
    return results


class ServiceNowConnector:
    """Issues ServiceNow table API calls and normalizes their responses.

    Every operation takes a ``callback(data, error)`` continuation and returns
    whatever the callback returns. Without a callback the pair comes back as a
    :class:`RequestResult`.
    """

    def __init__(
        self,
        config: ConnectorConfig | dict[str, Any],
        *,
        logger: logging.Logger | None = None,
        http_request: Callable[..., requests.Response] | None = None,
    ):
        self.config = config if isinstance(config, ConnectorConfig) else ConnectorConfig.model_validate(config)
        self.logger = logger or get_logger("connector")
        self._http_request = http_request or requests.request

    def build_uri(self, query: str | None = None) -> str:
        uri = f"/api/now/table/{self.config.service_now_table}"
        if query:
            uri = f"{uri}?{query}"
        self.logger.debug("URI: %s", uri)
        return uri

    def is_degraded(self, response: Any) -> bool:
        """Detect the HTML maintenance page a hibernating instance serves with a 200."""
        text = response.text or ""
        if isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")
        return _HIBERNATING_MARKER in text and "<html>" in text and response.status_code == 200

    def normalize_response(
        self,
        transport_error: Exception | None,
        response: Any,
        body: str | bytes | None,
        callback: RequestCallback | None = None,
    ) -> Any:
        callback = callback or RequestResult
        data = None
        error = None

        if transport_error is not None:
            self.logger.error("Transport error calling ServiceNow: %s", transport_error)
            error = transport_error
        elif self.is_degraded(response):
            error = HIBERNATING_INSTANCE
            self.logger.error(error)
        elif not _VALID_STATUS.fullmatch(str(response.status_code)):
            self.logger.error("Bad response code: %s", response.status_code)
            error = response
        elif body:
            try:
                data = [project_record(record) for record in _extract_results(body, response)]
            except MalformedResponseError as exc:
                self.logger.error("Malformed response payload: %s", exc)
                error = exc

        return callback(data, error)

    def send(self, call_options: dict[str, Any], callback: RequestCallback | None = None) -> Any:
        uri = self.build_uri(call_options.get("query"))
        request_options: dict[str, Any] = {
            "method": call_options["method"],
            "url": _build_request_url(str(self.config.url), uri),
            "auth": HTTPBasicAuth(self.config.username, self.config.password),
        }
        if self.config.timeout_seconds is not None:
            request_options["timeout"] = self.config.timeout_seconds

        self.logger.debug("Sending %s %s", request_options["method"], request_options["url"])
        # Injected clients may surface socket failures without wrapping them.
        try:
            response = self._http_request(**request_options)
        except (requests.RequestException, OSError) as exc:
            return self.normalize_response(exc, None, None, callback)

        return self.normalize_response(None, response, response.text, callback)

    def get(self, callback: RequestCallback | None = None) -> Any:
        call_options = self.config.model_dump(by_alias=True)
        call_options["method"] = "GET"
        return self.send(call_options, callback)

    def post(self, callback: RequestCallback | None = None) -> Any:
        call_options = self.config.model_dump(by_alias=True)
        call_options["method"] = "POST"
        return self.send(call_options, callback)
