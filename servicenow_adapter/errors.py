"""Error values passed through the error channel of connector callbacks."""

from typing import Any

HIBERNATING_INSTANCE = "Hibernating instance"


class ServiceNowAdapterError(RuntimeError):
    pass


class MalformedResponseError(ServiceNowAdapterError):
    """The instance answered with a 2xx status but the body is not a table API payload."""

    def __init__(self, message: str, response: Any = None):
        super().__init__(message)
        self.response = response
