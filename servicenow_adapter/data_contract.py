from enum import Enum
from typing import Any, Callable, NamedTuple


class AdapterStatus(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class RequestResult(NamedTuple):
    """Data-first pair delivered to every connector and adapter callback."""

    data: list[dict[str, Any]] | None
    error: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None


RequestCallback = Callable[[Any, Any], Any]
