"""Logger lookup and credential masking.

Library code only asks for loggers; handlers and levels belong to whoever owns
the process. ``configure_cli_logging`` is that owner for the command line.
"""

import logging
import os
from typing import Any, Mapping

LOGGER_NAMESPACE = "servicenow_adapter"
LOG_LEVEL_ENV = "SERVICENOW_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_MASK = "***"
_SENSITIVE_KEYS = frozenset({"password", "pass", "token", "secret", "api_key", "apikey", "authorization"})


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def configure_cli_logging(level: str | None = None) -> None:
    """Install a stderr handler on the root logger unless the host already did."""
    level_name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)


def _mask(key: str, value: Any) -> Any:
    if isinstance(value, Mapping):
        return redact_config(value)
    if value is not None and key.lower() in _SENSITIVE_KEYS:
        return _MASK
    return value


def redact_config(values: Mapping[str, Any]) -> dict[str, Any]:
    """Copy adapter properties with credentials masked, including those nested under ``auth``."""
    return {key: _mask(key, value) for key, value in values.items()}
