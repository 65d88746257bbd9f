"""Configuration loader for adapter properties."""

import json
import os
from pathlib import Path
from typing import Any

from ._logging import get_logger, redact_config

LOGGER = get_logger("config")

# Environment keys are flat and upper-case; map them back to the host's property names.
_ENV_KEY_ALIASES = {
    "table": "serviceNowTable",
    "service_now_table": "serviceNowTable",
    "servicenowtable": "serviceNowTable",
}
_NESTED_SECTIONS = ("auth",)


def _nest_key(values: dict[str, Any], key: str, value: Any) -> None:
    """Store auth_username style keys under their nested section."""
    for section in _NESTED_SECTIONS:
        section_prefix = f"{section}_"
        if key.startswith(section_prefix):
            values.setdefault(section, {})[key.removeprefix(section_prefix)] = value
            return
    values[_ENV_KEY_ALIASES.get(key, key)] = value


def _read_prefixed_env(prefix: str) -> dict[str, Any]:
    """Read environment keys matching <PREFIX>_* and normalize key names."""
    prefix_token = f"{prefix.upper()}_"
    values: dict[str, Any] = {}

    for key, value in os.environ.items():
        if key.startswith(prefix_token):
            normalized_key = key.removeprefix(prefix_token).lower()
            if normalized_key == "log_level":
                continue
            _nest_key(values, normalized_key, value)

    LOGGER.info("Loaded %s config keys from environment prefix %s", len(values), prefix_token)
    return values


def _validate_mapping_root(data: Any) -> dict[str, Any]:
    """Ensure configuration files deserialize to a dictionary root."""
    if isinstance(data, dict):
        return data
    raise ValueError("Config file must contain a key-value object at the root")


def _read_config_file(file_path: str | Path | None) -> dict[str, Any]:
    """Read a JSON or YAML config file when provided, otherwise return an empty mapping."""
    if not file_path:
        LOGGER.info("No config file path provided")
        return {}

    path = Path(file_path)
    if not path.exists():
        LOGGER.error("Config file not found: %s", file_path)
        raise FileNotFoundError(f"Config file not found: {file_path}")

    suffix = path.suffix.lower()
    content = path.read_text(encoding="utf-8")

    if suffix == ".json":
        raw_data = json.loads(content)
    elif suffix in {".yaml", ".yml"}:
        import yaml

        raw_data = yaml.safe_load(content)
    else:
        raise ValueError("Unsupported config format. Use JSON (.json) or YAML (.yaml/.yml).")

    LOGGER.info("Loaded config from %s", file_path)
    return _validate_mapping_root(raw_data)


def _not_none_values(values: dict[str, Any] | None) -> dict[str, Any]:
    """Drop keys with None values to avoid overriding previous layers."""
    if not values:
        return {}
    return {key: value for key, value in values.items() if value is not None}


def _merge_config_layers(layers: list[dict[str, Any]]) -> dict[str, Any]:
    """Merge config dictionaries in order where last layer wins, one level deep for sections."""
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
    LOGGER.info("Merged %s config layers", len(layers))
    return merged


def _ensure_required_keys(config: dict[str, Any], required: tuple[str, ...]) -> None:
    """Validate required keys and raise a clear error when missing."""
    missing = [key for key in required if config.get(key) in (None, "")]
    if missing:
        joined = ", ".join(missing)
        LOGGER.error("Required config keys missing: %s", joined)
        raise ValueError(f"Missing required connection config keys: {joined}")


def load_connection_config(
    config: dict[str, Any] | None = None,
    *,
    file_path: str | Path | None = None,
    env_prefix: str | None = None,
    required: tuple[str, ...] = (),
    defaults: dict[str, Any] | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Resolve final adapter properties from defaults, file, env, config, and overrides."""
    LOGGER.info(
        "Loading connection config with env_prefix=%s, file_path=%s",
        env_prefix,
        file_path,
    )
    env_config = _read_prefixed_env(env_prefix) if env_prefix else {}
    merged = _merge_config_layers(
        [
            defaults or {},
            _read_config_file(file_path),
            env_config,
            config or {},
            _not_none_values(overrides),
        ]
    )

    _ensure_required_keys(merged, required)
    LOGGER.info("Connection config resolved: %s", redact_config(merged))
    return merged
