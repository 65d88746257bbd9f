import argparse
import json
import sys
from typing import Any

from ._logging import configure_cli_logging
from .adapter import ServiceNowAdapter
from .data_contract import AdapterStatus, RequestResult


def _describe_error(error: Any) -> Any:
    if error is None:
        return None
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        return {"status_code": status_code, "body": getattr(error, "text", None)}
    return str(error)


def _payload(result: RequestResult) -> dict:
    return {"success": result.ok, "data": result.data, "error": _describe_error(result.error)}


def _build_adapter(args) -> ServiceNowAdapter:
    try:
        return ServiceNowAdapter.from_config(args.id, file_path=args.config, env_prefix=args.env_prefix)
    except Exception as e:
        print(f"Error loading adapter config: {e}", file=sys.stderr)
        sys.exit(1)


def _finish(label: str, payload: dict) -> None:
    print(json.dumps(payload, default=str))

    if payload["success"]:
        print(f"{label} succeeded.", file=sys.stderr)
        sys.exit(0)
    else:
        print(f"{label} failed: {payload['error']}", file=sys.stderr)
        sys.exit(1)


def cmd_healthcheck(args):
    """Handle healthcheck subcommand."""
    adapter = _build_adapter(args)
    statuses: list[str] = []
    for status in AdapterStatus:
        adapter.on(status, lambda _payload, status=status: statuses.append(status.value))

    result = adapter.healthcheck()
    _finish(
        f"Healthcheck of adapter {args.id}",
        {**_payload(result), "status": statuses[-1] if statuses else None},
    )


def cmd_get(args):
    """Handle get subcommand."""
    adapter = _build_adapter(args)
    result = adapter.get_record()
    _finish("GET change requests", _payload(result))


def cmd_post(args):
    """Handle post subcommand."""
    adapter = _build_adapter(args)
    result = adapter.post_record()
    _finish("POST change request", _payload(result))


def main():
    parser = argparse.ArgumentParser(description="ServiceNow change request adapter CLI")
    parser.add_argument("--config", help="Path to adapter properties JSON/YAML file")
    parser.add_argument("--id", default="servicenow", help="Adapter instance ID (default: servicenow)")
    parser.add_argument(
        "--env-prefix",
        default="SERVICENOW",
        help="Environment variable prefix for adapter properties (default: SERVICENOW)",
    )
    parser.add_argument("--log-level", help="Logging level (default: $SERVICENOW_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Subcommand to run")

    subparsers.add_parser("healthcheck", help="Check the instance and report ONLINE/OFFLINE")
    subparsers.add_parser("get", help="Fetch change requests from the configured table")
    subparsers.add_parser("post", help="Create a change request in the configured table")

    args = parser.parse_args()
    configure_cli_logging(args.log_level)

    if args.command == "healthcheck":
        cmd_healthcheck(args)
    elif args.command == "get":
        cmd_get(args)
    elif args.command == "post":
        cmd_post(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
