"""Request bodies and table rows for routing rules, search spaces and SMTP settings."""

from __future__ import annotations

from typing import Any, Mapping

NO_FIELDS = "no fields to update; use --help to see available flags"


class UsageError(ValueError):
    """Raised when command options are missing or give nothing to do."""


def _text(item: Mapping[str, Any], key: str) -> str:
    value = item.get(key)
    return "" if value is None else str(value)


def _collect(pairs: Mapping[str, str]) -> dict[str, Any]:
    """Keep only the fields that were given a value."""
    return {key: value for key, value in pairs.items() if value}


def _require(value: str, flag: str) -> str:
    if not value:
        raise UsageError(f"{flag} is required")
    return value


def _non_empty(fields: dict[str, Any]) -> dict[str, Any]:
    if not fields:
        raise UsageError(NO_FIELDS)
    return fields


def _row(item: Mapping[str, Any], columns: Mapping[str, str]) -> dict[str, str]:
    return {column: _text(item, key) for column, key in columns.items()}


# Routing rules


def routing_rule_add_fields(
    display_name: str = "", route_action: str = "", enabled: str = ""
) -> dict[str, Any]:
    """Body for creating a routing rule; the display name is required."""
    _require(display_name, "--display-name")
    return {
        "DisplayName": display_name,
        **_collect({"RouteAction": route_action, "Enabled": enabled}),
    }


def routing_rule_update_fields(
    display_name: str = "", route_action: str = "", enabled: str = ""
) -> dict[str, Any]:
    """Body for updating a routing rule; at least one field must be given."""
    return _non_empty(
        _collect(
            {"DisplayName": display_name, "RouteAction": route_action, "Enabled": enabled}
        )
    )


def routing_rule_condition_fields(
    parameter: str = "", operator: str = "", operand: str = ""
) -> dict[str, Any]:
    """Body for adding a routing rule condition; the parameter is required."""
    _require(parameter, "--parameter")
    return {
        "Parameter": parameter,
        **_collect({"OperatorType": operator, "OperandTwo": operand}),
    }


def routing_rule_row(item: Mapping[str, Any]) -> dict[str, str]:
    """Table row for a routing rule as returned by the server."""
    return _row(
        item,
        {
            "objectId": "ObjectId",
            "displayName": "DisplayName",
            "type": "Type",
            "routeAction": "RouteAction",
            "enabled": "Enabled",
        },
    )


def routing_rule_condition_row(item: Mapping[str, Any]) -> dict[str, str]:
    """Table row for a routing rule condition."""
    return _row(
        item,
        {
            "objectId": "ObjectId",
            "operatorType": "OperatorType",
            "parameter": "Parameter",
            "operandTwo": "OperandTwo",
        },
    )


# Search spaces


def search_space_add_fields(name: str = "", description: str = "") -> dict[str, Any]:
    """Body for creating a search space; the name is required."""
    _require(name, "--name")
    return {"Name": name, **_collect({"Description": description})}


def search_space_update_fields(name: str = "", description: str = "") -> dict[str, Any]:
    """Body for updating a search space; at least one field must be given."""
    return _non_empty(_collect({"Name": name, "Description": description}))


def search_space_row(item: Mapping[str, Any]) -> dict[str, str]:
    """Table row for a search space."""
    return _row(
        item, {"objectId": "ObjectId", "name": "Name", "description": "Description"}
    )


def search_space_member_row(item: Mapping[str, Any]) -> dict[str, str]:
    """Table row for a search space partition member."""
    return _row(
        item, {"objectId": "ObjectId", "partitionObjectId": "PartitionObjectId"}
    )


def require_partition_id(partition_id: str = "") -> str:
    """Return the partition ObjectId, raising UsageError if it is missing."""
    return _require(partition_id, "--partition-id")


# SMTP


def smtp_server_fields(
    smart_host: str = "", port: str = "", use_ssl: str = ""
) -> dict[str, Any]:
    """Body for updating the inbound SMTP server configuration."""
    return _non_empty(_collect({"SmartHost": smart_host, "Port": port, "UseSsl": use_ssl}))


def smtp_client_fields(
    server_name: str = "", port: str = "", use_auth: str = ""
) -> dict[str, Any]:
    """Body for updating the outbound SMTP client configuration."""
    return _non_empty(
        _collect({"ServerName": server_name, "Port": port, "UseAuth": use_auth})
    )