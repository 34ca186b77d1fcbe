"""Request bodies and table rows for user, mailbox and MWI commands."""

from __future__ import annotations

from typing import Any, Mapping

from .forms import UsageError

DEFAULT_TEMPLATE = "voicemailusertemplate"


def _require(value: str, flag: str) -> str:
    if not value:
        raise UsageError(f"{flag} is required")
    return value


def _collect(pairs: Mapping[str, str]) -> dict[str, Any]:
    """Keep only the fields that were given a value."""
    return {key: value for key, value in pairs.items() if value}


def _text(item: Mapping[str, Any], key: str) -> str:
    value = item.get(key)
    return "" if value is None else str(value)


def user_add_fields(
    alias: str = "",
    dtmf: str = "",
    first_name: str = "",
    last_name: str = "",
    display_name: str = "",
) -> dict[str, Any]:
    """Body for creating a user; alias and DTMF access ID are required."""
    _require(alias, "--alias")
    _require(dtmf, "--dtmf")
    return {
        "Alias": alias,
        "DtmfAccessId": dtmf,
        **_collect(
            {"FirstName": first_name, "LastName": last_name, "DisplayName": display_name}
        ),
    }


def template_alias(template: str = "") -> str:
    """The user template to create from, defaulting to the standard voicemail template."""
    return template or DEFAULT_TEMPLATE


def user_update_fields(
    dtmf: str = "",
    first_name: str = "",
    last_name: str = "",
    display_name: str = "",
    department: str = "",
) -> dict[str, Any]:
    """Body for updating a user; at least one field must be given."""
    fields = _collect(
        {
            "DtmfAccessId": dtmf,
            "FirstName": first_name,
            "LastName": last_name,
            "DisplayName": display_name,
            "Department": department,
        }
    )
    if not fields:
        raise UsageError("at least one field must be specified to update")
    return fields


def mailbox_update_fields(
    quota_warning: str = "", quota_send: str = "", quota_receive: str = ""
) -> dict[str, Any]:
    """Body for updating mailbox quotas; at least one field must be given."""
    fields = _collect(
        {
            "QuotaWarning": quota_warning,
            "SendQuota": quota_send,
            "ReceiveQuota": quota_receive,
        }
    )
    if not fields:
        raise UsageError("no fields to update")
    return fields


def mwi_add_fields(
    display_name: str = "", phone_system_id: str = "", extension: str = ""
) -> dict[str, Any]:
    """Body for adding a message waiting indicator; every field is required."""
    _require(display_name, "--display-name")
    _require(phone_system_id, "--phone-system-id")
    _require(extension, "--extension")
    return {
        "DisplayName": display_name,
        "MediaSwitchObjectId": phone_system_id,
        "MWIExtension": extension,
    }


def mwi_update_fields(
    display_name: str = "", phone_system_id: str = "", extension: str = ""
) -> dict[str, Any]:
    """Body for updating a message waiting indicator; at least one field must be given."""
    fields = _collect(
        {
            "DisplayName": display_name,
            "MediaSwitchObjectId": phone_system_id,
            "MWIExtension": extension,
        }
    )
    if not fields:
        raise UsageError("no fields to update")
    return fields


def mwi_row(item: Mapping[str, Any]) -> dict[str, str]:
    """Table row for a message waiting indicator as returned by the server."""
    columns = {
        "objectId": "ObjectId",
        "displayName": "DisplayName",
        "active": "Active",
        "mwiExtension": "MWIExtension",
        "mediaSwitchObjectId": "MediaSwitchObjectId",
    }
    return {column: _text(item, key) for column, key in columns.items()}