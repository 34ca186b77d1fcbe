"""Alternate names, alternate extensions and user credentials."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode

from .rest import CupiClient, CupiError, one_or_many


def _segment(value: str) -> str:
    return quote(value, safe="")


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _require_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise CupiError(f"failed to parse {what}: expected an object")
    return data


@dataclass
class AlternateName:
    object_id: str = ""
    first_name: str = ""
    last_name: str = ""
    global_user_object_id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AlternateName":
        data = _require_object(data, "alternate name")
        return cls(
            object_id=_text(data, "ObjectId"),
            first_name=_text(data, "FirstName"),
            last_name=_text(data, "LastName"),
            global_user_object_id=_text(data, "GlobalUserObjectId"),
        )


@dataclass
class AlternateExtension:
    object_id: str = ""
    dtmf_access_id: str = ""
    id_index: int = 0
    partition_object_id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AlternateExtension":
        data = _require_object(data, "alternate extension")
        raw_index = data.get("IdIndex")
        try:
            id_index = int(raw_index) if raw_index not in (None, "") else 0
        except (TypeError, ValueError) as exc:
            raise CupiError(f"failed to parse alternate extension: bad IdIndex {raw_index!r}") from exc
        return cls(
            object_id=_text(data, "ObjectId"),
            dtmf_access_id=_text(data, "DtmfAccessId"),
            id_index=id_index,
            partition_object_id=_text(data, "PartitionObjectId"),
        )


@dataclass
class Credential:
    object_id: str = ""
    credential_type: str = ""
    locked: str = ""
    hack_count: str = ""
    is_must_change: str = ""
    doesnt_expire: str = ""
    never_expires: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Credential":
        data = _require_object(data, "credential")
        return cls(
            object_id=_text(data, "ObjectId"),
            credential_type=_text(data, "CredentialType"),
            locked=_text(data, "Locked"),
            hack_count=_text(data, "HackCount"),
            is_must_change=_text(data, "IsMustChange"),
            doesnt_expire=_text(data, "DoesntExpire"),
            never_expires=_text(data, "NeverExpires"),
        )


def _fetch(client: CupiClient, path: str, failure: str) -> Any:
    try:
        return client.get(path)
    except CupiError as exc:
        raise CupiError(f"failed to {failure}: {exc}", exc.status) from exc


def _call(action, failure: str, *args) -> Any:
    try:
        return action(*args)
    except CupiError as exc:
        raise CupiError(f"failed to {failure}: {exc}", exc.status) from exc


def _list_items(body: Any, key: str, what: str) -> list[Any]:
    if not isinstance(body, dict):
        raise CupiError(f"failed to parse {what} response: expected an object")
    return one_or_many(body.get(key))


# Alternate names


def list_alternate_names(client: CupiClient, user_object_id: str) -> list[AlternateName]:
    params = urlencode({"query": f"(GlobalUserObjectId is {user_object_id})"})
    body = _fetch(client, f"/alternatenames?{params}", "list alternate names")
    return [AlternateName.from_dict(item) for item in _list_items(body, "AlternateName", "alternate names")]


def get_alternate_name(client: CupiClient, object_id: str) -> AlternateName:
    body = _fetch(client, f"/alternatenames/{_segment(object_id)}", "get alternate name")
    return AlternateName.from_dict(body)


def create_alternate_name(client: CupiClient, fields: dict[str, Any]) -> None:
    _call(client.post, "create alternate name", "/alternatenames", fields)


def update_alternate_name(client: CupiClient, object_id: str, fields: dict[str, Any]) -> None:
    _call(client.put, "update alternate name", f"/alternatenames/{_segment(object_id)}", fields)


def delete_alternate_name(client: CupiClient, object_id: str) -> None:
    _call(client.delete, "delete alternate name", f"/alternatenames/{_segment(object_id)}")


# Alternate extensions


def _altext_path(user_object_id: str, object_id: str | None = None) -> str:
    path = f"/users/{_segment(user_object_id)}/alternateextensions"
    return path if object_id is None else f"{path}/{_segment(object_id)}"


def list_alternate_extensions(client: CupiClient, user_object_id: str) -> list[AlternateExtension]:
    body = _fetch(client, _altext_path(user_object_id), "list alternate extensions")
    items = _list_items(body, "AlternateExtension", "alternate extensions")
    return [AlternateExtension.from_dict(item) for item in items]


def get_alternate_extension(client: CupiClient, user_object_id: str, object_id: str) -> AlternateExtension:
    body = _fetch(client, _altext_path(user_object_id, object_id), "get alternate extension")
    return AlternateExtension.from_dict(body)


def create_alternate_extension(client: CupiClient, user_object_id: str, fields: dict[str, Any]) -> None:
    _call(client.post, "create alternate extension", _altext_path(user_object_id), fields)


def update_alternate_extension(
    client: CupiClient, user_object_id: str, object_id: str, fields: dict[str, Any]
) -> None:
    _call(client.put, "update alternate extension", _altext_path(user_object_id, object_id), fields)


def delete_alternate_extension(client: CupiClient, user_object_id: str, object_id: str) -> None:
    _call(client.delete, "delete alternate extension", _altext_path(user_object_id, object_id))


# Credentials


def _credential_path(user_object_id: str, cred_type: str) -> str:
    return f"/users/{_segment(user_object_id)}/credential/{_segment(cred_type)}"


def get_credential(client: CupiClient, user_object_id: str, cred_type: str) -> Credential:
    body = _fetch(client, _credential_path(user_object_id, cred_type), "get credential")
    return Credential.from_dict(body)


def update_credential(
    client: CupiClient, user_object_id: str, cred_type: str, fields: dict[str, Any]
) -> None:
    _call(client.put, "update credential", _credential_path(user_object_id, cred_type), fields)


def unlock_credential(client: CupiClient, user_object_id: str, cred_type: str) -> None:
    """Clear the lock and hack count on a PIN or password."""
    update_credential(client, user_object_id, cred_type, {"Locked": "false", "HackCount": "0"})


def set_credential(client: CupiClient, user_object_id: str, cred_type: str, new_value: str) -> None:
    """Set a new PIN or password."""
    update_credential(client, user_object_id, cred_type, {"Credentials": new_value})