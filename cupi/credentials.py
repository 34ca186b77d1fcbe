"""Password storage and credential resolution."""

from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Protocol

from .config import ServerConfig

SERVICE = "cupi-cli"


class CredType(str, Enum):
    """Kinds of credentials kept per server."""

    CUPI = "cupi"
    APPLICATION = "application"
    PLATFORM = "platform"

    def __str__(self) -> str:
        return self.value


class CredentialsError(Exception):
    """Raised when credentials cannot be stored or found."""


class Keystore(Protocol):
    def get(self, key: str) -> str: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


def _type_name(cred_type: str | CredType) -> str:
    return cred_type.value if isinstance(cred_type, CredType) else str(cred_type)


def keyring_key(host: str, cred_type: str | CredType) -> str:
    """Return the account name used in the keystore."""
    return f"{host}:{_type_name(cred_type)}"


def _cupi_dir() -> Path:
    return Path.home() / ".cupi-cli"


def _read_json_map(path: Path) -> dict[str, str]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
        raise ValueError("expected a JSON object of strings")
    return data


def _write_json_map(path: Path, data: dict[str, str]) -> None:
    path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    path.chmod(0o600)


class FileKeystore:
    """A private JSON file holding secrets by account name."""

    def __init__(self, path: str | os.PathLike[str] | None = None, service: str = SERVICE):
        self.path = Path(path) if path is not None else _cupi_dir() / "keystore.json"
        self.service = service

    def _entry(self, key: str) -> str:
        return f"{self.service}/{key}"

    def _load(self) -> dict[str, str]:
        try:
            return _read_json_map(self.path)
        except FileNotFoundError:
            return {}
        except ValueError as exc:
            raise OSError(f"keystore {self.path} is corrupt: {exc}") from exc

    def get(self, key: str) -> str:
        """Return the secret for key; KeyError if absent."""
        return self._load()[self._entry(key)]

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[self._entry(key)] = value
        _write_json_map(self.path, data)

    def delete(self, key: str) -> None:
        """Remove the secret for key; KeyError if absent."""
        data = self._load()
        del data[self._entry(key)]
        _write_json_map(self.path, data)


class CredentialStore:
    """Stores passwords in a keystore, migrating entries from the legacy file."""

    def __init__(
        self,
        keystore: Keystore | None = None,
        legacy_path: str | os.PathLike[str] | None = None,
    ):
        self.keystore = keystore if keystore is not None else FileKeystore()
        self.legacy_path = Path(legacy_path) if legacy_path is not None else _cupi_dir() / ".credentials"

    def store_password(self, host: str, cred_type: str | CredType, password: str) -> None:
        try:
            self.keystore.set(keyring_key(host, cred_type), password)
        except OSError as exc:
            raise CredentialsError(f"failed to store credentials in OS keystore: {exc}") from exc

    def get_password(self, host: str, cred_type: str | CredType) -> str:
        key = keyring_key(host, cred_type)
        try:
            return self.keystore.get(key)
        except (KeyError, OSError):
            pass

        legacy = self._legacy_password(host, cred_type)
        if legacy is None:
            raise CredentialsError("credentials not found: run 'cupi auth login' to authenticate")
        try:
            self.keystore.set(key, legacy)
        except OSError:
            return legacy
        self._delete_legacy(host, cred_type)
        return legacy

    def delete_password(self, host: str, cred_type: str | CredType) -> None:
        failure: OSError | None = None
        try:
            self.keystore.delete(keyring_key(host, cred_type))
        except KeyError:
            pass
        except OSError as exc:
            failure = exc
        self._delete_legacy(host, cred_type)
        if failure is not None:
            raise CredentialsError(
                f"failed to delete credentials from OS keystore: {failure}"
            ) from failure

    def delete_all_passwords(self, host: str) -> None:
        for cred_type in CredType:
            try:
                self.delete_password(host, cred_type)
            except CredentialsError:
                pass

    @staticmethod
    def _legacy_key(host: str, cred_type: str | CredType) -> str:
        return f"{SERVICE}:{host}:{_type_name(cred_type)}"

    def _load_legacy(self) -> dict[str, str] | None:
        try:
            return _read_json_map(self.legacy_path)
        except (OSError, ValueError):
            return None

    def _legacy_password(self, host: str, cred_type: str | CredType) -> str | None:
        store = self._load_legacy()
        if store is None:
            return None
        return store.get(self._legacy_key(host, cred_type))

    def _delete_legacy(self, host: str, cred_type: str | CredType) -> None:
        store = self._load_legacy()
        if store is None:
            return
        store.pop(self._legacy_key(host, cred_type), None)
        try:
            if not store:
                self.legacy_path.unlink()
            else:
                _write_json_map(self.legacy_path, store)
        except OSError:
            pass


def resolve_creds(
    server: ServerConfig,
    cred_type: str | CredType,
    store: CredentialStore | None = None,
) -> tuple[str, str]:
    """Return (username, password) for a server and credential type."""
    name = _type_name(cred_type)
    cred = server.credentials.get(name)
    if cred is None:
        raise CredentialsError(f"credential type '{name}' not configured for server")
    if not cred.username:
        raise CredentialsError(f"username not configured for credential type '{name}'")
    store = store if store is not None else CredentialStore()
    try:
        password = store.get_password(server.host, name)
    except CredentialsError as exc:
        raise CredentialsError(f"failed to retrieve password from keyring: {exc}") from exc
    return cred.username, password