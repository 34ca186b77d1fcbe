"""Server configuration stored in ~/.cupi-cli/config.json."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class ConfigError(Exception):
    """Raised when the configuration cannot be read, written or queried."""


@dataclass
class CredentialConfig:
    """The username stored for one credential type."""

    username: str = ""


@dataclass
class ServerConfig:
    """Connection settings for one Unity Connection server."""

    host: str = ""
    port: int = 0
    version: str = ""
    credentials: dict[str, CredentialConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerConfig":
        creds = data.get("credentials") or {}
        return cls(
            host=str(data.get("host") or ""),
            port=int(data.get("port") or 0),
            version=str(data.get("version") or ""),
            credentials={
                name: CredentialConfig(username=str((entry or {}).get("username") or ""))
                for name, entry in creds.items()
            },
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "version": self.version,
            "credentials": {
                name: {"username": cred.username}
                for name, cred in self.credentials.items()
            },
        }


@dataclass
class Config:
    """The whole configuration file."""

    default_server: str = ""
    servers: dict[str, ServerConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        servers = data.get("servers") or {}
        return cls(
            default_server=str(data.get("defaultServer") or ""),
            servers={name: ServerConfig.from_dict(entry or {}) for name, entry in servers.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "defaultServer": self.default_server,
            "servers": {name: server.to_dict() for name, server in self.servers.items()},
        }


def config_path() -> Path:
    """Return the location of the configuration file."""
    try:
        home = Path.home()
    except RuntimeError:
        return Path("~/.cupi-cli/config.json")
    return home / ".cupi-cli" / "config.json"


def load_config(path: str | os.PathLike[str] | None = None) -> Config:
    """Load the configuration, returning an empty one if the file is absent."""
    target = Path(path) if path is not None else config_path()
    try:
        text = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Config()
    except OSError as exc:
        raise ConfigError(f"failed to read config: {exc}") from exc

    try:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("top level is not an object")
        return Config.from_dict(data)
    except (ValueError, TypeError, AttributeError) as exc:
        raise ConfigError(f"failed to parse config: {exc}") from exc


def save_config(cfg: Config, path: str | os.PathLike[str] | None = None) -> None:
    """Write the configuration, creating its directory if needed."""
    target = Path(path) if path is not None else config_path()
    try:
        target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"failed to create config directory: {exc}") from exc

    text = json.dumps(cfg.to_dict(), indent=2) + "\n"
    try:
        target.write_text(text, encoding="utf-8")
        target.chmod(0o600)
    except OSError as exc:
        raise ConfigError(f"failed to write config: {exc}") from exc


def get_server(cfg: Config, name: str) -> ServerConfig:
    """Return the named server or raise ConfigError."""
    try:
        return cfg.servers[name]
    except KeyError:
        raise ConfigError(f"server '{name}' not found") from None


def set_default_server(name: str, path: str | os.PathLike[str] | None = None) -> None:
    """Make an existing server the default one."""
    cfg = load_config(path)
    if name not in cfg.servers:
        raise ConfigError(f"server '{name}' not found")
    cfg.default_server = name
    save_config(cfg, path)