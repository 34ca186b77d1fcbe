"""HTTP access to the Unity Connection provisioning REST interface."""

from __future__ import annotations

import json
import os
import sys
import uuid
import warnings
from typing import Any

import requests

DEFAULT_TIMEOUT = 30.0
API_PREFIX = "/vmrest"


class CupiError(Exception):
    """Raised when a REST call fails or returns something unusable."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


def make_session() -> requests.Session:
    """Return a session that accepts the self-signed certificates CUC uses."""
    session = requests.Session()
    session.verify = False
    session.headers.update({"Accept": "application/json"})
    return session


def debug_enabled() -> bool:
    """True when CUPI_DEBUG is set in the environment."""
    return bool(os.environ.get("CUPI_DEBUG"))


def is_uuid(value: Any) -> bool:
    """True if value parses as a UUID."""
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def one_or_many(value: Any) -> list[Any]:
    """Normalise a field that holds nothing, one object or a list of objects."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class CupiClient:
    """Authenticated access to one server's REST interface."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.session = session if session is not None else make_session()
        self.timeout = timeout

    def url(self, path: str) -> str:
        authority = f"{self.host}:{self.port}" if self.port else self.host
        return f"https://{authority}{API_PREFIX}{path}"

    def _request(self, method: str, path: str, fields: dict[str, Any] | None = None) -> str:
        url = self.url(path)
        data = json.dumps(fields) if fields is not None else None
        headers = {"Accept": "application/json"}
        if data is not None:
            headers["Content-Type"] = "application/json"

        if debug_enabled():
            print(f"=== {method} Request ===\n{url}", file=sys.stderr)
            if data is not None:
                print(data, file=sys.stderr)

        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", message="Unverified HTTPS request")
            try:
                resp = self.session.request(
                    method,
                    url,
                    auth=(self.user, self.password),
                    data=data,
                    headers=headers,
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise CupiError(f"{method} {path} failed: {exc}") from exc

        if debug_enabled():
            print(f"=== Response HTTP {resp.status_code} ===\n{resp.text}", file=sys.stderr)

        if not 200 <= resp.status_code < 300:
            raise CupiError(f"HTTP {resp.status_code}: {resp.text}", resp.status_code)
        return resp.text

    def get(self, path: str) -> Any:
        """GET path and return the decoded JSON body ({} when empty)."""
        text = self._request("GET", path)
        if not text.strip():
            return {}
        try:
            return json.loads(text)
        except ValueError as exc:
            raise CupiError(f"invalid JSON response: {exc}") from exc

    def post(self, path: str, fields: dict[str, Any]) -> str:
        """POST fields as JSON and return the response body."""
        return self._request("POST", path, fields)

    def put(self, path: str, fields: dict[str, Any]) -> None:
        self._request("PUT", path, fields)

    def delete(self, path: str) -> None:
        self._request("DELETE", path)