from __future__ import annotations

import http.client
import json
import re
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

CLIENT_PREFIX = "/_matrix/client/v3"
DEVICE_DISPLAY_NAME = "Matrix Tui"
DEFAULT_TIMEOUT = 15.0
SYNC_TIMEOUT = 30.0

# Matrix server name: DNS name, IPv4 literal or bracketed IPv6, optional port.
SERVER_NAME_RE = re.compile(
    r"^(?:\[[0-9A-Fa-f:.]{2,45}\]|[A-Za-z0-9](?:[A-Za-z0-9.-]{0,253}[A-Za-z0-9])?)(?::(\d{1,5}))?$"
)


class MatrixError(Exception):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


def parse_server_name(raw: str) -> str:
    name = raw.strip()
    match = SERVER_NAME_RE.match(name)
    if not match:
        raise MatrixError("E_INVALID_SERVER", "Invalid server name")
    port = match.group(1)
    if port is not None and not 0 < int(port) < 65536:
        raise MatrixError("E_INVALID_SERVER", "Invalid server name")
    return name.lower()


class MatrixClient:
    """Minimal client-server API wrapper: discovery, login, whoami, sync, logout."""

    def __init__(self, server_name: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.server_name = parse_server_name(server_name)
        self.timeout = timeout
        self.base_url = ""
        self.access_token = ""
        self.user_id = ""
        self.device_id = ""

    def discover(self) -> str:
        """Resolve the homeserver base URL via .well-known, falling back to https://<server>."""
        fallback = f"https://{self.server_name}"
        try:
            data = self._request("GET", f"{fallback}/.well-known/matrix/client", auth=False)
            homeserver = data.get("m.homeserver")
            base_url = str(homeserver.get("base_url", "")).strip().rstrip("/") if isinstance(homeserver, dict) else ""
        except MatrixError:
            base_url = ""
        self.base_url = base_url if _usable_base_url(base_url) else fallback
        # Confirms the base URL actually speaks the client-server API.
        self._request("GET", f"{self.base_url}/_matrix/client/versions", auth=False)
        return self.base_url

    def login_password(self, username: str, password: str) -> dict[str, Any]:
        payload = {
            "type": "m.login.password",
            "identifier": {"type": "m.id.user", "user": username},
            "password": password,
            "initial_device_display_name": DEVICE_DISPLAY_NAME,
        }
        data = self._request("POST", self._url("/login"), payload, auth=False)
        self.access_token = str(data.get("access_token", ""))
        self.user_id = str(data.get("user_id", ""))
        self.device_id = str(data.get("device_id", ""))
        if not self.access_token:
            raise MatrixError("E_LOGIN", "Server did not return an access token")
        return data

    def restore(self, access_token: str) -> dict[str, Any]:
        self.access_token = access_token
        data = self._request("GET", self._url("/account/whoami"))
        self.user_id = str(data.get("user_id", ""))
        self.device_id = str(data.get("device_id", ""))
        return data

    def sync_once(self) -> dict[str, Any]:
        query = urllib.parse.urlencode({"timeout": "0"})
        return self._request("GET", self._url(f"/sync?{query}"), timeout=SYNC_TIMEOUT)

    def logout(self) -> None:
        self._request("POST", self._url("/logout"), {})
        self.access_token = ""

    def _url(self, path: str) -> str:
        if not self.base_url:
            raise MatrixError("E_CONNECT", "Homeserver not discovered yet")
        return f"{self.base_url}{CLIENT_PREFIX}{path}"

    def _request(
        self,
        method: str,
        url: str,
        payload: dict[str, Any] | None = None,
        *,
        auth: bool = True,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        body = None
        headers = {"Accept": "application/json"}
        if payload is not None:
            body = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        if auth and self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        try:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
            with urllib.request.urlopen(req, timeout=timeout or self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            raise _error_from_http(exc) from exc
        except urllib.error.URLError as exc:
            raise MatrixError("E_CONNECT", str(exc.reason)) from exc
        except http.client.InvalidURL as exc:
            raise MatrixError("E_CONNECT", f"Invalid homeserver URL: {url}") from exc
        except http.client.HTTPException as exc:
            raise MatrixError("E_PROTOCOL", f"Broken response from {url}: {exc!r}") from exc
        except OSError as exc:
            raise MatrixError("E_CONNECT", str(exc)) from exc
        except ValueError as exc:
            raise MatrixError("E_CONNECT", f"Invalid homeserver URL: {url}") from exc
        if not raw:
            return {}
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MatrixError("E_PROTOCOL", f"Malformed response from {url}") from exc
        if not isinstance(data, dict):
            raise MatrixError("E_PROTOCOL", f"Unexpected response from {url}")
        return data


def _usable_base_url(url: str) -> bool:
    """.well-known base_url must be an absolute http(s) URL with a host and no spaces."""
    if not url or any(ch.isspace() for ch in url):
        return False
    parts = urllib.parse.urlsplit(url)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def _error_from_http(exc: urllib.error.HTTPError) -> MatrixError:
    try:
        data = json.loads(exc.read().decode("utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        data = {}
    if isinstance(data, dict) and data.get("errcode"):
        return MatrixError(str(data["errcode"]), str(data.get("error", exc.reason)))
    return MatrixError(f"HTTP_{exc.code}", str(exc.reason))


def joined_room_count(sync_payload: dict[str, Any]) -> int:
    rooms = sync_payload.get("rooms", {})
    if not isinstance(rooms, dict):
        return 0
    joined = rooms.get("join", {})
    return len(joined) if isinstance(joined, dict) else 0
