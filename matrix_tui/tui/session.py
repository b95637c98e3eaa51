from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from .logstore import LogStore
from .matrix_api import MatrixClient, MatrixError, joined_room_count, parse_server_name
from .models import SessionError, SessionResult
from .saves import SavedSession

EventCb = Callable[[dict[str, Any]], None]
ClientFactory = Callable[[str], MatrixClient]


class SessionRunner:
    """Runs login flows off the UI thread and reports progress as events.

    Events are plain dicts ({"type": "info", "message": ...} and so on) that
    the UI folds into SessionStatus with apply_session_event().
    """

    def __init__(
        self,
        save_file: Path,
        logstore: LogStore,
        client_factory: ClientFactory = MatrixClient,
    ) -> None:
        self.save_file = save_file
        self.logstore = logstore
        self.client_factory = client_factory
        self.client: MatrixClient | None = None

    def login(self, server: str, username: str, password: str, on_event: EventCb) -> SessionResult:
        on_event({"type": "clear_error"})
        on_event({"type": "loading", "value": True})
        try:
            if not server or not username or not password:
                return self._fail(on_event, "validate", MatrixError("E_MISSING", "Missing blank"))
            try:
                client = self._connect(server, on_event)
            except MatrixError as exc:
                return self._fail(on_event, "connect", exc)

            on_event({"type": "info", "message": "Logging in"})
            self.logstore.append("info", "login", f"password login for {username} on {client.server_name}", category="auth")
            try:
                client.login_password(username, password)
            except MatrixError as exc:
                return self._fail(on_event, "login", exc, prefix="Failed to login")

            self._remember(SavedSession(token=client.access_token, username=username, server=server.strip()), on_event)
            on_event(
                {
                    "type": "logged_in",
                    "user_id": client.user_id,
                    "device_id": client.device_id,
                    "homeserver": client.base_url,
                }
            )
            return self._sync(client, on_event)
        finally:
            on_event({"type": "loading", "value": False})

    def login_with_token(self, server: str, token: str, on_event: EventCb) -> SessionResult:
        on_event({"type": "loading", "value": True})
        try:
            try:
                client = self._connect(server, on_event)
            except MatrixError as exc:
                return self._fail(on_event, "connect", exc)

            on_event({"type": "info", "message": "Logging in with token"})
            self.logstore.append("info", "restore", f"restoring saved session on {client.server_name}", category="auth")
            try:
                client.restore(token)
            except MatrixError as exc:
                return self._fail(on_event, "restore", exc, prefix="Failed to login with token")

            on_event(
                {
                    "type": "logged_in",
                    "user_id": client.user_id,
                    "device_id": client.device_id,
                    "homeserver": client.base_url,
                }
            )
            return self._sync(client, on_event)
        finally:
            on_event({"type": "loading", "value": False})

    def logout(self, saved: SavedSession) -> SessionResult:
        """Invalidate the saved token on the server (best effort) and forget it locally."""
        errors: list[SessionError] = []
        if saved.has_token and saved.server:
            try:
                client = self.client_factory(saved.server)
                client.discover()
                client.access_token = saved.token
                client.logout()
                self.logstore.append("info", "logout", "server session invalidated", category="auth")
            except MatrixError as exc:
                self.logstore.append("warn", "logout", f"{exc.code}: {exc.message}", category="network")
                errors.append(SessionError(exc.code, exc.message, "logout", "Token was removed locally only."))
        SavedSession.clear(self.save_file)
        return SessionResult(status="ok", errors=errors)

    def _connect(self, server: str, on_event: EventCb) -> MatrixClient:
        parse_server_name(server)
        on_event({"type": "info", "message": "Connecting to server"})
        try:
            client = self.client_factory(server)
            base_url = client.discover()
        except MatrixError as exc:
            if exc.code == "E_INVALID_SERVER":
                raise
            raise MatrixError(exc.code, f"Failed to connect to server: {exc.message}") from exc
        self.logstore.append("info", "connect", f"homeserver base_url={base_url}", category="network")
        self.client = client
        return client

    def _sync(self, client: MatrixClient, on_event: EventCb) -> SessionResult:
        on_event({"type": "info", "message": "Syncing with server"})
        try:
            payload = client.sync_once()
        except MatrixError as exc:
            return self._fail(on_event, "sync", exc, prefix="Failed to sync with server")
        rooms = joined_room_count(payload)
        self.logstore.append("info", "sync", f"initial sync ok, joined_rooms={rooms}", category="network")
        on_event({"type": "synced", "joined_rooms": rooms})
        on_event({"type": "connected", "value": True})
        on_event({"type": "info", "message": f"Logged in as {client.user_id}"})
        return SessionResult(status="ok", user_id=client.user_id, device_id=client.device_id)

    def _remember(self, saved: SavedSession, on_event: EventCb) -> None:
        err = saved.save(self.save_file)
        if err:
            self.logstore.append("error", "save", err, category="system")
            on_event({"type": "error", "message": err})

    def _fail(self, on_event: EventCb, step: str, exc: MatrixError, prefix: str = "") -> SessionResult:
        message = f"{prefix}: {exc.message}" if prefix else exc.message
        self.logstore.append("error", step, f"{exc.code}: {message}", category="auth" if step in {"validate", "login", "restore"} else "network")
        on_event({"type": "error", "message": message})
        return SessionResult(status="failed", errors=[SessionError(exc.code, message, step)])
