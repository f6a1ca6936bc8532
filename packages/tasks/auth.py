"""Authentication over Supabase auth.

The task stores only need ``current_user``; the CLI uses the rest. Sessions
are kept in a small JSON file so a sign-in survives between CLI runs.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from supabase import AsyncClient
from supabase_auth.errors import AuthError as SupabaseAuthError

from .models import AppUser

logger = logging.getLogger(__name__)

UserListener = Callable[[Optional[AppUser]], None]


class AuthError(Exception):
    """Sign-up, sign-in, sign-out or session restore failed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _to_app_user(user: Any) -> AppUser:
    created_at = user.created_at
    if isinstance(created_at, str):
        try:
            created_at = datetime.fromisoformat(created_at)
        except ValueError:
            created_at = None
    return AppUser(id=user.id, email=user.email or "", created_at=created_at)


class SupabaseAuth:
    def __init__(self, client: AsyncClient, session_path: Optional[Path] = None):
        self._client = client
        self._session_path = session_path
        self._current_user: Optional[AppUser] = None
        self._listeners: list[UserListener] = []
        self._subscription = client.auth.on_auth_state_change(self._on_auth_change)

    @property
    def current_user(self) -> Optional[AppUser]:
        return self._current_user

    def subscribe(self, listener: UserListener) -> Callable[[], None]:
        """Call ``listener`` with the new user (or None) on every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def restore(self) -> Optional[AppUser]:
        """Resume the session saved by a previous sign-in, if any."""
        saved = self._load_session()
        if not saved:
            return None
        try:
            response = await self._client.auth.set_session(saved["access_token"], saved["refresh_token"])
        except SupabaseAuthError as e:
            logger.warning("Saved session rejected (%s); signing out locally", e.message)
            self._clear_session()
            self._set_user(None)
            return None
        if response.session is not None:
            self._save_session(response.session)
        if response.user is not None:
            self._set_user(_to_app_user(response.user))
        return self._current_user

    async def sign_up(self, email: str, password: str) -> AppUser:
        try:
            response = await self._client.auth.sign_up({"email": email, "password": password})
        except SupabaseAuthError as e:
            raise AuthError(e.message) from e
        if response.user is None:
            raise AuthError("Sign up failed. Please try again.")
        user = _to_app_user(response.user)
        # No session means the project requires email confirmation first.
        if response.session is not None:
            self._save_session(response.session)
            self._set_user(user)
        return user

    async def sign_in(self, email: str, password: str) -> AppUser:
        try:
            response = await self._client.auth.sign_in_with_password({"email": email, "password": password})
        except SupabaseAuthError as e:
            raise AuthError(e.message) from e
        if response.user is None:
            raise AuthError("Sign in failed. Invalid credentials.")
        if response.session is not None:
            self._save_session(response.session)
        user = _to_app_user(response.user)
        self._set_user(user)
        return user

    async def sign_out(self) -> None:
        try:
            await self._client.auth.sign_out()
        except SupabaseAuthError as e:
            raise AuthError(f"Failed to sign out: {e.message}") from e
        finally:
            self._clear_session()
            self._set_user(None)

    def close(self) -> None:
        self._subscription.unsubscribe()
        self._listeners.clear()

    # ── internals ─────────────────────────────────────────────────────────

    def _on_auth_change(self, event: Any, session: Any) -> None:
        user = getattr(session, "user", None) if session is not None else None
        logger.debug("Auth event %s", event)
        self._set_user(_to_app_user(user) if user is not None else None)

    def _set_user(self, user: Optional[AppUser]) -> None:
        if user == self._current_user:
            return
        self._current_user = user
        for listener in list(self._listeners):
            listener(user)

    def _load_session(self) -> Optional[dict]:
        if self._session_path is None or not self._session_path.exists():
            return None
        try:
            data = json.loads(self._session_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self._session_path, e)
            return None
        if not data.get("access_token") or not data.get("refresh_token"):
            return None
        return data

    def _save_session(self, session: Any) -> None:
        if self._session_path is None:
            return
        self._session_path.parent.mkdir(parents=True, exist_ok=True)
        self._session_path.write_text(json.dumps({
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
        }))
        self._session_path.chmod(0o600)

    def _clear_session(self) -> None:
        if self._session_path is not None:
            self._session_path.unlink(missing_ok=True)
