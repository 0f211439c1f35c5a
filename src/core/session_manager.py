"""Session tracking on top of the user store — one current user, one last-activity stamp."""

import json
import logging
import time
from typing import Optional

from src.core.user_record_store import (
    CURRENT_USER_KEY,
    LAST_ACTIVITY_KEY,
    UserRecordStore,
    serialize,
)
from src.models.user_record import UserRecord
from src.storage.key_value_storage import StorageError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MINUTES = 30


def _now_ms() -> int:
    return int(time.time() * 1000)


class SessionManager:
    """Login/logout and inactivity timeout for the single active session.

    The session is the serialized UserRecord under ``currentUser`` plus an
    epoch-milliseconds string under ``lastActivity``, kept in the same
    storage as the store's collections.
    """

    def __init__(self, store: UserRecordStore, timeout_minutes: int = DEFAULT_TIMEOUT_MINUTES):
        self.store = store
        self.timeout_minutes = timeout_minutes

    @property
    def storage(self):
        return self.store.storage

    def login_user(self, username: str, password: str) -> bool:
        """Start a session if the credentials match a stored user."""
        user = self.store.validate_credentials(username, password)
        if user is None:
            logger.info("Failed login attempt for %s", username)
            return False

        try:
            self.storage.set_item(CURRENT_USER_KEY, serialize(user.to_dict()))
        except StorageError as e:
            logger.error("Error saving session for %s: %s", username, e)
            return False

        self.touch()
        self.store.record_activity(username, 'User logged in')
        return True

    def logout_user(self, description: str = 'User logged out') -> None:
        current = self.get_current_user()
        if current is not None:
            self.store.record_activity(current.username, description)
        self._clear_session()

    def get_current_user(self) -> Optional[UserRecord]:
        try:
            raw = self.storage.get_item(CURRENT_USER_KEY)
            return UserRecord.from_dict(json.loads(raw)) if raw else None
        except (StorageError, ValueError, KeyError, TypeError) as e:
            logger.error("Error getting current user: %s", e)
            return None

    def is_logged_in(self) -> bool:
        return self.get_current_user() is not None

    def is_admin(self) -> bool:
        user = self.get_current_user()
        return user is not None and user.is_admin

    # ------------------------------------------------------------------
    # Inactivity timeout
    # ------------------------------------------------------------------

    def touch(self, now_ms: Optional[int] = None) -> None:
        """Record user activity at ``now_ms`` (defaults to the current time)."""
        stamp = now_ms if now_ms is not None else _now_ms()
        try:
            self.storage.set_item(LAST_ACTIVITY_KEY, str(stamp))
        except StorageError as e:
            logger.warning("Could not update last activity: %s", e)

    def last_activity(self) -> Optional[int]:
        try:
            raw = self.storage.get_item(LAST_ACTIVITY_KEY)
            return int(raw) if raw else None
        except (StorageError, ValueError) as e:
            logger.warning("Unreadable last activity stamp: %s", e)
            return None

    def check_timeout(self, now_ms: Optional[int] = None) -> bool:
        """End the session if it has been idle longer than the timeout.

        Returns:
            True if a session was expired by this call.
        """
        if not self.is_logged_in():
            return False

        last = self.last_activity()
        if last is None:
            return False

        now = now_ms if now_ms is not None else _now_ms()
        if now - last <= self.timeout_minutes * 60 * 1000:
            return False

        logger.info("Session expired after %d minutes of inactivity", self.timeout_minutes)
        self.logout_user('Session expired due to inactivity')
        return True

    def _clear_session(self) -> None:
        try:
            self.storage.remove_item(CURRENT_USER_KEY)
            self.storage.remove_item(LAST_ACTIVITY_KEY)
        except StorageError as e:
            logger.error("Error clearing session: %s", e)
