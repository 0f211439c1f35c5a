"""User record store — CRUD over users and activity logs held in key-value storage."""

import json
import logging
from datetime import datetime
from typing import List, Optional

from src.core.credentials import check_password
from src.models.results import FailureReason, OperationResult, StorageUsage
from src.models.user_record import (
    ADMIN_USERNAME,
    SYSTEM_USERNAME,
    ActivityEntry,
    Role,
    UserRecord,
)
from src.storage.key_value_storage import JsonFileStorage, MemoryStorage, StorageError

logger = logging.getLogger(__name__)

USERS_KEY = 'users'
ACTIVITIES_KEY = 'userActivities'
CURRENT_USER_KEY = 'currentUser'
LAST_ACTIVITY_KEY = 'lastActivity'

DEFAULT_ADMIN_PASSWORD = 'admin123'


def serialize(data) -> str:
    """Compact JSON, identical in shape to what a browser's JSON.stringify writes."""
    return json.dumps(data, separators=(',', ':'), ensure_ascii=False)


def locale_timestamp(moment: datetime) -> str:
    """Format like en-US toLocaleString: '1/5/2024, 6:04:09 PM' (no zero padding)."""
    hour = moment.hour % 12 or 12
    suffix = 'AM' if moment.hour < 12 else 'PM'
    return (
        f'{moment.month}/{moment.day}/{moment.year}, '
        f'{hour}:{moment.minute:02d}:{moment.second:02d} {suffix}'
    )


class UserRecordStore:
    """Owns the user list and the activity log, both persisted as JSON strings.

    Construction does not touch storage; call ``initialize()`` once at
    startup. Every mutation is written back to storage immediately. Public
    methods never raise on storage failures: they log and return False, an
    empty list, or None. The ``*_result`` variants return an
    ``OperationResult`` carrying the failure reason.
    """

    def __init__(
        self,
        storage: Optional[MemoryStorage] = None,
        admin_password: str = DEFAULT_ADMIN_PASSWORD,
        timestamp_format: Optional[str] = None,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self.admin_password = admin_password
        self.timestamp_format = timestamp_format
        self.users: List[UserRecord] = []
        self.activities: List[ActivityEntry] = []

    @classmethod
    def from_config(cls, cfg) -> 'UserRecordStore':
        """Build an uninitialized store from a ConfigManager."""
        storage_cfg = cfg.get_storage_config()
        quota = storage_cfg.get('quota_bytes')
        if storage_cfg.get('backend', 'json') == 'memory':
            storage = MemoryStorage(quota_bytes=quota)
        else:
            storage = JsonFileStorage(
                path=storage_cfg.get('path', 'data/local_storage.json'),
                quota_bytes=quota,
            )

        return cls(
            storage=storage,
            admin_password=cfg.get_admin_config().get('default_password', DEFAULT_ADMIN_PASSWORD),
            timestamp_format=cfg.get('activity.timestamp_format'),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Load both collections and make sure the admin account exists."""
        self.users = self._load_collection(USERS_KEY, UserRecord.from_dict)
        self.activities = self._load_collection(ACTIVITIES_KEY, ActivityEntry.from_dict)
        self.ensure_admin_exists()

    def ensure_admin_exists(self) -> bool:
        """Create the admin record if missing. Safe to call repeatedly.

        Returns:
            True if the admin exists and is persisted afterwards.
        """
        if self.get_user(ADMIN_USERNAME) is not None:
            return True

        admin = UserRecord(
            username=ADMIN_USERNAME,
            password=self.admin_password,
            role=Role.ADMIN.value,
        )
        self.users.append(admin)
        if not self._save_users():
            self.users.remove(admin)
            return False

        logger.info("Admin account created")
        return True

    def clear_all(self) -> bool:
        """Erase users, activities and the session, then re-initialize."""
        try:
            for key in (USERS_KEY, ACTIVITIES_KEY, CURRENT_USER_KEY, LAST_ACTIVITY_KEY):
                self.storage.remove_item(key)
        except StorageError as e:
            logger.error("Error clearing all data: %s", e)
            return False

        self.initialize()
        logger.info("All user data cleared")
        return True

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def validate_credentials(self, username: str, password: str) -> Optional[UserRecord]:
        """Return the first record whose username and password both match."""
        for user in self.users:
            if user.username == username and check_password(user.password, password):
                return user
        return None

    def get_user(self, username: str) -> Optional[UserRecord]:
        for user in self.users:
            if user.username == username:
                return user
        return None

    def list_users(self) -> List[UserRecord]:
        """All non-admin records in insertion order."""
        return [u for u in self.users if u.username != ADMIN_USERNAME]

    def create_user(self, username: str, password: str) -> bool:
        return self.create_user_result(username, password).success

    def create_user_result(self, username: str, password: str) -> OperationResult:
        """Add a user with role 'user'.

        Args:
            username: Login name; surrounding whitespace is trimmed.
            password: Plaintext password.

        Returns:
            OperationResult; on failure the in-memory list is unchanged.
        """
        username = username.strip() if isinstance(username, str) else ''
        if not username or not password:
            logger.debug("Create rejected: missing username or password")
            return OperationResult.fail(
                FailureReason.MISSING_FIELDS, 'Username and password are required'
            )

        if self.get_user(username) is not None:
            logger.debug("Create rejected: username %s already exists", username)
            return OperationResult.fail(
                FailureReason.DUPLICATE_USERNAME, f'Username {username} already exists'
            )

        new_user = UserRecord(username=username, password=password, role=Role.USER.value)
        self.users.append(new_user)

        if not self._save_users():
            self.users.remove(new_user)
            return OperationResult.fail(
                FailureReason.STORAGE_ERROR, f'Could not save user {username}'
            )

        self.record_activity(SYSTEM_USERNAME, f'User {username} created')
        logger.info("User %s created", username)
        return OperationResult.ok(f'User {username} created')

    def delete_user(self, username: str) -> bool:
        return self.delete_user_result(username).success

    def delete_user_result(self, username: str) -> OperationResult:
        """Remove a non-admin user together with all of their activity entries."""
        if username == ADMIN_USERNAME:
            logger.debug("Delete rejected: admin account is protected")
            return OperationResult.fail(
                FailureReason.PROTECTED_USER, 'The admin account cannot be deleted'
            )

        user = self.get_user(username)
        if user is None:
            logger.debug("Delete rejected: user %s not found", username)
            return OperationResult.fail(
                FailureReason.USER_NOT_FOUND, f'User {username} not found'
            )

        index = self.users.index(user)
        self.users.pop(index)
        if not self._save_users():
            self.users.insert(index, user)
            return OperationResult.fail(
                FailureReason.STORAGE_ERROR, f'Could not delete user {username}'
            )

        self.clear_activities_for(username)
        self.record_activity(SYSTEM_USERNAME, f'User {username} deleted and all data cleared')
        logger.info("User %s deleted", username)
        return OperationResult.ok(f'User {username} deleted')

    # ------------------------------------------------------------------
    # Activities
    # ------------------------------------------------------------------

    def record_activity(self, username: str, description: str) -> bool:
        """Append an activity entry stamped with the current local time."""
        entry = ActivityEntry(
            username=username,
            description=description,
            timestamp=self._timestamp(),
        )
        self.activities.append(entry)
        if not self._save_activities():
            self.activities.pop()
            return False
        return True

    def _timestamp(self) -> str:
        now = datetime.now()
        if self.timestamp_format:
            return now.strftime(self.timestamp_format)
        return locale_timestamp(now)

    def get_activities_for(self, username: str) -> List[ActivityEntry]:
        return [a for a in self.activities if a.username == username]

    def clear_activities_for(self, username: str) -> bool:
        """Drop every activity entry belonging to ``username``."""
        kept = [a for a in self.activities if a.username != username]
        previous, self.activities = self.activities, kept
        if not self._save_activities():
            self.activities = previous
            return False
        return True

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def storage_usage(self) -> StorageUsage:
        """Report record counts and the byte size of each stored collection."""
        return StorageUsage(
            user_count=len(self.users),
            user_bytes=self._stored_bytes(USERS_KEY),
            activity_count=len(self.activities),
            activity_bytes=self._stored_bytes(ACTIVITIES_KEY),
        )

    def _stored_bytes(self, key: str) -> int:
        try:
            raw = self.storage.get_item(key)
        except StorageError as e:
            logger.error("Error reading %s: %s", key, e)
            return 0
        return len(raw.encode('utf-8')) if raw else 0

    def _load_collection(self, key: str, factory) -> list:
        """Parse the stored array; items that fail to load are skipped, the rest kept."""
        try:
            raw = self.storage.get_item(key)
            if not raw:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
        except (StorageError, ValueError) as e:
            logger.error("Error loading %s: %s", key, e)
            return []

        items = []
        for position, item in enumerate(data):
            try:
                items.append(factory(item))
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Skipping unreadable entry %d in %s: %s", position, key, e)
        return items

    def _save_users(self) -> bool:
        return self._save(USERS_KEY, [u.to_dict() for u in self.users])

    def _save_activities(self) -> bool:
        return self._save(ACTIVITIES_KEY, [a.to_dict() for a in self.activities])

    def _save(self, key: str, data: list) -> bool:
        try:
            self.storage.set_item(key, serialize(data))
            return True
        except (StorageError, TypeError, ValueError) as e:
            logger.error("Error saving %s: %s", key, e)
            return False
