"""User and activity record models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


ADMIN_USERNAME = 'admin'
SYSTEM_USERNAME = 'system'


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a 'Z' suffix, e.g. '2024-01-05T18:04:09.123Z'."""
    moment = moment.astimezone(timezone.utc)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{moment.microsecond // 1000:03d}Z"


class Role(str, Enum):
    """Roles a user record can hold."""
    ADMIN = 'admin'
    USER = 'user'


@dataclass
class UserRecord:
    """A single user account.

    Attributes:
        username: Unique, case-sensitive login name
        password: Plaintext password, compared verbatim
        role: 'admin' or 'user'
        created_at: ISO-8601 creation timestamp (auto-set if not provided)
    """

    username: str
    password: str
    role: str = Role.USER.value
    created_at: Optional[str] = None

    def __post_init__(self):
        """Validate the role and set the creation timestamp."""
        if self.role not in [r.value for r in Role]:
            raise ValueError(f'role must be one of {[r.value for r in Role]}')
        if not self.created_at:
            self.created_at = iso_timestamp(datetime.now(timezone.utc))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def to_dict(self) -> dict:
        """Convert to the persisted dictionary layout."""
        return {
            'username': self.username,
            'password': self.password,
            'role': self.role,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UserRecord':
        """Create from the persisted dictionary layout."""
        return cls(
            username=data['username'],
            password=data['password'],
            role=data.get('role', Role.USER.value),
            created_at=data.get('createdAt'),
        )

    def __repr__(self) -> str:
        """String representation (password omitted)."""
        return (
            f'UserRecord(username={self.username}'
            f', role={self.role}'
            f', created_at={self.created_at})'
        )


@dataclass
class ActivityEntry:
    """One line of a user's activity log.

    Attributes:
        username: Owner of the entry, or 'system' for store events
        description: Free-text description
        timestamp: Human-readable local time of the event
    """

    username: str
    description: str
    timestamp: str

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'username': self.username,
            'description': self.description,
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ActivityEntry':
        """Create from dictionary."""
        return cls(
            username=data['username'],
            description=data['description'],
            timestamp=data.get('timestamp', ''),
        )
