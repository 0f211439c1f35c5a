"""Result schemas returned by the user store."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FailureReason(str, Enum):
    """Why a store operation did not succeed."""
    MISSING_FIELDS = 'missing_fields'
    DUPLICATE_USERNAME = 'duplicate_username'
    PROTECTED_USER = 'protected_user'
    USER_NOT_FOUND = 'user_not_found'
    INVALID_CREDENTIALS = 'invalid_credentials'
    STORAGE_ERROR = 'storage_error'


@dataclass
class OperationResult:
    """Outcome of a store mutation.

    Attributes:
        success: Whether the operation completed and was persisted
        reason: Failure category (None on success)
        message: Human-readable detail
    """

    success: bool
    reason: Optional[FailureReason] = None
    message: str = ''

    @classmethod
    def ok(cls, message: str = '') -> 'OperationResult':
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, reason: FailureReason, message: str = '') -> 'OperationResult':
        return cls(success=False, reason=reason, message=message)

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'success': self.success,
            'reason': self.reason.value if self.reason else None,
            'message': self.message,
        }


@dataclass
class StorageUsage:
    """Size report for the persisted collections.

    Attributes:
        user_count: Number of user records, admin included
        user_bytes: UTF-8 byte length of the stored users string
        activity_count: Number of activity entries
        activity_bytes: UTF-8 byte length of the stored activities string
    """

    user_count: int = 0
    user_bytes: int = 0
    activity_count: int = 0
    activity_bytes: int = 0

    @property
    def total_bytes(self) -> int:
        return self.user_bytes + self.activity_bytes

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'user_count': self.user_count,
            'user_bytes': self.user_bytes,
            'activity_count': self.activity_count,
            'activity_bytes': self.activity_bytes,
            'total_bytes': self.total_bytes,
        }

    def __repr__(self) -> str:
        """String representation."""
        return (
            f'StorageUsage(users={self.user_count}'
            f', activities={self.activity_count}'
            f', total_bytes={self.total_bytes})'
        )
