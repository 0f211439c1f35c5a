"""Password comparison.

Passwords are stored and compared as plaintext. Every credential check in the
project goes through ``check_password`` so a hashed scheme can replace it here.
"""

import hmac


def check_password(stored: str, supplied: str) -> bool:
    """Return True if ``supplied`` matches the stored password exactly."""
    if not isinstance(stored, str) or not isinstance(supplied, str):
        return False
    return hmac.compare_digest(stored.encode('utf-8'), supplied.encode('utf-8'))
