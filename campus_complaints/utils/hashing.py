"""
Password hashing utilities for campus accounts
"""

import bcrypt

from campus_complaints.core.config import settings

# bcrypt only reads the first 72 bytes of a secret
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode('utf-8')[:_BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Secure password hashing utilities"""

    @classmethod
    def hash_password(cls, password: str, rounds: int = None) -> str:
        """Hash password using bcrypt"""
        if rounds is None:
            rounds = settings.security.BCRYPT_ROUNDS

        salt = bcrypt.gensalt(rounds=rounds)
        hashed = bcrypt.hashpw(_encode(password), salt)
        return hashed.decode('utf-8')

    @classmethod
    def verify_password(cls, password: str, hashed_password: str) -> bool:
        """Verify password against hash"""
        if not password or not hashed_password:
            return False
        try:
            return bcrypt.checkpw(_encode(password), hashed_password.encode('utf-8'))
        except ValueError:
            return False
