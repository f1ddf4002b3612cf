"""
Bcrypt Password Adapter - Implements PasswordHasherPort with bcrypt.
"""

import bcrypt

from market_auth.ports.password_port import PasswordHasherPort

# bcrypt only looks at the first 72 bytes of input.
BCRYPT_MAX_BYTES = 72


class BcryptPasswordHasher(PasswordHasherPort):
    """
    bcrypt password hashing.

    Cost defaults to 12 rounds. Tests may drop to 4 (bcrypt's minimum).
    """

    def __init__(self, rounds: int = 12):
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self._rounds = rounds

    def hash(self, plain_password: str) -> str:
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        if not plain_password or not hashed:
            return False
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False
