"""Password hashing strategies."""

from __future__ import annotations

import secrets

from werkzeug.security import check_password_hash, generate_password_hash

from authcenter.domain.users.exceptions import WeakPasswordError
from authcenter.domain.users.repositories import PasswordHasher
from authcenter.shared.errors import RandomSourceError

DEFAULT_MIN_LENGTH = 8


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted scrypt hashes via werkzeug; every call is independent and thread-safe."""

    def __init__(self, *, method: str = "scrypt", min_length: int = DEFAULT_MIN_LENGTH) -> None:
        self._method = method
        self._min_length = min_length

    def hash(self, password: str) -> str:
        if len(password) < self._min_length:
            raise WeakPasswordError(context={"min_length": self._min_length})
        return str(generate_password_hash(password, method=self._method))

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return bool(check_password_hash(hashed, password))
        except (ValueError, TypeError):
            return False

    def generate_token(self, byte_length: int) -> str:
        try:
            return secrets.token_hex(byte_length)
        except (OSError, NotImplementedError) as exc:
            raise RandomSourceError() from exc
