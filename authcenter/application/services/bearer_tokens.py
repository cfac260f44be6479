"""Stateless bearer credentials.

The JWT mirrors what a session snapshot carries (user id, email, role) so
collaborators can check a caller without touching the session store. It is
not revocable; the session id stays the canonical handle for that.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from authcenter.domain.users.entities import User, UserRole
from authcenter.shared.utils.clock import Clock, utc_now


@dataclass(slots=True, frozen=True)
class BearerClaims:
    user_id: str
    email: str
    role: UserRole
    expires_at: datetime


class JwtTokenIssuer:
    def __init__(
        self,
        *,
        secret: str,
        lifetime: timedelta,
        algorithm: str = "HS256",
        clock: Clock = utc_now,
    ) -> None:
        self._secret = secret
        self._lifetime = lifetime
        self._algorithm = algorithm
        self._clock = clock

    def issue(self, user: User) -> str:
        now = self._clock()
        payload = {
            "sub": user.id,
            "email": user.email,
            "role": user.role.value,
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> BearerClaims | None:
        """Return the claims of a valid token, ``None`` for anything else."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            return None

        role = payload.get("role")
        if not payload.get("sub") or not isinstance(role, str) or not UserRole.is_valid(role):
            return None
        return BearerClaims(
            user_id=str(payload["sub"]),
            email=str(payload.get("email", "")),
            role=UserRole(role),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
        )
