"""JWT access tokens.

Tokens carry the account id in ``sub`` and the account role, and expire after
``jwt_expiry_days``.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from shared.config import Settings
from shared.errors import Unauthenticated


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of an operation."""

    account_id: str
    role: str

    @property
    def is_producer(self) -> bool:
        return self.role == "producer"

    @property
    def is_consumer(self) -> bool:
        return self.role == "consumer"


class TokenService:
    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self._expiry = timedelta(days=settings.jwt_expiry_days)

    def issue(self, account_id: str, role: str) -> str:
        now = datetime.now(UTC)
        claims = {
            "sub": str(account_id),
            "role": role,
            "iat": now,
            "exp": now + self._expiry,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Principal:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Token has expired") from None
        except jwt.InvalidTokenError:
            raise Unauthenticated("Token is not valid") from None
        return Principal(account_id=claims["sub"], role=claims.get("role", ""))
