"""JWT token management for gauntlet sessions."""

from __future__ import annotations

import datetime
import enum
import typing as t

import annotated_types as ant
import jwt
import pydantic as p

from gauntlet.core import di


class Role(enum.Enum):
    Candidate = "candidate"
    Admin = "admin"


class TokenPayload(t.TypedDict):
    """JWT token payload structure."""

    sub: str  # candidate_id, or "admin"
    role: str
    exp: int  # expiration timestamp
    iat: int  # issued at timestamp


class TokenData(t.NamedTuple):
    """Decoded token data."""

    subject: str
    role: Role
    expires_at: datetime.datetime
    issued_at: datetime.datetime


class JWTManager(object):
    """Manages JWT token creation and validation."""

    _secret_key: p.Secret[str]
    _algorithm: t.Literal["HS256"]
    _access_token_expire_minutes: t.Annotated[int, ant.Gt(1)]

    def __init__(
        self,
        secret_key: p.Secret[str],
        algorithm: t.Literal["HS256"] = "HS256",
        access_token_expire_minutes: t.Annotated[int, ant.Gt(1)] = 240,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._access_token_expire_minutes = access_token_expire_minutes

    @property
    def secret_key(self) -> str:
        return self._secret_key.get_secret_value()

    @property
    def access_token_expire_minutes(self) -> int:
        return self._access_token_expire_minutes

    def create_access_token(
        self,
        subject: str,
        role: Role,
        expires_delta: datetime.timedelta | None = None,
    ) -> str:
        """Create a new access token.

        Args:
            subject: The candidate ID the token is scoped to, or "admin"
            role: Who the bearer is
            expires_delta: Custom expiration time (default: access_token_expire_minutes)
        """
        now = datetime.datetime.now(datetime.UTC)
        if expires_delta is None:
            expires_delta = datetime.timedelta(minutes=self._access_token_expire_minutes)

        payload = TokenPayload(
            sub=subject,
            role=role.value,
            exp=int((now + expires_delta).timestamp()),
            iat=int(now.timestamp()),
        )
        return jwt.encode(dict(payload), self.secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenData | None:
        """Decode and validate a token.

        Returns:
            TokenData if valid, None if invalid or expired
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self._algorithm])
            return TokenData(
                subject=payload["sub"],
                role=Role(payload["role"]),
                expires_at=datetime.datetime.fromtimestamp(payload["exp"], tz=datetime.UTC),
                issued_at=datetime.datetime.fromtimestamp(payload["iat"], tz=datetime.UTC),
            )
        except jwt.ExpiredSignatureError:
            return None
        except (jwt.InvalidTokenError, KeyError, ValueError):
            return None


@di.inject
def create_access_token(
    subject: str,
    role: Role,
    jwt_manager: JWTManager = di.Provide["auth.jwt_manager"],
) -> str:
    return jwt_manager.create_access_token(subject, role)


@di.inject
def decode_token(token: str, jwt_manager: JWTManager = di.Provide["auth.jwt_manager"]) -> TokenData | None:
    return jwt_manager.decode_token(token)
