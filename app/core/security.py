from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Any
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
import secrets
from app.core.config import Settings
from app.utils.helpers import parse_duration

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Fixed argon2 work factor; changing it only affects newly hashed passwords
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__time_cost=3,
    argon2__memory_cost=65536,
    argon2__parallelism=4,
)


def hash_password(password: str) -> str:
    if not password or not isinstance(password, str):
        raise ValueError("Password must be a non-empty string")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    if not isinstance(plain_password, str):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


class InvalidTokenError(Exception):
    """Token is malformed, forged, of the wrong type or otherwise unusable."""


class ExpiredTokenError(InvalidTokenError):
    """Token signature checks out but its ``exp`` is in the past."""


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenIssuer:
    """Mints and verifies the signed access/refresh JWTs.

    Access tokens are signed with the primary secret, refresh tokens with a
    dedicated one so that leaking one secret does not compromise the other
    token class.
    """

    def __init__(self, settings: Settings):
        self.algorithm = settings.JWT_ALGORITHM
        self.access_secret = settings.access_secret
        self.refresh_secret = settings.refresh_secret
        self.access_ttl = timedelta(seconds=parse_duration(settings.JWT_EXPIRES_IN))
        self.refresh_ttl = timedelta(seconds=parse_duration(settings.JWT_REFRESH_EXPIRES_IN))

    def _encode(self, claims: Dict[str, Any], token_type: str, secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload.update({
            "type": token_type,
            "iat": now,
            "exp": now + ttl,
            # Random jti keeps two tokens minted in the same second distinct
            "jti": secrets.token_urlsafe(16),
        })
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue_access_token(self, claims: Dict[str, Any]) -> str:
        return self._encode(claims, ACCESS_TOKEN_TYPE, self.access_secret, self.access_ttl)

    def issue_refresh_token(self, claims: Dict[str, Any]) -> str:
        return self._encode(claims, REFRESH_TOKEN_TYPE, self.refresh_secret, self.refresh_ttl)

    def issue_pair(self, user_id: str, email: str) -> TokenPair:
        claims = {"sub": user_id, "email": email}
        return TokenPair(
            access_token=self.issue_access_token(claims),
            refresh_token=self.issue_refresh_token(claims),
        )

    def refresh_expires_at(self) -> datetime:
        """Absolute expiry (naive UTC) for a refresh token issued now."""
        return datetime.now(timezone.utc).replace(tzinfo=None) + self.refresh_ttl

    def verify(self, token: str, secret: str, expected_type: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise ExpiredTokenError("Token expired") from exc
        except JWTError as exc:
            raise InvalidTokenError("Invalid token") from exc

        if payload.get("type") != expected_type:
            raise InvalidTokenError("Unexpected token type")
        if not payload.get("sub"):
            raise InvalidTokenError("Token has no subject")
        return payload

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.access_secret, ACCESS_TOKEN_TYPE)

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.refresh_secret, REFRESH_TOKEN_TYPE)
