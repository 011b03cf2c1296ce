from dataclasses import dataclass
from typing import Optional
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.constants import INVALID_CREDENTIALS, REFRESH_TOKEN_INVALID, UserRole
from app.core.security import (
    TokenIssuer, TokenPair, hash_password, verify_password,
)
from app.models.user import User
from app.schemas.user import UserResponse
from app.services.token_store import RefreshTokenStore
from app.utils.errors import ConflictError, UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    access_token: str
    refresh_token: str
    user: UserResponse


class AuthService:
    """Register/login/refresh/logout and the refresh-token rotation protocol.

    This is the only component that writes to the refresh token store.
    """

    def __init__(self, db: Session, issuer: TokenIssuer, tokens: Optional[RefreshTokenStore] = None):
        self.db = db
        self.issuer = issuer
        self.tokens = tokens or RefreshTokenStore(db)

    def _issue_and_store(self, user: User) -> TokenPair:
        pair = self.issuer.issue_pair(user.id, user.email)
        self.tokens.create(pair.refresh_token, user.id, self.issuer.refresh_expires_at())
        return pair

    def register(self, email: str, password: str) -> AuthResult:
        """
        Create an account and open its first session.
        - Reject duplicate email (409)
        - Hash password, create user with the default role
        - Issue tokens and persist the refresh token
        """
        existing_user = self.db.query(User).filter(User.email == email).first()
        if existing_user:
            raise ConflictError("Email already registered")

        user = User(
            email=email,
            password_hash=hash_password(password),
            role=UserRole.USER,
        )
        try:
            self.db.add(user)
            self.db.flush()
            pair = self._issue_and_store(user)
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            self.db.rollback()
            raise ConflictError("Email already registered")
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(user)
        logger.info("User registered", extra={"user_id": user.id})
        return AuthResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=UserResponse.model_validate(user),
        )

    def login(self, email: str, password: str) -> AuthResult:
        """
        Email/password login
        - Verify credentials (same message for unknown email and wrong password)
        - Drop every refresh token the user holds (single active session)
        - Issue and persist a new pair
        """
        user = self.db.query(User).filter(User.email == email).first()
        if not user or not verify_password(password, user.password_hash or ""):
            logger.info("Login rejected")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        try:
            revoked = self.tokens.delete_all_for_user(user.id)
            pair = self._issue_and_store(user)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("User logged in", extra={"user_id": user.id, "revoked_tokens": revoked})
        return AuthResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=UserResponse.model_validate(user),
        )

    def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a valid refresh token for a new pair (rotation).

        Every failure, expected or not, surfaces as the same 401 so callers
        cannot tell a missing token from an expired or forged one.
        """
        try:
            return self._rotate(refresh_token)
        except Exception as exc:
            self.db.rollback()
            logger.info("Refresh rejected: %s", exc.__class__.__name__)
            raise UnauthorizedError(REFRESH_TOKEN_INVALID) from None

    def _discard(self, refresh_token: str) -> None:
        self.tokens.delete_by_token(refresh_token)
        self.db.commit()

    def _rotate(self, refresh_token: str) -> TokenPair:
        stored = self.tokens.find_by_token(refresh_token)
        if stored is None:
            raise UnauthorizedError(REFRESH_TOKEN_INVALID)

        if stored.is_expired():
            self._discard(refresh_token)
            raise UnauthorizedError(REFRESH_TOKEN_INVALID)

        user = self.db.get(User, stored.user_id)
        if user is None:
            self._discard(refresh_token)
            raise UnauthorizedError(REFRESH_TOKEN_INVALID)

        # Secondary check: the store already vouched for the token
        payload = self.issuer.verify_refresh_token(refresh_token)

        if payload.get("sub") != stored.user_id:
            self._discard(refresh_token)
            raise UnauthorizedError(REFRESH_TOKEN_INVALID)

        if not self.tokens.consume(refresh_token):
            # A concurrent refresh already rotated this token
            raise UnauthorizedError(REFRESH_TOKEN_INVALID)

        pair = self._issue_and_store(user)
        self.db.commit()
        return pair

    def logout(self, refresh_token: Optional[str]) -> None:
        """Best-effort revocation; succeeds whether or not the token still exists."""
        if not refresh_token:
            return
        try:
            self.tokens.delete_by_token(refresh_token)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Failed to revoke refresh token on logout")

    def validate_user_by_id(self, user_id: str) -> UserResponse:
        user = self.db.get(User, user_id)
        if user is None:
            raise UnauthorizedError("User no longer exists")
        return UserResponse.model_validate(user)
