from fastapi import Depends, Request
from sqlalchemy.orm import Session
from app.core.config import Settings
from app.core.constants import UserRole
from app.core.database import get_db
from app.core.security import InvalidTokenError, TokenIssuer
from app.schemas.user import UserResponse
from app.services.auth_service import AuthService
from app.services.profile_service import ProfileService
from app.utils.errors import ForbiddenError, UnauthorizedError


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_service(
    request: Request,
    db: Session = Depends(get_db),
) -> AuthService:
    return AuthService(db, request.app.state.token_issuer)


def get_profile_service(
    request: Request,
    db: Session = Depends(get_db),
) -> ProfileService:
    return ProfileService(db, request.app.state.storage)


def get_current_user_from_token(
    token: str,
    db: Session,
    issuer: TokenIssuer,
) -> UserResponse:
    """
    Verify a bearer access token and return the user it belongs to.
    Signature, expiry and type failures are all reported the same way.
    """
    try:
        payload = issuer.verify_access_token(token)
    except InvalidTokenError:
        raise UnauthorizedError("Invalid or expired token")

    return AuthService(db, issuer).validate_user_by_id(payload["sub"])


async def get_current_user(request: Request) -> UserResponse:
    """Current user attached by ``JWTMiddleware``."""
    user = getattr(request.state, "user", None)
    if user is None:
        raise UnauthorizedError("Not authenticated")
    return user


async def require_admin(
    current_user: UserResponse = Depends(get_current_user),
) -> UserResponse:
    """Verify current user is an admin"""
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenError("Admin access required")
    return current_user
