from typing import Optional
from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile
from app.core.config import Settings
from app.core.constants import IMAGE_TOO_LARGE, MAX_IMAGE_SIZE
from app.dependencies.auth import (
    get_auth_service, get_current_user, get_profile_service, get_settings,
)
from app.dependencies.rate_limit import rate_limit
from app.middleware.error_handler import format_validation_error
from app.schemas.auth import AccessTokenResponse, AuthResponse, LoginRequest, RegisterRequest
from app.schemas.common import MessageResponse
from app.schemas.user import UpdateProfileRequest, UserResponse
from app.services.auth_service import AuthService
from app.services.profile_service import ImageUpload, ProfileService
from app.utils.cookies import clear_refresh_cookie, read_refresh_cookie, set_refresh_cookie
from app.utils.errors import UnauthorizedError, ValidationError

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    request: RegisterRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
    _: None = Depends(rate_limit),
):
    """
    Create an account with email/password
    - Access token and user in the body
    - Refresh token only in the HttpOnly cookie
    """
    result = auth.register(email=request.email, password=request.password)
    set_refresh_cookie(response, result.refresh_token, settings)
    return AuthResponse(access_token=result.access_token, user=result.user)


@router.post("/login", response_model=AuthResponse, status_code=200)
async def login(
    request: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
    _: None = Depends(rate_limit),
):
    """
    Email/password login
    - Verify credentials
    - Invalidate the user's previous refresh tokens
    """
    result = auth.login(email=request.email, password=request.password)
    set_refresh_cookie(response, result.refresh_token, settings)
    return AuthResponse(access_token=result.access_token, user=result.user)


@router.post("/refresh", response_model=AccessTokenResponse, status_code=200)
async def refresh_tokens(
    http_request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
    _: None = Depends(rate_limit),
):
    """Exchange the refresh cookie for a new access token and a rotated cookie."""
    refresh_token = read_refresh_cookie(http_request, settings)
    if not refresh_token:
        raise UnauthorizedError("Refresh token missing")

    tokens = auth.refresh(refresh_token)
    set_refresh_cookie(response, tokens.refresh_token, settings)
    return AccessTokenResponse(access_token=tokens.access_token)


@router.post("/logout", response_model=MessageResponse, status_code=200)
async def logout(
    http_request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Revoke the refresh cookie (if any) and clear it. Always succeeds."""
    auth.logout(read_refresh_cookie(http_request, settings))
    clear_refresh_cookie(response, settings)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: UserResponse = Depends(get_current_user)):
    return current_user


async def _read_profile_form(request: Request) -> tuple[dict, Optional[ImageUpload]]:
    """Parse the multipart profile form.

    Read by hand so an explicitly empty field ("") is kept apart from an
    omitted one.
    """
    form = await request.form()
    supplied = {key: form[key] for key in ("firstName", "lastName") if key in form}
    try:
        payload = UpdateProfileRequest.model_validate(supplied)
    except PydanticValidationError as exc:
        raise ValidationError([format_validation_error(e) for e in exc.errors()])

    image = None
    upload = form.get("profileImage")
    if isinstance(upload, UploadFile):
        if upload.size is not None and upload.size > MAX_IMAGE_SIZE:
            await upload.close()
            raise ValidationError(IMAGE_TOO_LARGE)
        # One byte past the limit is enough for validate_image to reject it
        image = ImageUpload(
            content=await upload.read(MAX_IMAGE_SIZE + 1),
            filename=upload.filename,
            content_type=upload.content_type,
        )
        await upload.close()
    elif upload is not None:
        raise ValidationError("profileImage must be a file")

    return payload.model_dump(exclude_unset=True), image


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    request: Request,
    current_user: UserResponse = Depends(get_current_user),
    profile: ProfileService = Depends(get_profile_service),
):
    """
    Update firstName / lastName and optionally replace the profile image
    (multipart field ``profileImage``, JPG/PNG/WEBP/GIF up to 5MB).
    """
    changes, image = await _read_profile_form(request)
    return await profile.update_profile(current_user.id, changes, image)
