"""Application constants such as user roles, image limits and the public route table."""
from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
IMAGE_TOO_LARGE = "File size cannot exceed 5MB"
ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"})

REFRESH_TOKEN_INVALID = "Refresh token invalid or expired"
INVALID_CREDENTIALS = "Incorrect email or password"

# (method, path) pairs served without a bearer token
PUBLIC_ROUTES = frozenset({
    ("POST", "/auth/register"),
    ("POST", "/auth/login"),
    ("POST", "/auth/refresh"),
    ("POST", "/auth/logout"),
    ("GET", "/health"),
    ("GET", "/docs"),
    ("GET", "/docs/oauth2-redirect"),
    ("GET", "/redoc"),
    ("GET", "/openapi.json"),
})

# Path prefixes served without a bearer token (locally stored uploads)
PUBLIC_PATH_PREFIXES = ("/static/",)
