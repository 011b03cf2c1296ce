"""Refresh-token cookie transport. The services never see the response object."""
from typing import Optional
from fastapi import Request, Response
from app.core.config import Settings
from app.utils.helpers import parse_duration


def _cookie_options(settings: Settings) -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "strict" if settings.is_production else "lax",
        "path": "/",
    }


def set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=token,
        max_age=parse_duration(settings.JWT_REFRESH_EXPIRES_IN),
        **_cookie_options(settings),
    )


def clear_refresh_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value="",
        max_age=0,
        **_cookie_options(settings),
    )


def read_refresh_cookie(request: Request, settings: Settings) -> Optional[str]:
    return request.cookies.get(settings.REFRESH_COOKIE_NAME) or None
