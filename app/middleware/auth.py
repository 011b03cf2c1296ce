"""JWT verification middleware.

Every request whose (method, path) is not in the public route table must carry
a valid bearer access token. The verified user is attached to
``request.state.user`` for handlers to read through ``get_current_user``.
"""
from typing import Iterable, Tuple
from starlette.requests import Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.dependencies.auth import get_current_user_from_token
from app.middleware.error_handler import error_response
from app.utils.errors import AppError, UnauthorizedError


class JWTMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, public_routes: Iterable[Tuple[str, str]] = (), public_prefixes: Iterable[str] = ()):
        super().__init__(app)
        self.public_routes = frozenset(public_routes)
        self.public_prefixes = tuple(public_prefixes)

    def is_public(self, request: Request) -> bool:
        if request.method == "OPTIONS":
            return True
        path = request.url.path
        if (request.method, path) in self.public_routes:
            return True
        if request.method == "HEAD" and ("GET", path) in self.public_routes:
            return True
        return path.startswith(self.public_prefixes) if self.public_prefixes else False

    async def dispatch(self, request: Request, call_next):
        if self.is_public(request):
            return await call_next(request)

        auth_header = request.headers.get("authorization")
        if not auth_header:
            return error_response(UnauthorizedError("Not authenticated"))

        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return error_response(UnauthorizedError("Invalid authorization header"))

        app_state = request.app.state
        try:
            with app_state.database.session() as db:
                request.state.user = get_current_user_from_token(token.strip(), db, app_state.token_issuer)
        except AppError as exc:
            return error_response(exc)

        return await call_next(request)
