from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..auth.tokens import verify_bearer_token
from ..errors import AuthError
from ..observability.logging import bind_context, get_logger
from ..problem_details import problem_response

# Readable without a bearer token.
PUBLIC_PATHS = frozenset(
    {
        "/",
        "/api/auth/login",
        "/api/auth/signup",
        "/api/rarities",
        "/api/collectables",
    }
)


def is_public_path(path: str) -> bool:
    return path in PUBLIC_PATHS


def authenticate(request: Request) -> None:
    """Resolve the bearer token onto request.state.player; raise AuthError otherwise."""
    if request.method.upper() == "OPTIONS":
        return
    path = request.url.path
    if not path.startswith("/api/") or is_public_path(path):
        return

    header = request.headers.get("authorization") or ""
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthError("Authentication required")

    player = verify_bearer_token(parts[1].strip())
    request.state.player = player
    bind_context(player_id=player.player_id)


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Bearer-token enforcement for /api routes.

    Added before CORSMiddleware so auth failures still carry CORS headers.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            authenticate(request)
        except AuthError as exc:
            get_logger("auth_middleware").info(
                "auth_denied",
                status_code=exc.status_code,
                path=request.url.path,
            )
            return problem_response(
                request=request,
                status_code=exc.status_code,
                title=exc.title,
                detail=exc.message,
            )
        return await call_next(request)
