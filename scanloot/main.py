from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from . import __version__
from .db.dynamodb.errors import DdbError, http_status_for
from .errors import GameError
from .middleware.access_log import AccessLogMiddleware
from .middleware.auth import AuthMiddleware
from .middleware.cors import build_allowed_origins
from .middleware.request_context import RequestContextMiddleware
from .observability.logging import configure_logging, get_logger
from .problem_details import problem_response
from .routers.achievements import router as achievements_router
from .routers.auth import router as auth_router
from .routers.catalog import router as catalog_router
from .routers.health import router as health_router
from .routers.items import router as items_router
from .routers.players import router as players_router
from .routers.scan import router as scan_router
from .routers.trades import router as trades_router
from .settings import settings


def create_app() -> FastAPI:
    configure_logging(level=settings.log_level)
    log = get_logger("startup")

    app = FastAPI(
        title="ScanLoot API",
        version=__version__,
        default_response_class=ORJSONResponse,
        redirect_slashes=False,
    )

    log.info("app_starting", settings=settings.to_log_safe_dict())

    # Last added is outermost. Auth sits inside CORS so denials still get CORS headers.
    app.add_middleware(AuthMiddleware)
    app.add_middleware(AccessLogMiddleware, exclude_paths={"/"})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=build_allowed_origins(
            frontend_urls=settings.frontend_urls,
            include_local=not settings.is_production,
        ),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
        max_age=3000,
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(GameError, _game_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DdbError, _ddb_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(players_router, prefix="/api")
    app.include_router(catalog_router, prefix="/api")
    app.include_router(items_router, prefix="/api")
    app.include_router(scan_router, prefix="/api")
    app.include_router(trades_router, prefix="/api")
    app.include_router(achievements_router, prefix="/api")

    return app


def _game_error_handler(request: Request, exc: GameError) -> Response:
    if exc.status_code >= 500:
        get_logger("game_error").error(
            "game_error",
            error_type=type(exc).__name__,
            message=exc.message,
            details=exc.details,
            path=request.url.path,
        )
    return problem_response(
        request=request,
        status_code=exc.status_code,
        title=exc.title,
        detail=exc.message,
        extensions=exc.details or None,
    )


def _ddb_error_handler(request: Request, exc: DdbError) -> Response:
    status_code, title = http_status_for(exc)
    extensions = {
        "operation": exc.operation,
        "table": exc.table_name,
        "awsRequestId": exc.aws_request_id,
    }
    get_logger("storage_error").warning(
        "storage_error",
        error_type=type(exc).__name__,
        status_code=status_code,
        path=request.url.path,
        **extensions,
    )
    return problem_response(
        request=request,
        status_code=status_code,
        title=title,
        detail=exc.message,
        extensions={k: v for k, v in extensions.items() if v is not None} or None,
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    status_code = int(exc.status_code or 500)
    detail = exc.detail if isinstance(exc.detail, str) else None
    if status_code == 404:
        detail = detail if detail and detail != "Not Found" else "Route not found"
    return problem_response(request=request, status_code=status_code, detail=detail)


def _validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    errors: list[dict[str, object]] = []
    for e in exc.errors():
        loc = e.get("loc") or ()
        errors.append(
            {
                "path": ".".join(str(x) for x in loc if x != "body"),
                "message": e.get("msg", "Invalid value"),
                "type": e.get("type"),
            }
        )
    return problem_response(
        request=request,
        status_code=422,
        title="Validation Failed",
        detail="Request validation failed",
        errors=errors,
    )


def _unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    get_logger("unhandled").exception(
        "unhandled_exception",
        http_method=request.method.upper(),
        path=request.url.path,
    )
    return problem_response(
        request=request,
        status_code=500,
        title="Internal Server Error",
        detail=str(exc) or None,
    )


app = create_app()
