from __future__ import annotations

_LOCAL_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8081",
    "http://localhost:19006",
)


def build_allowed_origins(*, frontend_urls: str | None, include_local: bool = True) -> list[str]:
    """Explicit CORS allowlist: FRONTEND_URLS (comma separated) plus local dev servers."""
    allowed: set[str] = set(_LOCAL_ORIGINS) if include_local else set()
    for origin in str(frontend_urls or "").split(","):
        origin = origin.strip().rstrip("/")
        if origin:
            allowed.add(origin)
    return sorted(allowed)
