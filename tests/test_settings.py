from __future__ import annotations

import pytest

from scanloot.middleware.cors import build_allowed_origins
from scanloot.settings import Settings


def test_environment_aliases_and_table_names(monkeypatch):
    monkeypatch.setenv("STAGE", "Prod")
    monkeypatch.setenv("TABLE_PREFIX", "scanloot-prod-")
    monkeypatch.setenv("STORAGE_BACKEND", "bogus")
    s = Settings()
    assert s.is_production
    assert s.table_name("Items") == "scanloot-prod-Items"
    assert s.normalized_storage_backend == "dynamodb"


def test_production_requires_secret_and_real_storage(monkeypatch):
    monkeypatch.setenv("STAGE", "production")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(RuntimeError) as ei:
        Settings().require_in_production()
    assert "JWT_SECRET" in str(ei.value)
    assert "STORAGE_BACKEND" in str(ei.value)


def test_log_safe_dict_hides_the_secret(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "super-secret-value")
    safe = Settings().to_log_safe_dict()
    assert safe["jwt_secret_configured"] is True
    assert "super-secret-value" not in repr(safe)


def test_cors_allowlist():
    origins = build_allowed_origins(frontend_urls="https://play.example.com/, https://beta.example.com")
    assert "https://play.example.com" in origins
    assert "https://beta.example.com" in origins
    assert build_allowed_origins(frontend_urls=None, include_local=False) == []
