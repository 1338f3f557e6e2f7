from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    # Runtime
    environment: str = Field(default="dev", validation_alias="STAGE")
    port: int = Field(default=8080, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # CORS / Frontend (comma-separated origins)
    frontend_urls: str | None = Field(default=None, validation_alias="FRONTEND_URLS")

    # AWS / data
    aws_region: str = Field(default="eu-west-2", validation_alias="AWS_REGION")
    # Points boto3 at DynamoDB Local (e.g. http://localhost:8000) when set.
    dynamodb_endpoint: str | None = Field(default=None, validation_alias="DYNAMODB_ENDPOINT")
    table_prefix: str = Field(default="", validation_alias="TABLE_PREFIX")
    # "dynamodb" or "memory" (in-process, local development only)
    storage_backend: str = Field(default="dynamodb", validation_alias="STORAGE_BACKEND")

    # Auth
    jwt_secret: str | None = Field(default=None, validation_alias="JWT_SECRET")
    jwt_ttl_days: int = Field(default=90, validation_alias="JWT_TTL_DAYS")

    # Rarity table + catalog are static per process; cache reads from the store.
    catalog_cache_ttl_seconds: int = Field(default=300, validation_alias="CATALOG_CACHE_TTL_SECONDS")

    # ---- derived ----
    @property
    def normalized_environment(self) -> str:
        aliases = {
            "prod": "production",
            "stage": "staging",
            "dev": "development",
            "local": "development",
        }
        v = (self.environment or "").strip().lower() or "development"
        return aliases.get(v, v)

    @property
    def is_production(self) -> bool:
        return self.normalized_environment == "production"

    @property
    def is_development(self) -> bool:
        return self.normalized_environment == "development"

    @property
    def normalized_storage_backend(self) -> str:
        v = (self.storage_backend or "").strip().lower()
        return v if v in ("dynamodb", "memory") else "dynamodb"

    def table_name(self, collection: str) -> str:
        return f"{self.table_prefix or ''}{collection}"

    def require_in_production(self) -> None:
        """
        Enforce required settings in production.

        Development is allowed to run with partial config (memory backend,
        throwaway JWT secret); production must be fully configured.
        """
        if not self.is_production:
            return

        missing: list[str] = []
        if not self.jwt_secret:
            missing.append("JWT_SECRET")
        if self.normalized_storage_backend == "memory":
            missing.append("STORAGE_BACKEND=dynamodb (memory backend is dev-only)")

        if missing:
            raise RuntimeError(
                "Missing required production environment variables: "
                + ", ".join(missing)
            )

    def to_log_safe_dict(self) -> dict[str, object]:
        """Startup-log view of the config; secrets reduced to presence flags."""
        return {
            "environment": self.normalized_environment,
            "port": self.port,
            "log_level": self.log_level,
            "frontend_urls": self.frontend_urls,
            "storage_backend": self.normalized_storage_backend,
            "aws_region": self.aws_region,
            "dynamodb_endpoint": self.dynamodb_endpoint,
            "table_prefix": self.table_prefix,
            "jwt_secret_configured": bool((self.jwt_secret or "").strip()),
            "jwt_ttl_days": self.jwt_ttl_days,
            "catalog_cache_ttl_seconds": self.catalog_cache_ttl_seconds,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    s = Settings()
    s.require_in_production()
    return s


# Module-level singleton for import-time consumers.
settings = get_settings()
