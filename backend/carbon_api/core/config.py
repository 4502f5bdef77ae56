# backend/carbon_api/core/config.py

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic_settings import BaseSettings, SettingsConfigDict

# libpq-style query params that asyncpg.connect() rejects as unexpected kwargs
ASYNCPG_UNSUPPORTED_QUERY_PARAMS = frozenset({"sslmode", "channel_binding"})

JWT_PLACEHOLDER_SECRET = "dev-secret-change-me"
JWT_MIN_SECRET_LENGTH = 32
SUPPORTED_JWT_ALGORITHMS = frozenset({"HS256"})
STRICT_ENVIRONMENTS = frozenset({"staging", "production"})


def drop_query_params(url: str, names: frozenset[str]) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url
    kept = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in names]
    return urlunsplit(parts._replace(query=urlencode(kept, doseq=True)))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # development | staging | production
    ENVIRONMENT: str = "development"

    # -----------------------------
    # Database (async driver URL, e.g. postgresql+asyncpg://...)
    # -----------------------------
    DATABASE_URL_ASYNC: str

    # -----------------------------
    # Access tokens
    # -----------------------------
    JWT_SECRET: str = JWT_PLACEHOLDER_SECRET
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # -----------------------------
    # Normative server (data sources, reports)
    # -----------------------------
    # Scheme included (https://), path excluded (/api/...).
    NORMATIVE_SERVER_URL: str = "http://localhost:9000"
    NORMATIVE_SERVER_TIMEOUT_SECONDS: float = 30.0

    # -----------------------------
    # Logging
    # -----------------------------
    LOG_LEVEL: str = "INFO"
    LOG_DEBUG: bool = False

    @property
    def is_strict_environment(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in STRICT_ENVIRONMENTS

    @property
    def DATABASE_URL_ASYNC_CLEAN(self) -> str:
        return drop_query_params(self.DATABASE_URL_ASYNC, ASYNCPG_UNSUPPORTED_QUERY_PARAMS)

    @property
    def NORMATIVE_SERVER_BASE_URL(self) -> str:
        return self.NORMATIVE_SERVER_URL.rstrip("/")

    def model_post_init(self, __context) -> None:
        if self.JWT_ALGORITHM not in SUPPORTED_JWT_ALGORITHMS:
            raise ValueError(
                f"Unsupported JWT_ALGORITHM={self.JWT_ALGORITHM!r}. Allowed: {', '.join(sorted(SUPPORTED_JWT_ALGORITHMS))}"
            )

        if self.is_strict_environment:
            secret = (self.JWT_SECRET or "").strip()
            if not secret or secret == JWT_PLACEHOLDER_SECRET:
                raise ValueError(f"JWT_SECRET must be set to a strong value in {self.ENVIRONMENT}.")
            if len(secret) < JWT_MIN_SECRET_LENGTH:
                raise ValueError(f"JWT_SECRET must be at least {JWT_MIN_SECRET_LENGTH} characters in {self.ENVIRONMENT}.")

        if not self.NORMATIVE_SERVER_URL.strip():
            raise ValueError("NORMATIVE_SERVER_URL must not be empty.")


settings = Settings()
