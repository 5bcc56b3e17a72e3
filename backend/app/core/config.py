import secrets
import warnings
from typing import Annotated, Any, Literal

from pydantic import (
    AnyUrl,
    BeforeValidator,
    HttpUrl,
    PostgresDsn,
    computed_field,
    model_validator,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./backend/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "Idea Validator"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    SENTRY_DSN: HttpUrl | None = None

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []
    FRONTEND_HOST: str = "http://localhost:3000"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "app"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> PostgresDsn:
        return MultiHostUrl.build(
            scheme="postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    # Identity provider. "jwt" verifies the provider-issued access token locally
    # with the shared secret; "remote" asks the provider's /auth/v1/user endpoint.
    AUTH_PROVIDER: Literal["jwt", "remote"] = "jwt"
    AUTH_JWT_SECRET: str = secrets.token_urlsafe(32)
    AUTH_JWT_AUDIENCE: str | None = "authenticated"
    AUTH_PROVIDER_URL: str | None = None
    AUTH_PROVIDER_API_KEY: str | None = None
    AUTH_PROVIDER_TIMEOUT_SECONDS: float = 5.0
    SESSION_COOKIE_NAME: str = "sb-access-token"

    SIGN_IN_PATH: str = "/sign-in"
    DASHBOARD_PATH: str = "/dashboard"

    # Entries ending in "*" are raw prefixes; others match exactly or as a
    # path-segment prefix ("/" only matches the root).
    GATEWAY_PUBLIC_ROUTES: list[str] = [
        "/",
        "/sign-in",
        "/sign-up",
        "/reset-password",
        "/api/webhooks",
        "/api/auth/callback",
        "/api/utils/liveness",
        "/api/utils/health-check",
        "/admin",
        "/about",
        "/privacy",
        "/terms",
        "/contact",
        "/feedback",
    ]
    GATEWAY_PROTECTED_API_ROUTES: list[str] = [
        "/api/database",
        "/api/generate",
    ]
    GATEWAY_AUTH_PAGES: list[str] = ["/sign-in", "/sign-up"]
    # table -> owner column (None = rows are not scoped to a user)
    GATEWAY_RESOURCE_TABLES: dict[str, str | None] = {
        "ideas": "user_id",
        "blueprints": None,
    }

    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-1.5-flash-latest"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: float = 60.0
    GENERATION_FALLBACK_ENABLED: bool = False

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("AUTH_JWT_SECRET", self.AUTH_JWT_SECRET)
        self._check_default_secret("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)
        if self.AUTH_PROVIDER == "remote" and not self.AUTH_PROVIDER_URL:
            raise ValueError("AUTH_PROVIDER_URL is required when AUTH_PROVIDER=remote")
        return self


settings = Settings()  # type: ignore
