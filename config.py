from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PKG_DIR = Path(__file__).resolve().parent
# cheaper bcrypt costs are only accepted when APP_ENV=test
MIN_BCRYPT_ROUNDS = 10
ENV_PATH = PKG_DIR / ".env"


class Settings(BaseSettings):
    # App
    project_name: str = "fyd-api"
    api_version: str = "1.0.0"
    app_env: str = "dev"
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Storage
    database_url: str = Field(
        "sqlite:///./fyd.db", validation_alias="DATABASE_URL"
    )

    # Auth
    jwt_secret: str = Field("change_me", validation_alias="JWT_SECRET")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(60, ge=1)
    refresh_token_expire_days: int = Field(7, ge=1)
    bcrypt_rounds: int = Field(12, ge=4, le=31)

    # Events provider
    events_api_url: str = Field(
        "https://api.example.com/events", validation_alias="EVENTS_API_URL"
    )
    events_api_token: str | None = Field(
        default=None, validation_alias="EVENTS_API_TOKEN"
    )

    # HTTP client
    http_timeout_seconds: float = Field(
        15.0, validation_alias="HTTP_TIMEOUT_SECONDS"
    )
    http_max_retries: int = Field(
        0, ge=0, validation_alias="HTTP_MAX_RETRIES"
    )

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    @model_validator(mode="after")
    def check_bcrypt_cost(self) -> "Settings":
        if self.app_env != "test" and self.bcrypt_rounds < MIN_BCRYPT_ROUNDS:
            raise ValueError(
                f"bcrypt_rounds must be at least {MIN_BCRYPT_ROUNDS} outside APP_ENV=test"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
