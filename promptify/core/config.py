import os
import warnings
from pathlib import Path
from typing import Annotated, Any, Literal

from dotenv import load_dotenv
from pydantic import (
    AnyUrl,
    BeforeValidator,
    EmailStr,
    Field,
    HttpUrl,
    PostgresDsn,
    computed_field,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


def load_env_file():
    env_value = os.getenv("ENVIRONMENT", "local")
    base_dir = Path(__file__).parent.parent.parent

    env_files = [
        base_dir / f".env.{env_value}.local",
        base_dir / f".env.{env_value}",
        base_dir / ".env.local",
        base_dir / ".env",
    ]

    for env_file in env_files:
        if env_file.is_file():
            load_dotenv(dotenv_path=env_file, override=False)
            return str(env_file)

    return None


ENV_FILE = load_env_file()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=True,
    )

    PROJECT_NAME: str = "Promptify"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "AI prompt marketplace API"
    API_PREFIX: str = "/api"
    ENVIRONMENT: Literal["local", "development", "staging", "production", "test"] = (
        "local"
    )
    DEBUG: bool = False

    # SECURITY SETTINGS
    SECRET_KEY: str = Field(default=..., description="JWT signing secret")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # CORS SETTINGS
    FRONTEND_HOST: str = "http://localhost:5173"
    BACKEND_CORS_ORIGINS: Annotated[list[AnyUrl] | str, BeforeValidator(parse_cors)] = []

    @computed_field
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    # RATE LIMITING
    RATE_LIMIT: str = "100/15 minutes"
    RATE_LIMIT_ENABLED: bool = True

    FIRST_SUPERUSER: EmailStr
    FIRST_SUPERUSER_PASSWORD: str
    FIRST_SUPERUSER_NAME: str = "Admin"

    SENTRY_DSN: HttpUrl | None = None

    @computed_field
    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

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
        self._check_default_secret("SECRET_KEY", self.SECRET_KEY)
        self._check_default_secret(
            "FIRST_SUPERUSER_PASSWORD", self.FIRST_SUPERUSER_PASSWORD
        )
        return self


# ============================================================================
# GROUPED SETTINGS CLASSES
# ============================================================================

class AISettings(BaseSettings):
    """AI provider credentials and request limits."""
    model_config = SettingsConfigDict(env_prefix="AI_", extra="ignore")

    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key")
    OPENAI_API_KEY: str = Field(default="", description="OpenAI API key")
    PERPLEXITY_API_KEY: str = Field(default="", description="Perplexity API key")
    CATGPT_API_KEY: str = Field(default="", description="CatGPT demo key (unused)")

    DEFAULT_MODEL: str = Field(default="claude", description="Provider used when none is requested")
    REQUEST_TIMEOUT: float = Field(default=30.0, description="Vendor request timeout in seconds")
    VALIDATE_TIMEOUT: float = Field(default=10.0, description="Key validation timeout in seconds")
    DEFAULT_TEMPERATURE: float = Field(default=0.7, description="Default sampling temperature")
    DEFAULT_MAX_TOKENS: int = Field(default=1000, description="Default completion token cap")


class RazorpaySettings(BaseSettings):
    """Razorpay payment gateway configuration."""
    model_config = SettingsConfigDict(env_prefix="RAZORPAY_", extra="ignore")

    KEY_ID: str = Field(default="", description="Razorpay key id")
    KEY_SECRET: str = Field(default="", description="Razorpay key secret")
    WEBHOOK_SECRET: str = Field(default="", description="Razorpay webhook secret")
    CURRENCY: str = Field(default="INR", description="Order currency")

    @computed_field
    @property
    def is_configured(self) -> bool:
        return bool(self.KEY_ID and self.KEY_SECRET)


class LoggingSettings(BaseSettings):
    """Logging configuration."""
    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    MAX_BYTES: int = Field(default=10 * 1024 * 1024, description="Max bytes per log file")
    BACKUP_COUNT: int = Field(default=5, description="Number of backup files")
    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_DIR: str | None = Field(default=None, description="Directory for log files")
    FILE_LOGGING: bool = Field(default=True, description="Write app.log and error.log")


class DatabaseSettings(BaseSettings):
    """Database connection and pool configuration."""
    model_config = SettingsConfigDict(env_prefix="DATABASE_", extra="ignore")

    URL: str | None = Field(default=None, description="Full SQLAlchemy URL (overrides other settings)")
    SERVER: str = Field(default="localhost", description="PostgreSQL server host")
    PORT: int = Field(default=5432, description="PostgreSQL port")
    USER: str = Field(default="postgres", description="PostgreSQL user")
    PASSWORD: str = Field(default="", description="PostgreSQL password")
    DB: str = Field(default="promptify", description="PostgreSQL database name")

    POOL_SIZE: int = Field(default=5, description="Database connection pool size")
    MAX_OVERFLOW: int = Field(default=10, description="Database max overflow connections")
    ECHO: bool = Field(default=False, description="Echo SQL statements")

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Build SQLAlchemy database URI."""
        if self.URL:
            return self.URL
        return str(
            PostgresDsn.build(
                scheme="postgresql+psycopg",
                username=self.USER,
                password=self.PASSWORD,
                host=self.SERVER,
                port=self.PORT,
                path=self.DB,
            )
        )


# ============================================================================
# SETTINGS INSTANCES
# ============================================================================

settings = Settings()
ai_settings = AISettings()
razorpay_settings = RazorpaySettings()
logging_settings = LoggingSettings()
database_settings = DatabaseSettings()
