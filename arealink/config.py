import logging
import os
import sys
from datetime import timedelta
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by AREALINK_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("AREALINK_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Frontend(BaseModel):
    """Frontend configuration (nested in Config, uses env_nested_delimiter)."""

    url: str = "http://localhost:8081"


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "AREA"
    version: str = "0.1.0"
    description: str = "Links user accounts to third-party services and runs reactions on their behalf"


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter)."""

    url: str = "sqlite+aiosqlite:///~/.arealink/arealink.db"
    echo: bool = False
    auto_migrate: bool = True  # Create missing tables at startup


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from AREALINK_LOG_FILE env var."""
        return os.environ.get("AREALINK_LOG_FILE")


class HttpClientConfig(BaseModel):
    """Outbound HTTP client settings shared by OAuth providers and reactions."""

    connect_timeout: float = 5.0
    read_timeout: float = 10.0
    write_timeout: float = 5.0
    pool_timeout: float = 5.0
    user_agent: str = "AREA-Server"


# =============================================================================
# OAuth Configuration
# =============================================================================


class OAuthProviderConfig(BaseModel):
    """Credentials and overrides for one OAuth provider."""

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""
    scopes: list[str] = []  # Empty = provider defaults

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class OAuthStateConfig(BaseModel):
    """Signing of the pending-authorization token handed out with the consent URL."""

    secret: str = ""  # Must be set in production
    algorithm: str = "HS256"
    ttl_seconds: int = 600


class OAuthConfig(BaseModel):
    """OAuth configuration."""

    allowed_providers: list[str] = []  # Empty = every configured provider
    providers: dict[str, OAuthProviderConfig] = {}
    state: OAuthStateConfig = OAuthStateConfig()
    state_size: int = Field(default=32, ge=16)
    code_verifier_length: int = Field(default=64, ge=43, le=128)


class SessionConfig(BaseModel):
    """Login session cookie configuration."""

    cookie_name: str = "area_session"
    ttl_hours: int = 168
    secure: bool = False
    http_only: bool = True
    same_site: Literal["lax", "strict", "none"] = "lax"

    @property
    def ttl(self) -> timedelta:
        return timedelta(hours=self.ttl_hours)


class Config(BaseSettings):
    # These are BaseModel, so env_nested_delimiter handles their env vars
    server: Server = Server()
    frontend: Frontend = Frontend()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    http: HttpClientConfig = HttpClientConfig()
    oauth: OAuthConfig = OAuthConfig()
    session: SessionConfig = SessionConfig()

    model_config = {
        "env_prefix": "AREALINK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows AREALINK_OAUTH__PROVIDERS__ZOOM__CLIENT_ID
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - AREALINK_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup so all loggers pick up
    the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
