"""Settings for vklogin.

Values come from init kwargs, ``VKLOGIN_*`` environment variables (nested
with ``__``, e.g. ``VKLOGIN_AUTH__VK__CLIENT_ID``), a ``.env`` file and
finally the YAML file named by ``VKLOGIN_CONFIG_FILE``.
"""

import logging
import os
import sys
from functools import cached_property
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self

DEFAULT_DATA_DIR = Path("~/.local/share/vklogin")

CONFIG_FILE_ENV = "VKLOGIN_CONFIG_FILE"
LOG_FILE_ENV = "VKLOGIN_LOG_FILE"
DATA_DIR_ENV = "VKLOGIN_DATA_DIR"

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "aiosqlite", "alembic")


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Lowest-priority settings source backed by a YAML document."""

    @cached_property
    def _document(self) -> dict[str, Any]:
        config_file = os.environ.get(CONFIG_FILE_ENV)
        if not config_file or not Path(config_file).exists():
            return {}
        return yaml.safe_load(Path(config_file).read_text()) or {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._document.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._document)


class Frontend(BaseModel):
    """Where the browser lands after the callback."""

    url: str = "http://localhost:3000"
    success_path: str = "/main"  # Authenticated area the callback lands on
    error_path: str = "/auth/error"


class Server(BaseModel):
    name: str = "Login With VK"
    version: str = "0.1.0"
    description: str = "OAuth2 login with VK bound to local accounts"


class DatabaseConfig(BaseModel):
    """Store settings.

    An empty ``url`` means "SQLite file in the data directory"; Config fills
    it in after loading.
    """

    url: str = ""
    echo: bool = False
    auto_migrate: bool = True
    busy_timeout_seconds: float = 30.0  # SQLite: how long a writer waits for the lock


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Optional log file, taken from VKLOGIN_LOG_FILE."""
        return os.environ.get(LOG_FILE_ENV)


class VkConfig(BaseModel):
    """VK OAuth application credentials and endpoints.

    Frozen: built once at startup and handed to the provider adapter.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = ""
    client_secret: str = ""
    scope: str = ""
    redirect_uri: str = ""  # Full callback URL registered with VK
    api_version: str = "5.28"
    authorize_url: str = "https://oauth.vk.com/authorize"
    token_url: str = "https://oauth.vk.com/access_token"
    profile_url: str = "https://api.vk.com/method/users.get"
    user_agent: str = "vklogin"


class SessionConfig(BaseModel):
    """Signing settings for the session JWT handed to the browser."""

    secret: str = ""  # Required outside tests
    algorithm: str = "HS256"
    expire_minutes: int = 60 * 24


class AuthConfig(BaseModel):
    vk: VkConfig = VkConfig()
    session: SessionConfig = SessionConfig()
    state_ttl_seconds: int = 600  # 0 disables auth request expiry


class Config(BaseSettings):
    server: Server = Server()
    frontend: Frontend = Frontend()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    auth: AuthConfig = AuthConfig()

    model_config = {
        "env_prefix": "VKLOGIN_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
    }

    @model_validator(mode="after")
    def default_database_url(self) -> Self:
        if not self.database.url:
            data_dir = Path(os.environ.get(DATA_DIR_ENV, str(DEFAULT_DATA_DIR)))
            self.database = self.database.model_copy(
                update={"url": f"sqlite+aiosqlite:///{data_dir / 'vklogin.db'}"}
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # First source wins
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Point the root logger at stderr, or at VKLOGIN_LOG_FILE when set.

    Safe to call more than once; previous root handlers are replaced.
    """
    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setLevel(config.level)
    handler.setFormatter(logging.Formatter(config.format, datefmt=config.date_format))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.setLevel(config.level)
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
