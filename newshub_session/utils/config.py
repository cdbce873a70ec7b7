"""
Configuration management with schema validation.
Settings come from a YAML file with ${VAR} / ${VAR:default} substitution.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError
from .logger import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

DEFAULT_SETTINGS_FILE = Path("config") / "settings.yaml"


class AppSettings(BaseModel):
    name: str = "News Hub"
    version: str = "1.0.0"
    environment: str = "development"


class IdentitySettings(BaseModel):
    base_url: str = "http://localhost:8080"
    login_path: str = "/api/auth/login"
    signup_path: str = "/api/auth/signup"
    timeout: Optional[float] = None  # None waits for the server indefinitely
    max_attempts: int = Field(default=3, ge=1)


class StorageSettings(BaseModel):
    path: str = "data/local_storage.json"
    user_key: str = "news_hub_user"
    token_key: str = "auth_token"
    audit_key: str = "news_hub_login_records"
    audit_max_records: int = Field(default=500, ge=1)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "text"
    file_path: Optional[str] = "logs/newshub_session.log"
    max_bytes: int = 10485760
    backup_count: int = 5


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class ConfigManager:
    """Loads and validates settings.yaml"""

    def __init__(self, settings_path: Optional[str] = None):
        self.settings_path = Path(
            settings_path or os.getenv("NEWSHUB_SETTINGS") or DEFAULT_SETTINGS_FILE
        )

    def _substitute_env_vars(self, value: Any) -> Any:
        """Recursively substitute environment variables"""
        if isinstance(value, str):
            if value.startswith("${") and value.endswith("}"):
                var_expr = value[2:-1]
                if ":" in var_expr:
                    var_name, default = var_expr.split(":", 1)
                    return os.getenv(var_name.strip(), default.strip())
                env_value = os.getenv(var_expr.strip())
                if env_value is None:
                    raise ConfigError(f"Environment variable {var_expr} not found")
                return env_value
        elif isinstance(value, dict):
            return {k: self._substitute_env_vars(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self._substitute_env_vars(item) for item in value]
        return value

    def load_settings(self) -> Settings:
        """Load settings; a missing file yields the defaults"""
        raw_data: Any = {}
        if self.settings_path.exists():
            try:
                with open(self.settings_path, "r", encoding="utf-8") as f:
                    raw_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.settings_path}: {e}")
            if not isinstance(raw_data, dict):
                raise ConfigError(f"Settings file must contain a mapping: {self.settings_path}")
        else:
            logger.debug("Settings file not found, using defaults", path=str(self.settings_path))

        data = self._substitute_env_vars(raw_data)

        api_url = os.getenv("NEWSHUB_API_URL")
        if api_url:
            data.setdefault("identity", {})["base_url"] = api_url

        try:
            return Settings(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings in {self.settings_path}: {e}")
