# app/core/config.py
import os
from pathlib import Path
from typing import Dict, Literal, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings


# Project root: ldap_auth_fastapi/
BASE_DIR = Path(__file__).resolve().parent.parent.parent


_loaded_env_file: Optional[str] = None
_env_load_warning: Optional[str] = None


def load_environment() -> None:
    """
    Load environment variables from an .env file based on APP_ENV.

    APP_ENV=dev  -> .env.dev
    APP_ENV=uat  -> .env.uat
    APP_ENV=prod -> .env.prod
    APP_ENV=test -> .env.test

    If file is missing, it just relies on system env vars.
    """
    app_env = os.getenv("APP_ENV", "dev").lower()

    global _loaded_env_file, _env_load_warning

    env_map = {
        "dev": ".env.dev",
        "uat": ".env.uat",
        "prod": ".env.prod",
        "test": ".env.test",
    }

    env_file_name = env_map.get(app_env, ".env.dev")
    env_path = BASE_DIR / env_file_name

    if env_path.exists():
        load_dotenv(env_path)
        _loaded_env_file = str(env_path)
        _env_load_warning = None
    else:
        _loaded_env_file = None
        _env_load_warning = f"Env file {env_path} not found. Using system environment variables only."


class Settings(BaseSettings):
    ENVIRONMENT: Literal["dev", "uat", "prod"] = "dev"

    LOG_LEVEL: str = "DEBUG"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_FILE: Optional[str] = None

    JWT_SECRET_KEY: str = "your-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 3600

    LDAP_SERVER_URI: str = os.getenv("LDAP_SERVER_URI", "ldap://localhost:389")
    LDAP_BASE_DN: str = os.getenv("LDAP_BASE_DN", "dc=example,dc=com")
    LDAP_BIND_DN: str = os.getenv("LDAP_BIND_DN", "")  # empty -> anonymous search bind
    LDAP_BIND_PASSWORD: str = os.getenv("LDAP_BIND_PASSWORD", "")

    LDAP_USER_ATTRIBUTE: str = os.getenv("LDAP_USER_ATTRIBUTE", "mail")
    LDAP_USER_OBJECT_CLASS: str = os.getenv("LDAP_USER_OBJECT_CLASS", "")

    # "name=cn,email=mail"
    LDAP_MAPPING: str = os.getenv("LDAP_MAPPING", "")

    # comma-separated origins, or "*"
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    class Config:
        env_file = None
        case_sensitive = False

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.ENVIRONMENT == "prod":
            object.__setattr__(self, "LOG_LEVEL", "INFO")
        else:
            object.__setattr__(self, "LOG_LEVEL", "DEBUG")


_settings = None


def get_settings() -> Settings:
    """Lazy settings loader - settings are only created on first access."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


class _SettingsProxy:
    """Proxy that lazily loads settings on first attribute access."""

    def __getattr__(self, name):
        return getattr(get_settings(), name)

    def __repr__(self):
        return repr(get_settings())


settings = _SettingsProxy()


def get_env_load_state() -> Dict[str, Optional[str]]:
    """
    Helper for logging modules to know which env file was loaded.
    Returns dict with 'env_file' and optional 'warning'.
    """
    return {
        "env_file": _loaded_env_file,
        "warning": _env_load_warning,
    }
