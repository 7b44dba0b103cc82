"""Configuration loading for the survey service.

Rules:
- Primary source: `survey_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_SURVEY_CONFIG = Path("survey_config.json")
DEFAULT_DSN = "sqlite+pysqlite:///:memory:"
logger = logging.getLogger(__name__)

_TRUE_TOKENS = {"1", "true", "yes", "on"}


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _flag(text: Optional[str]) -> bool:
    return str(text).strip().lower() in _TRUE_TOKENS


class DatabaseConfig(BaseModel):
    dsn: str
    auto_apply_migrations: bool = Field(default=True)
    migrations_dir: str = Field(default="migrations")

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v.strip()


class AuthConfig(BaseModel):
    require_login_to_author: bool = Field(default=True)
    require_login_to_respond: bool = Field(default=False)


class CorsConfig(BaseModel):
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("allow_origins")
    @classmethod
    def origins_must_be_present(cls, v: List[str]) -> List[str]:
        cleaned = [o.strip() for o in v if o and o.strip()]
        if not cleaned:
            raise ValueError("cors.allow_origins must list at least one origin")
        return cleaned


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"logging.level must be one of {sorted(allowed)}")
        return v.upper()


class AppConfig(BaseModel):
    database: DatabaseConfig
    auth: AuthConfig = Field(default_factory=AuthConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) survey_config.json at project root
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_SURVEY_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, list):
            return ",".join(str(x) for x in cur)
        return str(cur) if cur is not None else default

    # Database
    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or DEFAULT_DSN
    )
    auto_migrate_text = _env("AUTO_APPLY_MIGRATIONS") or _base("database.auto_apply_migrations", "true")
    migrations_dir = _env("MIGRATIONS_DIR") or _base("database.migrations_dir", "migrations")

    # Auth gating
    author_text = (
        _env("REQUIRE_LOGIN_TO_AUTHOR")
        or _read_config_file("auth.require_login_to_author")
        or _base("auth.require_login_to_author", "true")
    )
    respond_text = (
        _env("REQUIRE_LOGIN_TO_RESPOND")
        or _read_config_file("auth.require_login_to_respond")
        or _base("auth.require_login_to_respond", "false")
    )

    # CORS / logging
    origins_text = _env("CORS_ALLOW_ORIGINS") or _read_config_file("cors.allow_origins") or _base("cors.allow_origins", "*")
    log_level = _env("LOG_LEVEL") or _base("logging.level", "INFO")

    try:
        cfg = AppConfig(
            database=DatabaseConfig(
                dsn=dsn,
                auto_apply_migrations=_flag(auto_migrate_text),
                migrations_dir=str(migrations_dir),
            ),
            auth=AuthConfig(
                require_login_to_author=_flag(author_text),
                require_login_to_respond=_flag(respond_text),
            ),
            cors=CorsConfig(allow_origins=str(origins_text).split(",")),
            logging=LoggingConfig(level=str(log_level)),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "AuthConfig",
    "CorsConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "load_config",
]
