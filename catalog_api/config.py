import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import yaml
from dotenv import load_dotenv
from sqlalchemy.engine import URL

load_dotenv()

logger = logging.getLogger(__name__)

DB_CONFIG_FILENAME = "db-config.yaml"

DEFAULT_DB_HOST = "localhost"
DEFAULT_DB_USER = "root"
DEFAULT_DB_PASSWORD = ""
DEFAULT_DB_NAME = "mcp_test"
DEFAULT_CONNECTION_LIMIT = 10


@dataclass
class DatabaseConfig:
    host: str = DEFAULT_DB_HOST
    user: str = DEFAULT_DB_USER
    password: str = DEFAULT_DB_PASSWORD
    database: str = DEFAULT_DB_NAME
    connection_limit: int = DEFAULT_CONNECTION_LIMIT

    @property
    def url(self) -> URL:
        return URL.create(
            "mysql+pymysql",
            username=self.user,
            password=self.password,
            host=self.host,
            database=self.database,
        )


@dataclass
class Settings:
    app_name: str = "Catalog API"
    log_level: str = "INFO"
    create_tables: bool = False
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def _flag(raw: Optional[str]) -> bool:
    return str(raw).lower() in {"1", "true", "yes", "on"}


def _or_default(value, default: str) -> str:
    # YAML may hand back ints (e.g. a numeric password)
    return str(value) if value else default


def _connection_limit(env: Mapping[str, str]) -> int:
    raw = env.get("DB_CONNECTION_LIMIT") or str(DEFAULT_CONNECTION_LIMIT)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"DB_CONNECTION_LIMIT must be an integer, got {raw!r}") from None


def _read_secrets_file(env: Mapping[str, str]) -> Optional[dict]:
    """Return the parsed ``db-config.yaml`` under ``DB_SECRETS_PATH``, if there is one."""
    secrets_path = env.get("DB_SECRETS_PATH")
    if not secrets_path:
        return None

    config_file = Path(secrets_path) / DB_CONFIG_FILENAME
    if not config_file.exists():
        logger.info("No %s under %s, using environment", DB_CONFIG_FILENAME, secrets_path)
        return None

    with config_file.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def load_db_config(env: Optional[Mapping[str, str]] = None) -> DatabaseConfig:
    """Resolve connection settings from the secrets file, falling back to env vars.

    The file and the environment are never mixed: when the file exists every
    connection field comes from it (or its default). The connection limit is
    always taken from ``DB_CONNECTION_LIMIT``.
    """
    if env is None:
        env = os.environ

    file_config = _read_secrets_file(env)
    if file_config is not None:
        source = {
            "host": file_config.get("host"),
            "user": file_config.get("user"),
            "password": file_config.get("password"),
            "database": file_config.get("database"),
        }
    else:
        source = {
            "host": env.get("DB_HOST"),
            "user": env.get("DB_USER"),
            "password": env.get("DB_PASSWORD"),
            "database": env.get("DB_NAME"),
        }

    return DatabaseConfig(
        host=_or_default(source["host"], DEFAULT_DB_HOST),
        user=_or_default(source["user"], DEFAULT_DB_USER),
        password=_or_default(source["password"], DEFAULT_DB_PASSWORD),
        database=_or_default(source["database"], DEFAULT_DB_NAME),
        connection_limit=_connection_limit(env),
    )


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    if env is None:
        env = os.environ

    return Settings(
        app_name=env.get("APP_NAME", "Catalog API"),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        create_tables=_flag(env.get("DB_CREATE_TABLES", "false")),
        database=load_db_config(env),
    )
