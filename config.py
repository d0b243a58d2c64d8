"""Configuration management for the XAX database tools."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from compaction.engine import MV_STORE_FLAG, SUPPORTED_ENGINE_TYPE, ConnectionTarget
from compaction.errors import UnsupportedEngineType
from compaction.paths import DATABASE_NAME


class DatabaseConfig(BaseModel):
    """Database connection configuration."""
    type: str = SUPPORTED_ENGINE_TYPE
    url: Optional[str] = None
    db_dir: str = Field("~/xax/xax_db", validate_default=True)
    params: str = ""
    username: str = "sa"
    password: str = "sa"
    mv_store: bool = False  # only applied when the URL has no MV_STORE= setting

    @field_validator('db_dir', mode='before')
    @classmethod
    def expand_path(cls, v):
        """Expand environment variables and user home directory."""
        return os.path.expanduser(os.path.expandvars(v))


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    file: str = "xax_compact.log"
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


class ApiConfig(BaseModel):
    """Alias API server configuration."""
    host: str = "127.0.0.1"
    port: int = 7876
    max_api_records: int = 100


class Config(BaseModel):
    """Main configuration model."""
    testnet: bool = False
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    test_database: DatabaseConfig = Field(
        default_factory=lambda: DatabaseConfig(db_dir="~/xax/xax_test_db")
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @property
    def active_database(self) -> DatabaseConfig:
        return self.test_database if self.testnet else self.database


def load_config(config_path: str = "config.json") -> Config:
    """Load configuration from a JSON file."""
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, 'r') as f:
        config_data = json.load(f)

    return Config(**config_data)


def create_default_config(config_path: str = "config.json") -> None:
    """Create a default configuration file."""
    default_config = {
        "testnet": False,
        "database": {
            "type": "sqlite",
            "url": None,
            "db_dir": "~/xax/xax_db",
            "params": "",
            "username": "sa",
            "password": "sa",
            "mv_store": False
        },
        "test_database": {
            "type": "sqlite",
            "url": None,
            "db_dir": "~/xax/xax_test_db",
            "params": "",
            "username": "sa",
            "password": "sa",
            "mv_store": False
        },
        "logging": {
            "level": "INFO",
            "file": "xax_compact.log",
            "max_bytes": 10485760,
            "backup_count": 5
        },
        "api": {
            "host": "127.0.0.1",
            "port": 7876,
            "max_api_records": 100
        }
    }

    with open(config_path, 'w') as f:
        json.dump(default_config, f, indent=2)


def resolve_connection_target(config: Config) -> ConnectionTarget:
    """Build the connection target for the active database.

    The URL is taken from the configuration or built from ``db_dir``,
    the extra ``params`` are appended, and the ``MV_STORE`` flag is added
    from ``mv_store`` unless the URL already sets it.

    Raises:
        UnsupportedEngineType: If the database type is not the embedded engine
    """
    db = config.active_database
    if db.type != SUPPORTED_ENGINE_TYPE:
        raise UnsupportedEngineType(f"Database type must be '{SUPPORTED_ENGINE_TYPE}'")

    url = db.url
    if not url:
        db_path = Path(db.db_dir) / DATABASE_NAME
        url = f"xax:{db.type}:{db_path.as_posix()}"
    if db.params:
        url += f";{db.params}"
    if f"{MV_STORE_FLAG}=" not in url.upper():
        url += f";{MV_STORE_FLAG}={'TRUE' if db.mv_store else 'FALSE'}"

    return ConnectionTarget(url=url, username=db.username, password=db.password)
