"""Shared utilities for CLI commands."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import click

from config import load_config, resolve_connection_target, Config
from compaction.engine import ScriptEngine
from models import DatabaseManager, DatabaseService


def load_app_config(config_path: str) -> Config:
    """Load application configuration.

    A missing configuration file yields the defaults so the tools can run
    against the standard database location without any setup.

    Args:
        config_path: Path to configuration file

    Returns:
        Config instance
    """
    if not Path(config_path).exists():
        return Config()
    return load_config(config_path)


def get_db_service(config: Config) -> DatabaseService:
    """Get a database service on the active database.

    Args:
        config: Application configuration

    Returns:
        DatabaseService instance
    """
    target = resolve_connection_target(config)
    db_manager = DatabaseManager(ScriptEngine(target).connection_string())
    return DatabaseService(db_manager)


def setup_logging(config: Config, verbose: bool = False):
    """Set up file logging, with console logging only when verbose.

    Args:
        config: Application configuration
        verbose: Whether to show console logging
    """
    log_file = Path(config.logging.file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.handlers = []

    file_handler = RotatingFileHandler(
        config.logging.file,
        maxBytes=config.logging.max_bytes,
        backupCount=config.logging.backup_count
    )
    file_handler.setLevel(getattr(logging, config.logging.level.upper(), logging.INFO))
    file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)

    if verbose:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_formatter = logging.Formatter('LOG: %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    root_logger.setLevel(logging.DEBUG)

    # Quiet all libraries
    logging.getLogger('sqlalchemy').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)


def handle_error(error: Exception, verbose: bool = False):
    """Handle and display errors consistently.

    Args:
        error: Exception to handle
        verbose: Whether to show full traceback
    """
    click.echo(f"Error: {error}", err=True)
    if verbose:
        import traceback
        click.echo(traceback.format_exc(), err=True)
    sys.exit(1)
