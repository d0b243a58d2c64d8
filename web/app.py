"""
FastAPI application for the XAX alias API.
"""

import logging
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from version import __version__
from config import Config, load_config, resolve_connection_target
from compaction.engine import ScriptEngine
from models import DatabaseManager, DatabaseService
from web.routes import aliases

# Setup logging (will be reconfigured after loading config)
logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)

# Global configuration and services (initialized on startup)
config = None
db_manager = None
db_service = None

app = FastAPI(
    title="XAX Alias API",
    description="Read-only queries over the XAX database",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)


def get_config_path() -> str:
    """Configuration file path, overridable with XAX_CONFIG."""
    return os.environ.get('XAX_CONFIG', 'config.json')


@app.on_event("startup")
async def startup_event():
    """Load configuration and open the database."""
    global config, db_manager, db_service

    config_path = get_config_path()
    config = load_config(config_path) if Path(config_path).exists() else Config()

    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)
    logging.getLogger().setLevel(log_level)

    connection_string = ScriptEngine(resolve_connection_target(config)).connection_string()
    db_manager = DatabaseManager(connection_string)
    db_service = DatabaseService(db_manager)
    logger.info(f"✓ Database connected: {connection_string}")


@app.on_event("shutdown")
async def shutdown_event():
    """Release the database connection pool."""
    if db_manager:
        db_manager.close()
        logger.info("✓ Database connection closed")


app.include_router(aliases.router)
