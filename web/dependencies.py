"""
FastAPI dependencies for the XAX alias API.
"""

import sys


def get_config():
    """Dependency to get configuration."""
    app_module = sys.modules['web.app']
    return app_module.config


def get_db_service():
    """Dependency to get database service."""
    app_module = sys.modules['web.app']
    return app_module.db_service
