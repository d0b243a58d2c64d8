#!/usr/bin/env python3
"""
Startup script for the XAX alias API.
"""

import os
import sys
from pathlib import Path


def check_requirements():
    """Check if required packages are installed."""
    try:
        import fastapi
        import uvicorn
        import sqlalchemy
    except ImportError as e:
        print(f"Missing required package: {e.name}")
        print("Please install with: pip install -e .")
        return False
    return True


def main():
    """Start the alias API server."""
    print("XAX Alias API")
    print("=" * 40)

    if not check_requirements():
        sys.exit(1)

    config_path = os.environ.get('XAX_CONFIG', 'config.json')
    if Path(config_path).exists():
        from config import load_config
        config = load_config(config_path)
        print(f"✓ Configuration loaded from {config_path}")
    else:
        from config import Config
        config = Config()
        print(f"Configuration file {config_path} not found, using defaults")

    host = os.environ.get('XAX_API_HOST', config.api.host)
    port = int(os.environ.get('XAX_API_PORT', config.api.port))

    print(f"Serving aliases at http://{host}:{port}/api/aliases")
    print("Press Ctrl+C to stop")
    print()

    try:
        from web import app
        import uvicorn
        uvicorn.run(app, host=host, port=port, reload=False)
    except KeyboardInterrupt:
        print("\nAlias API stopped by user")


if __name__ == "__main__":
    main()
