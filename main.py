#!/usr/bin/env python3
"""XAX Database Tools - command line entry point.

Examples:
    # Get help
    python -m main --help

    # Compact the database (the XAX node must be stopped)
    python -m main compact

    # Restore a consistent database after a killed compaction
    python -m main recover

    # Query aliases
    python -m main aliases list --account 1234567890
"""

from cli.main import cli

if __name__ == '__main__':
    cli()
