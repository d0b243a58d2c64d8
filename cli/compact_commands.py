"""Database compaction and recovery commands."""

import logging
import sys

import click

from cli.utils import (
    load_app_config,
    setup_logging,
    handle_error
)
from config import resolve_connection_target
from compaction import (
    CompactionError,
    CompactionPaths,
    LocalStorage,
    RestoreFailed,
    compact_database,
    recover_from_journal,
)

logger = logging.getLogger(__name__)


def register_commands(cli):
    """Register compaction commands with main CLI."""

    @cli.command('compact')
    @click.pass_context
    def compact(ctx):
        """Compact and reorganize the XAX database.

        The database is dumped to backup.sql.gz, the live file is renamed
        to <name>.bak, and a new file is built from the script and
        analyzed. On any failure the original file is put back.

        The XAX node must NOT be running while this command runs.

        Examples:
            python -m main compact

            # Compact the testnet database
            python -m main --config testnet.json compact
        """
        config_path = ctx.obj['config_path']
        verbose = ctx.obj['verbose']

        try:
            config = load_app_config(config_path)
            setup_logging(config, verbose)
            target = resolve_connection_target(config)
        except CompactionError as e:
            logger.error(f"Unable to compact the database: {e}")
            click.echo(f"✗ {e}", err=True)
            sys.exit(1)
        except Exception as e:
            handle_error(e, verbose)

        click.echo("Compacting the database...")
        exit_code = compact_database(target)
        if exit_code == 0:
            click.echo("✓ Database successfully compacted")
        else:
            click.echo(f"✗ Unable to compact the database, see {config.logging.file}", err=True)
        sys.exit(exit_code)

    @cli.command('recover')
    @click.pass_context
    def recover(ctx):
        """Finish or undo a compaction that was interrupted.

        Reads the compact.phase journal left in the database directory by
        a killed compaction and restores a single consistent database
        file. Does nothing if no journal is present.

        Examples:
            python -m main recover
        """
        config_path = ctx.obj['config_path']
        verbose = ctx.obj['verbose']

        try:
            config = load_app_config(config_path)
            setup_logging(config, verbose)
            target = resolve_connection_target(config)
            paths = CompactionPaths.from_url(target.url)
            outcome = recover_from_journal(LocalStorage(), paths)
        except RestoreFailed as e:
            logger.critical(f"{e}. Manual recovery is required.")
            click.echo(f"✗ {e}", err=True)
            click.echo("Manual recovery is required.", err=True)
            sys.exit(1)
        except CompactionError as e:
            logger.error(f"Unable to recover the database: {e}")
            click.echo(f"✗ {e}", err=True)
            sys.exit(1)
        except (ValueError, KeyError, OSError) as e:
            logger.error(f"Unreadable compaction journal: {e}")
            click.echo(f"✗ Unreadable compaction journal: {e}", err=True)
            sys.exit(1)
        except Exception as e:
            handle_error(e, verbose)

        if outcome is None:
            click.echo("No interrupted compaction found")
            return

        click.echo(f"Recovered compaction interrupted in phase {outcome.phase.value}")
        if outcome.restored:
            click.echo("✓ Original database restored")
        for warning in outcome.warnings:
            click.echo(f"⚠ {warning}", err=True)
        if not outcome.clean:
            sys.exit(1)
