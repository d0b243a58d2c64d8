"""Configuration management commands."""

import sys
from pathlib import Path

import click

from config import create_default_config, resolve_connection_target
from cli.utils import (
    load_app_config,
    setup_logging,
    handle_error
)
from compaction import CompactionPaths, LocalStorage, ScriptEngine


def register_commands(cli):
    """Register config commands with main CLI."""

    @cli.group('config')
    @click.pass_context
    def config_group(ctx):
        """Configuration management commands.

        Initialize, inspect, and test the database configuration.
        """
        pass

    @config_group.command('init')
    @click.pass_context
    def init_config(ctx):
        """Create a default configuration file.

        Examples:
            # Create default config.json
            python -m main config init

            # Create config at custom location
            python -m main --config testnet.json config init
        """
        config_path = ctx.obj['config_path']

        if Path(config_path).exists():
            click.echo(f"Configuration file already exists: {config_path}")
            if not click.confirm("Overwrite existing configuration?"):
                return

        create_default_config(config_path)
        click.echo(f"✓ Created configuration file: {config_path}")
        click.echo("\nNext steps:")
        click.echo("  1. Set database.db_dir (or database.url) to your XAX database")
        click.echo("  2. Test the configuration with: python -m main config test-db")

    @config_group.command('show')
    @click.pass_context
    def show_config(ctx):
        """Display the resolved database settings.

        Examples:
            python -m main config show
        """
        config_path = ctx.obj['config_path']
        verbose = ctx.obj['verbose']

        try:
            config = load_app_config(config_path)
            target = resolve_connection_target(config)
            paths = CompactionPaths.from_url(target.url)

            click.echo(f"Configuration file: {config_path}")
            click.echo(f"Network: {'testnet' if config.testnet else 'mainnet'}")
            click.echo("\nDatabase:")
            click.echo(f"  URL:       {target.url}")
            click.echo(f"  User:      {target.username}")
            click.echo(f"  Directory: {paths.directory}")
            live_file = paths.find_live_file(LocalStorage())
            click.echo(f"  File:      {live_file or 'not found'}")

            click.echo("\nLogging:")
            click.echo(f"  File:  {config.logging.file}")
            click.echo(f"  Level: {config.logging.level}")

            click.echo("\nAPI:")
            click.echo(f"  Bind:        {config.api.host}:{config.api.port}")
            click.echo(f"  Max records: {config.api.max_api_records}")

        except Exception as e:
            handle_error(e, verbose)

    @config_group.command('test-db')
    @click.pass_context
    def test_db(ctx):
        """Test that the configured database can be opened.

        Examples:
            python -m main config test-db
        """
        config_path = ctx.obj['config_path']
        verbose = ctx.obj['verbose']

        try:
            config = load_app_config(config_path)
            setup_logging(config, verbose)
            engine = ScriptEngine(resolve_connection_target(config))

            click.echo(f"Testing database {engine.database_file()}...")
            with engine.session() as conn:
                conn.execute("SELECT 1").fetchone()

            click.echo("✓ Database connection successful!")

        except Exception as e:
            click.echo(f"✗ Database test failed: {e}", err=True)
            if verbose:
                import traceback
                click.echo(traceback.format_exc(), err=True)
            sys.exit(1)
