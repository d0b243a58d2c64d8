"""Main CLI entry point - Root command group with global options."""

import click

from version import __version__


@click.group()
@click.option('--config', '-c', default='config.json', help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Show detailed logging on console')
@click.version_option(version=__version__, prog_name='XAX Database Tools')
@click.pass_context
def cli(ctx, config, verbose):
    """XAX Database Tools - maintenance for the embedded XAX database.

    Commands:
        compact, recover, config, aliases

    The XAX node must be stopped before running compact or recover.

    Examples:
        # Create a default configuration
        python -m main config init

        # Rebuild the database to reclaim space
        python -m main compact

        # List an account's aliases
        python -m main aliases list --account 1234567890
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose


def register_all_commands():
    """Register all command modules with the main CLI."""
    from cli import (
        config_commands,
        compact_commands,
        alias_commands,
    )

    config_commands.register_commands(cli)
    compact_commands.register_commands(cli)
    alias_commands.register_commands(cli)


# Register all commands when module is imported
register_all_commands()
