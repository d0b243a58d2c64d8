"""Alias query commands."""

import json

import click
from tabulate import tabulate

from models import parse_id
from cli.utils import (
    load_app_config,
    setup_logging,
    handle_error,
    get_db_service
)


def register_commands(cli):
    """Register alias commands with main CLI."""

    @cli.group('aliases')
    @click.pass_context
    def aliases_group(ctx):
        """Query alias records."""
        pass

    @aliases_group.command('list')
    @click.option('--account', '-a', required=True, help='Owner account id')
    @click.option('--timestamp', '-t', type=int, default=0,
                  help='Only aliases with this timestamp or later')
    @click.option('--first-index', type=int, default=0, help='Zero-based first result')
    @click.option('--last-index', type=int, default=None, help='Inclusive last result')
    @click.option('--json', 'as_json', is_flag=True, help='Print the API JSON response')
    @click.pass_context
    def list_aliases(ctx, account, timestamp, first_index, last_index, as_json):
        """List the aliases owned by an account.

        Examples:
            # All aliases of an account
            python -m main aliases list --account 1234567890

            # Second page of ten, changed since a timestamp
            python -m main aliases list -a 1234567890 -t 86400 --first-index 10 --last-index 19
        """
        config_path = ctx.obj['config_path']
        verbose = ctx.obj['verbose']

        try:
            config = load_app_config(config_path)
            setup_logging(config, verbose)
            account_id = parse_id(account)
            db_service = get_db_service(config)

            try:
                aliases = db_service.get_aliases(account_id, timestamp, first_index, last_index)
                total = db_service.count_aliases(account_id)
            finally:
                db_service.db_manager.close()

            if as_json:
                click.echo(json.dumps({'aliases': aliases}, indent=2))
                return

            if not aliases:
                click.echo(f"No aliases found for account {account}")
                return

            rows = [
                [a['aliasName'], a['aliasURI'], a['timestamp'], a['alias']]
                for a in aliases
            ]
            click.echo(tabulate(rows, headers=['Name', 'URI', 'Timestamp', 'Id']))
            click.echo(f"\nShowing {len(aliases)} of {total} aliases")

        except Exception as e:
            handle_error(e, verbose)
