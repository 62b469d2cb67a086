"""Schema migration command."""

import click

from kakeibo.database.migrations import SCHEMA_VERSION


@click.command("migrate")
@click.pass_context
def migrate(ctx):
    """Create or upgrade the database schema.

    Other commands migrate automatically; this reports what was done.
    """
    db = ctx.obj["db"]
    previous = db.initialize_schema()

    if previous is None:
        click.echo(f"Created schema version {SCHEMA_VERSION}")
    elif previous < SCHEMA_VERSION:
        click.echo(f"Upgraded schema from version {previous} to {SCHEMA_VERSION}")
    else:
        click.echo(f"Schema is up to date (version {SCHEMA_VERSION})")


def register_commands(cli):
    """Register migrate command with main CLI."""
    cli.add_command(migrate)
