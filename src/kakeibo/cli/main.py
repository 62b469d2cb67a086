"""Main CLI entry point."""

import logging

import click
from sqlalchemy.exc import SQLAlchemyError

from kakeibo.database.factories import create_sqlite_database
from kakeibo.domain.posting import FixedCostPostingService
from kakeibo.logging_config import setup_logging

# Import and register all commands at module level
from kakeibo.cli.commands import (
    category,
    expense,
    export,
    fixed_cost,
    import_cmd,
    income,
    migrate,
    reference,
    summary,
)

logger = logging.getLogger(__name__)


def auto_post_fixed_costs(db) -> None:
    """Post this month's fixed costs; failures are logged, never raised."""
    try:
        result = FixedCostPostingService(db).auto_post_current_month()
    except (ValueError, SQLAlchemyError):
        logger.exception("Automatic fixed cost posting failed")
        return
    if result.posted:
        logger.info("Automatically posted %d fixed cost(s)", result.posted)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides KAKEIBO_DB_PATH environment variable)",
    envvar="KAKEIBO_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Kakeibo - household account book.

    Record daily expenses and incomes, post monthly fixed costs
    automatically, and import or export expenses as CSV.
    """
    ctx.ensure_object(dict)
    setup_logging(logging.DEBUG if verbose else None)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)

        if ctx.invoked_subcommand != "migrate":
            db.initialize_schema()
            auto_post_fixed_costs(db)


# Register all commands
expense.register_commands(cli)
income.register_commands(cli)
category.register_commands(cli)
reference.register_commands(cli)
fixed_cost.register_commands(cli)
import_cmd.register_commands(cli)
export.register_commands(cli)
summary.register_commands(cli)
migrate.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
