"""CLI error reporting.

Every command failure is printed as ``Error: <message>`` on stderr and ends
the command with exit code 1.
"""

import logging

import click

from kakeibo.domain.errors import DomainError

logger = logging.getLogger(__name__)


def exit_with_error(ctx: click.Context, message: str) -> None:
    """Print an error message and exit with failure."""
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    logger.debug("%s failed", ctx.command_path, exc_info=error)
    exit_with_error(ctx, str(error))


def handle_file_error(ctx: click.Context, path: str, error: OSError | UnicodeDecodeError) -> None:
    """Render a file that could not be read or written and exit with failure."""
    logger.debug("%s failed on %s", ctx.command_path, path, exc_info=error)
    if isinstance(error, UnicodeDecodeError):
        exit_with_error(
            ctx,
            f"Could not read '{path}': not UTF-8 text "
            f"(invalid byte at position {error.start}). Re-save the file as UTF-8.",
        )
    exit_with_error(ctx, f"Could not access '{path}': {error.strerror or error}")
