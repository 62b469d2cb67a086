"""CSV export command."""

import click

from kakeibo.cli.date_filters import date_range_options, resolve_cli_date_range
from kakeibo.cli.error_handling import handle_file_error
from kakeibo.domain.csv_export import CSVExportService, write_export


@click.command("export")
@date_range_options
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, writable=True),
    default=".",
    show_default=True,
    help="Directory to write kakeibo_<start>_<end>.csv into",
)
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the CSV instead of writing a file")
@click.pass_context
def export_csv(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    output_dir: str,
    to_stdout: bool,
):
    """Export expenses of a period (default: this month) as CSV."""
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )
    export = CSVExportService(ctx.obj["db"]).export_period(start, end)

    if to_stdout:
        click.echo(export.content)
        return

    try:
        path = write_export(export, output_dir)
    except OSError as e:
        handle_file_error(ctx, output_dir, e)
    click.echo(f"Exported {start} .. {end} to {path}")


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_csv)
