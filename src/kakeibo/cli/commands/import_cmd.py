"""CSV import command."""

import click

from kakeibo.cli.error_handling import exit_with_error, handle_domain_error, handle_file_error
from kakeibo.cli.resolution import find_category, resolve_payment_method_or_exit
from kakeibo.domain.category import CategoryService
from kakeibo.domain.csv_import import ImportSession
from kakeibo.domain.errors import DomainError
from kakeibo.domain.payment_method import PaymentMethodService


def _parse_mapping(value: str) -> tuple[str, str]:
    label, sep, category = value.partition("=")
    if not sep or not label.strip() or not category.strip():
        raise click.BadParameter(f"Expected LABEL=CATEGORY, got '{value}'", param_hint="--map")
    return label.strip(), category.strip()


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--map",
    "mappings",
    multiple=True,
    help="Map a CSV category label to a category ID or label (LABEL=CATEGORY); repeatable",
)
@click.option("--create-missing", is_flag=True, help="Create categories for labels left unmapped")
@click.option("--payment-method", help="Payment method for imported rows (default: cash)")
@click.option(
    "--skip-duplicates/--no-skip-duplicates",
    default=True,
    help="Skip rows matching an existing expense (default: skip)",
)
@click.pass_context
def import_csv(
    ctx,
    csv_file: str,
    mappings: tuple[str, ...],
    create_missing: bool,
    payment_method: str | None,
    skip_duplicates: bool,
):
    """Import expenses from a CSV file.

    Columns: date, category, amount, description, rating, memo. Files written
    by 'kakeibo export' are accepted as well. Labels are mapped using, in
    order: --map options, mappings saved by earlier imports, categories whose
    label matches exactly, and (with --create-missing) new categories.

    Examples:
        kakeibo import card.csv --map 食費=食費 --map "外食=食費 > 外食"
        kakeibo import card.csv --create-missing --payment-method クレジットカード
    """
    db = ctx.obj["db"]
    category_service = CategoryService(db)
    session = ImportSession(db)

    try:
        with open(csv_file, encoding="utf-8-sig") as f:
            content = f.read()
    except (UnicodeDecodeError, OSError) as e:
        handle_file_error(ctx, csv_file, e)

    try:
        parsed = session.upload(content)
        click.echo(f"Read {len(parsed.rows)} row(s) with {len(parsed.categories)} category label(s)")

        for value in mappings:
            label, target = _parse_mapping(value)
            category = find_category(category_service, target)
            if category is None:
                raise click.BadParameter(f"Category '{target}' not found", param_hint="--map")
            session.map_category(label, category.id)

        for label in session.unmapped_categories:
            category = category_service.find_by_label(label)
            if category is not None:
                session.map_category(label, category.id)

        if create_missing:
            for label in session.unmapped_categories:
                category = session.create_category(label)
                click.echo(f"Created category '{category.label}'")

        if not session.all_mapped:
            click.echo("Unmapped category labels:", err=True)
            for label in session.unmapped_categories:
                click.echo(f"  {label}", err=True)
            exit_with_error(ctx, "Map them with --map LABEL=CATEGORY or pass --create-missing")

        session.proceed()

        method_id = None
        if payment_method:
            method_id = resolve_payment_method_or_exit(
                ctx, PaymentMethodService(db), payment_method
            ).id
        result = session.confirm(method_id, skip_duplicates=skip_duplicates)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result.imported} expenses")
    click.echo(f"  Skipped: {result.skipped} duplicates")
    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
