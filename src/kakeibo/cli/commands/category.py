"""Category management commands."""

import click

from kakeibo.cli.error_handling import exit_with_error, handle_domain_error
from kakeibo.domain.category import CategoryService
from kakeibo.domain.entities import DeleteResult
from kakeibo.domain.errors import DomainError
from kakeibo.domain.reference import MOVE_DOWN, MOVE_UP


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include hidden categories")
@click.pass_context
def list_categories(ctx, show_all: bool):
    """List categories in display order."""
    service = CategoryService(ctx.obj["db"])
    categories = service.list_categories() if show_all else service.list_active_categories()
    if not categories:
        click.echo("No categories found.")
        return

    click.echo("\nCategories:")
    for category in categories:
        hidden = "" if category.is_active else " [hidden]"
        click.echo(f"  {category.label}{hidden} (ID: {category.id})")


@category_group.command("add")
@click.argument("major_name")
@click.argument("minor_name", required=False)
@click.pass_context
def add_category(ctx, major_name: str, minor_name: str | None):
    """Create a category, optionally with a minor name."""
    service = CategoryService(ctx.obj["db"])
    try:
        category = service.add_category(major_name, minor_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{category.label}' (ID: {category.id})")


@category_group.command("update")
@click.argument("category_id")
@click.option("--major", "major_name", help="New major name")
@click.option("--minor", "minor_name", help="New minor name (empty string to clear)")
@click.option("--active/--hidden", "is_active", default=None, help="Show or hide the category")
@click.pass_context
def update_category(
    ctx, category_id: str, major_name: str | None, minor_name: str | None, is_active: bool | None
):
    """Update a category."""
    service = CategoryService(ctx.obj["db"])
    fields = {}
    if major_name is not None:
        fields["major_name"] = major_name
    if minor_name is not None:
        fields["minor_name"] = minor_name
    if is_active is not None:
        fields["is_active"] = is_active
    if not fields:
        exit_with_error(ctx, "Nothing to update")

    try:
        category = service.update_category(category_id, **fields)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated category '{category.label}'")


@category_group.command("delete")
@click.argument("category_id")
@click.pass_context
def delete_category(ctx, category_id: str):
    """Delete a category; categories used by expenses are only hidden."""
    service = CategoryService(ctx.obj["db"])
    try:
        result = service.delete_category(category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if result == DeleteResult.HIDDEN:
        click.echo(f"Category {category_id} is used by expenses and was hidden")
    else:
        click.echo(f"Deleted category {category_id}")


@category_group.command("move")
@click.argument("category_id")
@click.argument("direction", type=click.Choice([MOVE_UP, MOVE_DOWN]))
@click.pass_context
def move_category(ctx, category_id: str, direction: str):
    """Move a category one place up or down."""
    service = CategoryService(ctx.obj["db"])
    try:
        moved = service.move_category(category_id, direction)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if moved:
        click.echo(f"Moved category {category_id} {direction}")
    else:
        click.echo(f"Category {category_id} cannot move {direction}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
