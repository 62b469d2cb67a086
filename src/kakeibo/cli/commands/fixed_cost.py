"""Fixed cost commands."""

import click

from kakeibo.cli.error_handling import handle_domain_error
from kakeibo.cli.formatting import format_amount
from kakeibo.cli.resolution import resolve_category_or_exit, resolve_payment_method_or_exit
from kakeibo.domain.category import CategoryService
from kakeibo.domain.entities import DeleteResult
from kakeibo.domain.errors import DomainError
from kakeibo.domain.fixed_cost import FixedCostService
from kakeibo.domain.payment_method import PaymentMethodService
from kakeibo.domain.posting import FixedCostPostingService
from kakeibo.utils.amount_parser import parse_amount
from kakeibo.utils.date_parser import current_year_month

month_option = click.option("--month", help="Month as YYYY-MM (default: current month)")


@click.group()
def fixed_cost_group():
    """Manage monthly fixed costs."""
    pass


@fixed_cost_group.command("list")
@click.pass_context
def list_fixed_costs(ctx):
    """List fixed costs."""
    db = ctx.obj["db"]
    fixed_costs = FixedCostService(db).list_fixed_costs()
    if not fixed_costs:
        click.echo("No fixed costs found.")
        return

    labels = {c.id: c.label for c in CategoryService(db).list_categories()}
    names = {m.id: m.name for m in PaymentMethodService(db).list_payment_methods()}
    click.echo("\nFixed costs:")
    for fc in fixed_costs:
        inactive = "" if fc.is_active else " [inactive]"
        click.echo(
            f"  {fc.name}  {format_amount(fc.amount)}  {labels.get(fc.category_id, 'Unknown')}  "
            f"{names.get(fc.payment_method_id, 'Unknown')}{inactive} (ID: {fc.id})"
        )


@fixed_cost_group.command("add")
@click.argument("name")
@click.option("--category", required=True, help="Category ID or label")
@click.option("--payment-method", required=True, help="Payment method ID or name")
@click.option("--amount", required=True, help="Monthly amount")
@click.option("--inactive", is_flag=True, help="Create without posting it monthly")
@click.pass_context
def add_fixed_cost(ctx, name: str, category: str, payment_method: str, amount: str, inactive: bool):
    """Create a fixed cost.

    A fixed cost added after this month's posting first appears next month.

    Examples:
        kakeibo fixed-cost add 家賃 --category "住居 > 家賃" --payment-method 振込 --amount 80000
    """
    db = ctx.obj["db"]
    category_obj = resolve_category_or_exit(ctx, CategoryService(db), category)
    method = resolve_payment_method_or_exit(ctx, PaymentMethodService(db), payment_method)

    try:
        fixed_cost = FixedCostService(db).add_fixed_cost(
            name=name,
            category_id=category_obj.id,
            payment_method_id=method.id,
            amount=parse_amount(amount, allow_negative=False),
            is_active=not inactive,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created fixed cost '{fixed_cost.name}' (ID: {fixed_cost.id})")


@fixed_cost_group.command("update")
@click.argument("fixed_cost_id")
@click.option("--name", help="New name")
@click.option("--category", help="Category ID or label")
@click.option("--payment-method", help="Payment method ID or name")
@click.option("--amount", help="Monthly amount")
@click.option("--active/--inactive", "is_active", default=None, help="Enable or disable monthly posting")
@click.pass_context
def update_fixed_cost(
    ctx,
    fixed_cost_id: str,
    name: str | None,
    category: str | None,
    payment_method: str | None,
    amount: str | None,
    is_active: bool | None,
):
    """Update a fixed cost. Already posted expenses are not changed."""
    db = ctx.obj["db"]
    fields = {}
    if name is not None:
        fields["name"] = name
    if category is not None:
        fields["category_id"] = resolve_category_or_exit(ctx, CategoryService(db), category).id
    if payment_method is not None:
        fields["payment_method_id"] = resolve_payment_method_or_exit(
            ctx, PaymentMethodService(db), payment_method
        ).id
    if is_active is not None:
        fields["is_active"] = is_active

    try:
        if amount is not None:
            fields["amount"] = parse_amount(amount, allow_negative=False)
        if not fields:
            raise ValueError("Nothing to update")
        FixedCostService(db).update_fixed_cost(fixed_cost_id, **fields)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated fixed cost {fixed_cost_id}")


@fixed_cost_group.command("delete")
@click.argument("fixed_cost_id")
@click.pass_context
def delete_fixed_cost(ctx, fixed_cost_id: str):
    """Delete a fixed cost; fixed costs with posted expenses are deactivated."""
    try:
        result = FixedCostService(ctx.obj["db"]).delete_fixed_cost(fixed_cost_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if result == DeleteResult.HIDDEN:
        click.echo(f"Fixed cost {fixed_cost_id} has posted expenses and was deactivated")
    else:
        click.echo(f"Deleted fixed cost {fixed_cost_id}")


@fixed_cost_group.command("post")
@month_option
@click.pass_context
def post_fixed_costs(ctx, month: str | None):
    """Post active fixed costs for a month (at most once per month)."""
    month = month or current_year_month()
    try:
        posted = FixedCostPostingService(ctx.obj["db"]).post_for_month(month)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if posted:
        click.echo(f"Posted {posted} fixed cost(s) for {month}")
    else:
        click.echo(f"Nothing posted for {month}")


@fixed_cost_group.command("status")
@month_option
@click.pass_context
def posting_status(ctx, month: str | None):
    """Show whether fixed costs were posted for a month."""
    month = month or current_year_month()
    try:
        posted = FixedCostPostingService(ctx.obj["db"]).has_posted_for_month(month)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if posted:
        click.echo(f"Fixed costs for {month}: posted")
    else:
        click.echo(f"Fixed costs for {month}: not posted")


def register_commands(cli):
    """Register fixed cost commands with main CLI."""
    cli.add_command(fixed_cost_group, name="fixed-cost")
