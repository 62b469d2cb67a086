"""Payment method and income source commands.

Both are named, manually ordered lists, so one command group factory serves
both.
"""

import click

from kakeibo.cli.error_handling import handle_domain_error
from kakeibo.domain.entities import DeleteResult
from kakeibo.domain.errors import DomainError
from kakeibo.domain.income_source import IncomeSourceService
from kakeibo.domain.payment_method import PaymentMethodService
from kakeibo.domain.reference import MOVE_DOWN, MOVE_UP


def build_reference_group(service_class, entity: str, title: str, usage: str) -> click.Group:
    """Build list/add/rename/delete/move commands for a named reference list.

    Args:
        service_class: Service exposing ``<verb>_<entity>`` methods
        entity: Method suffix, e.g. ``payment_method``
        title: Human readable singular, e.g. ``Payment method``
        usage: What references the entity, e.g. ``expenses``
    """

    def service(ctx):
        return service_class(ctx.obj["db"])

    @click.group(help=f"Manage {title.lower()}s.")
    def group():
        pass

    @group.command("list")
    @click.option("--all", "show_all", is_flag=True, help="Include hidden entries")
    @click.pass_context
    def list_items(ctx, show_all: bool):
        svc = service(ctx)
        items = getattr(svc, f"list_{entity}s")() if show_all else getattr(svc, f"list_active_{entity}s")()
        if not items:
            click.echo(f"No {title.lower()}s found.")
            return
        click.echo(f"\n{title}s:")
        for item in items:
            hidden = "" if item.is_active else " [hidden]"
            click.echo(f"  {item.name}{hidden} (ID: {item.id})")

    list_items.help = f"List {title.lower()}s in display order."

    @group.command("add")
    @click.argument("name")
    @click.pass_context
    def add_item(ctx, name: str):
        try:
            item = getattr(service(ctx), f"add_{entity}")(name)
        except DomainError as e:
            handle_domain_error(ctx, e)
        click.echo(f"Created {title.lower()} '{item.name}' (ID: {item.id})")

    add_item.help = f"Create a {title.lower()}."

    @group.command("rename")
    @click.argument("item_id")
    @click.argument("name")
    @click.pass_context
    def rename_item(ctx, item_id: str, name: str):
        try:
            item = getattr(service(ctx), f"update_{entity}")(item_id, name=name)
        except DomainError as e:
            handle_domain_error(ctx, e)
        click.echo(f"Renamed {title.lower()} {item_id} to '{item.name}'")

    rename_item.help = f"Rename a {title.lower()}."

    @group.command("delete")
    @click.argument("item_id")
    @click.pass_context
    def delete_item(ctx, item_id: str):
        try:
            result = getattr(service(ctx), f"delete_{entity}")(item_id)
        except DomainError as e:
            handle_domain_error(ctx, e)
        if result == DeleteResult.HIDDEN:
            click.echo(f"{title} {item_id} is used by {usage} and was hidden")
        else:
            click.echo(f"Deleted {title.lower()} {item_id}")

    delete_item.help = f"Delete a {title.lower()}; entries used by {usage} are only hidden."

    @group.command("move")
    @click.argument("item_id")
    @click.argument("direction", type=click.Choice([MOVE_UP, MOVE_DOWN]))
    @click.pass_context
    def move_item(ctx, item_id: str, direction: str):
        try:
            moved = getattr(service(ctx), f"move_{entity}")(item_id, direction)
        except DomainError as e:
            handle_domain_error(ctx, e)
        if moved:
            click.echo(f"Moved {title.lower()} {item_id} {direction}")
        else:
            click.echo(f"{title} {item_id} cannot move {direction}")

    move_item.help = f"Move a {title.lower()} one place up or down."

    return group


payment_method_group = build_reference_group(
    PaymentMethodService, "payment_method", "Payment method", "expenses"
)
income_source_group = build_reference_group(
    IncomeSourceService, "income_source", "Income source", "incomes"
)


def register_commands(cli):
    """Register payment method and income source commands with main CLI."""
    cli.add_command(payment_method_group, name="payment-method")
    cli.add_command(income_source_group, name="income-source")
