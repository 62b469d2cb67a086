"""CLI helpers for resolving reference data given by ID or name."""

from __future__ import annotations

from typing import Optional

import click

from kakeibo.cli.error_handling import exit_with_error
from kakeibo.domain.category import CategoryService
from kakeibo.domain.entities import Category, IncomeSource, PaymentMethod
from kakeibo.domain.income_source import IncomeSourceService
from kakeibo.domain.payment_method import PaymentMethodService


def find_category(service: CategoryService, value: str) -> Optional[Category]:
    """Find a category by ID, else by label (``major`` or ``major > minor``)."""
    return service.get_category(value) or service.find_by_label(value)


def find_payment_method(service: PaymentMethodService, value: str) -> Optional[PaymentMethod]:
    """Find a payment method by ID, else by name."""
    method = service.get_payment_method(value)
    if method is not None:
        return method
    for method in service.list_payment_methods():
        if method.name == value.strip():
            return method
    return None


def find_income_source(service: IncomeSourceService, value: str) -> Optional[IncomeSource]:
    """Find an income source by ID, else by name."""
    source = service.get_income_source(value)
    if source is not None:
        return source
    for source in service.list_income_sources():
        if source.name == value.strip():
            return source
    return None


def resolve_category_or_exit(ctx: click.Context, service: CategoryService, value: str) -> Category:
    """Resolve a category, or exit with a CLI error."""
    category = find_category(service, value)
    if category is None:
        exit_with_error(ctx, f"Category '{value}' not found")
    return category


def resolve_payment_method_or_exit(
    ctx: click.Context, service: PaymentMethodService, value: str
) -> PaymentMethod:
    """Resolve a payment method, or exit with a CLI error."""
    method = find_payment_method(service, value)
    if method is None:
        exit_with_error(ctx, f"Payment method '{value}' not found")
    return method


def resolve_income_source_or_exit(
    ctx: click.Context, service: IncomeSourceService, value: str
) -> IncomeSource:
    """Resolve an income source, or exit with a CLI error."""
    source = find_income_source(service, value)
    if source is None:
        exit_with_error(ctx, f"Income source '{value}' not found")
    return source
