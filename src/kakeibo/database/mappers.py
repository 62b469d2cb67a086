"""Mapper functions to convert SQLAlchemy models to domain entities.

This layer isolates the conversion logic, so schema changes (such as the
version 2 fixed-cost columns) stay out of the domain services.
"""

from typing import Any, Callable

from kakeibo.domain import entities as domain
from kakeibo.domain.entities import Table
from kakeibo.database.models import (
    Base,
    Expense as ORMExpense,
    Income as ORMIncome,
    Category as ORMCategory,
    PaymentMethod as ORMPaymentMethod,
    IncomeSource as ORMIncomeSource,
    FixedCost as ORMFixedCost,
    CategoryMapping as ORMCategoryMapping,
)


def expense_to_domain(orm_expense: ORMExpense) -> domain.Expense:
    """Convert SQLAlchemy Expense model to domain Expense entity."""
    return domain.Expense(
        id=orm_expense.id,
        date=orm_expense.date,
        category_id=orm_expense.category_id,
        payment_method_id=orm_expense.payment_method_id,
        amount=orm_expense.amount,
        description=orm_expense.description or "",
        rating=orm_expense.rating,
        memo=orm_expense.memo or "",
        deleted=bool(orm_expense.deleted),
        is_fixed=bool(orm_expense.is_fixed),
        fixed_cost_id=orm_expense.fixed_cost_id,
        created_at=orm_expense.created_at,
        updated_at=orm_expense.updated_at,
    )


def income_to_domain(orm_income: ORMIncome) -> domain.Income:
    """Convert SQLAlchemy Income model to domain Income entity."""
    return domain.Income(
        id=orm_income.id,
        date=orm_income.date,
        source_id=orm_income.source_id,
        amount=orm_income.amount,
        memo=orm_income.memo or "",
        deleted=bool(orm_income.deleted),
        created_at=orm_income.created_at,
        updated_at=orm_income.updated_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        major_name=orm_category.major_name,
        minor_name=orm_category.minor_name,
        sort_order=orm_category.sort_order,
        is_active=bool(orm_category.is_active),
        created_at=orm_category.created_at,
        updated_at=orm_category.updated_at,
    )


def payment_method_to_domain(orm_method: ORMPaymentMethod) -> domain.PaymentMethod:
    """Convert SQLAlchemy PaymentMethod model to domain PaymentMethod entity."""
    return domain.PaymentMethod(
        id=orm_method.id,
        name=orm_method.name,
        sort_order=orm_method.sort_order,
        is_active=bool(orm_method.is_active),
        created_at=orm_method.created_at,
        updated_at=orm_method.updated_at,
    )


def income_source_to_domain(orm_source: ORMIncomeSource) -> domain.IncomeSource:
    """Convert SQLAlchemy IncomeSource model to domain IncomeSource entity."""
    return domain.IncomeSource(
        id=orm_source.id,
        name=orm_source.name,
        sort_order=orm_source.sort_order,
        is_active=bool(orm_source.is_active),
        created_at=orm_source.created_at,
        updated_at=orm_source.updated_at,
    )


def fixed_cost_to_domain(orm_fixed_cost: ORMFixedCost) -> domain.FixedCost:
    """Convert SQLAlchemy FixedCost model to domain FixedCost entity."""
    return domain.FixedCost(
        id=orm_fixed_cost.id,
        name=orm_fixed_cost.name,
        category_id=orm_fixed_cost.category_id,
        payment_method_id=orm_fixed_cost.payment_method_id,
        amount=orm_fixed_cost.amount,
        is_active=bool(orm_fixed_cost.is_active),
        created_at=orm_fixed_cost.created_at,
        updated_at=orm_fixed_cost.updated_at,
    )


def category_mapping_to_domain(orm_mapping: ORMCategoryMapping) -> domain.CategoryMapping:
    """Convert SQLAlchemy CategoryMapping model to domain CategoryMapping entity."""
    return domain.CategoryMapping(
        id=orm_mapping.id,
        csv_category=orm_mapping.csv_category,
        category_id=orm_mapping.category_id,
        created_at=orm_mapping.created_at,
        updated_at=orm_mapping.updated_at,
    )


# Table -> (ORM model, mapper)
TABLE_MAPPERS: dict[Table, tuple[type[Base], Callable[[Any], Any]]] = {
    Table.EXPENSES: (ORMExpense, expense_to_domain),
    Table.INCOMES: (ORMIncome, income_to_domain),
    Table.CATEGORIES: (ORMCategory, category_to_domain),
    Table.PAYMENT_METHODS: (ORMPaymentMethod, payment_method_to_domain),
    Table.INCOME_SOURCES: (ORMIncomeSource, income_source_to_domain),
    Table.FIXED_COSTS: (ORMFixedCost, fixed_cost_to_domain),
    Table.CATEGORY_MAPPINGS: (ORMCategoryMapping, category_mapping_to_domain),
}
