"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ImportStateError(DomainError):
    """CSV import step invoked out of order."""


def record_not_found(table: str, record_id: str) -> str:
    """Return message for a missing row."""
    return f"{table} record '{record_id}' not found"


def required_field(field: str) -> str:
    """Return message for an empty required field."""
    return f"{field} is required"


def negative_amount(amount: int) -> str:
    """Return message for an amount below zero."""
    return f"Amount must be zero or greater, got {amount}"


def invalid_date(value: str) -> str:
    """Return message for a date not in YYYY-MM-DD form."""
    return f"Invalid date '{value}': expected YYYY-MM-DD"


def invalid_year_month(value: str) -> str:
    """Return message for a month not in YYYY-MM form."""
    return f"Invalid month '{value}': expected YYYY-MM"


def invalid_rating(value: str) -> str:
    """Return message for an unsupported rating symbol."""
    return f"Invalid rating '{value}': expected one of ○, △, ✖"


def immutable_field(field: str) -> str:
    """Return message for an attempt to change id or created_at."""
    return f"Field '{field}' cannot be changed"


def unknown_field(table: str, field: str) -> str:
    """Return message for a field the table does not have."""
    return f"Unknown field '{field}' for {table}"


def missing_category_mapping(label: str) -> str:
    """Return message for a CSV row whose label has no mapping."""
    return f"No category mapping for '{label}'"


def import_step_mismatch(expected: str, actual: str) -> str:
    """Return message for an import call made in the wrong step."""
    return f"Import is in step '{actual}', expected '{expected}'"
