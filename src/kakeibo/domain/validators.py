"""Field validation shared by the domain services.

Every check runs before the storage write it guards and raises
``ValidationError``.
"""

from typing import Any, Iterable, Optional

from kakeibo.domain.entities import RATINGS
from kakeibo.domain.errors import (
    ValidationError,
    invalid_date,
    invalid_rating,
    negative_amount,
    required_field,
    unknown_field,
)
from kakeibo.utils.date_parser import validate_iso_date


def require_text(field: str, value: Optional[str]) -> str:
    """Return the stripped value, rejecting empty input."""
    if value is None or not str(value).strip():
        raise ValidationError(required_field(field))
    return str(value).strip()


def require_amount(amount: Any) -> int:
    """Return amount as int, rejecting negatives and non-integers."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError(f"Amount must be an integer, got {amount!r}")
    if amount < 0:
        raise ValidationError(negative_amount(amount))
    return amount


def require_date(value: str) -> str:
    """Return value if it is a ``YYYY-MM-DD`` calendar day."""
    try:
        return validate_iso_date(value)
    except ValueError:
        raise ValidationError(invalid_date(value))


def check_rating(value: Optional[str]) -> Optional[str]:
    """Return the rating, allowing None; empty strings mean no rating."""
    if value is None or value == "":
        return None
    if value not in RATINGS:
        raise ValidationError(invalid_rating(value))
    return value


def check_fields(entity: str, fields: dict[str, Any], allowed: Iterable[str]) -> None:
    """Reject update fields the entity does not allow."""
    allowed = set(allowed)
    for field in fields:
        if field not in allowed:
            raise ValidationError(unknown_field(entity, field))
