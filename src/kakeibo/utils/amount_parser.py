"""Amount parsing utilities."""

import re

# Currency symbols and thousands separators found in exported yen amounts
_STRIP_PATTERN = re.compile(r"[¥￥,、]")
_LEADING_INTEGER = re.compile(r"^[+-]?\d+")


def parse_amount(amount_str: str, allow_negative: bool = True) -> int:
    """Parse an amount string into a non-negative integer.

    Handles various formats:
    - "1200"
    - "¥1,200" / "￥1,200"
    - "1、200"
    - "-1200" (sign dropped)
    - "1200.50" (fraction dropped)

    Args:
        amount_str: Amount string
        allow_negative: When False, a negative amount is an error instead of
            having its sign dropped. Manual entry uses this; CSV rows don't.

    Returns:
        Absolute integer amount in the smallest currency unit

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if amount_str is None:
        raise ValueError("Empty amount string")

    cleaned = _STRIP_PATTERN.sub("", amount_str).strip()
    match = _LEADING_INTEGER.match(cleaned)
    if not match:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    value = int(match.group())
    if value < 0 and not allow_negative:
        raise ValueError(f"Amount must not be negative: '{amount_str}'")
    return abs(value)
