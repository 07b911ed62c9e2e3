"""Currency conversion between API major units and stored minor units."""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(amount: float | int | str | Decimal) -> int:
    """
    Convert a major-unit amount (e.g. dollars) into integer minor units (cents).

    Goes through ``Decimal(str(...))`` so 19.99 becomes 1999, not 1998.

    Raises:
        ValueError: If the amount is not numeric
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return int((value * MINOR_UNITS_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_minor_units(amount: int | None) -> str:
    """Render minor units as a major-unit currency string, e.g. 123456 -> '$1,234.56'."""
    if amount is None:
        return "Not set"
    major = Decimal(amount) / MINOR_UNITS_PER_MAJOR
    return f"${major:,.2f}"
