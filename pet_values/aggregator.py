"""
Value coercion and the median aggregation policy.

The median is the only merge policy: no weighting, no outlier rejection.
Even-length medians are rounded half-up to a whole number.
"""

import math
import re
from numbers import Real
from typing import Any, Iterable, List, Union

Number = Union[int, float]

# ASCII digits only; "12.", ".5" and "12.5" are all accepted
_NUMERAL = re.compile(r"^(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)$")

# Largest range where every integer survives a round trip through float
_EXACT_INT_LIMIT = 2 ** 53


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def to_number(raw: Any) -> Number:
    """
    Coerce a raw value to a non-negative number.

    Accepts ints, floats and numeral strings with optional comma grouping
    ("12,345"). Anything missing, malformed, negative or non-finite becomes 0,
    including numerals too large to represent as a float. Whole values come
    back as int while they are exact.
    """
    if _is_finite_number(raw):
        return raw if raw >= 0 else 0

    if not isinstance(raw, str):
        return 0

    text = raw.strip().replace(",", "")
    if not _NUMERAL.match(text):
        return 0

    number = float(text)
    if not math.isfinite(number):
        return 0
    if number.is_integer() and number < _EXACT_INT_LIMIT:
        return int(number)
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up."""
    return int(math.floor(value + 0.5))


def median(values: Iterable[Any]) -> Number:
    """
    Median of the finite numbers in values.

    Returns 0 when there is nothing to aggregate. For an even count the
    two middle elements are averaged and rounded half-up.
    """
    numbers: List[Number] = sorted(v for v in values if _is_finite_number(v))
    if not numbers:
        return 0

    mid = len(numbers) // 2
    if len(numbers) % 2:
        return numbers[mid]
    return round_half_up((numbers[mid - 1] + numbers[mid]) / 2)
