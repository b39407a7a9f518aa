"""
Lenient numeric parsing for values stored as free text.

Crop field sizes ("2.5 acres") and sale quantities ("10 kg") are stored the
way the farmer typed them. Only the leading numeric token is read. Anything
that does not start with a number parses to zero, so a malformed value
understates totals instead of rejecting the record.
"""

import math
import re
from decimal import Decimal, InvalidOperation

LEADING_NUMBER_RE = re.compile(
    r'^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)'
)


def _leading_token(value):
    """Return the leading numeric token of ``value`` as a string, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    match = LEADING_NUMBER_RE.match(str(value))
    return match.group(1) if match else None


def parse_number(value) -> float:
    """
    Parse the leading number out of a text value.

    >>> parse_number('10 kg')
    10.0
    >>> parse_number('about 3 acres')
    0.0
    """
    token = _leading_token(value)
    if token is None:
        return 0.0
    try:
        result = float(token)
    except ValueError:
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def parse_decimal(value) -> Decimal:
    """Decimal counterpart of :func:`parse_number`, used for money arithmetic."""
    token = _leading_token(value)
    if token is None:
        return Decimal('0')
    try:
        result = Decimal(token)
    except InvalidOperation:
        return Decimal('0')
    if not result.is_finite():
        return Decimal('0')
    return result
