"""
Integer operand parsing and field range checks.

Register tokens are handled in registers.py; this module covers the
unsigned integer literals (constants, offsets, addresses) and the range
check shared by every bit field.
"""

import re

from .errors import MalformedRow, OperandOutOfRange

_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")


def check_operand_range(value: int, width: int, name: str = "operand") -> None:
    """
    Check that a value fits in an unsigned field of the given width.

    Args:
        value: The value to check
        width: Number of bits available
        name: Field name for error messages

    Raises:
        OperandOutOfRange: If value is negative or needs more than width bits
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedRow(f"{name} must be an integer, got {value!r}")
    if not 0 <= value < (1 << width):
        raise OperandOutOfRange(name, value, width)


def parse_integer(token: str, width: int, name: str = "operand") -> int:
    """
    Parse a base-10 integer literal that must fit in width unsigned bits.

    Args:
        token: Literal text, e.g. "300"
        width: Field width in bits
        name: Field name for error messages

    Returns:
        The parsed value
    """
    if not isinstance(token, str) or not _DECIMAL_RE.fullmatch(token):
        raise MalformedRow(f"Invalid integer literal for {name}: {token!r}")
    digits = token.lstrip("+-").lstrip("0")
    if len(digits) > len(str((1 << width) - 1)):
        # More digits than the field maximum, reject before int()
        shown = token if len(token) <= 24 else f"{token[:20]}...({len(token)} chars)"
        raise OperandOutOfRange(name, shown, width)
    value = int(digits, 10) if digits else 0
    if token.startswith("-"):
        value = -value
    check_operand_range(value, width, name)
    return value
