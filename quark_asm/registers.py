"""
Quark register definitions and name mappings.

The machine has eight registers named R0-R7. Names are case-sensitive and
have no aliases.
"""

from .errors import InvalidRegister

REGISTER_COUNT = 8

# Build the name to number mapping (R0-R7 only)
REGISTER_MAP = {f"R{i}": i for i in range(REGISTER_COUNT)}


def parse_register(name: str) -> int:
    """
    Parse a register name and return its number.

    Args:
        name: Register name, exactly "R0" through "R7"

    Returns:
        Register number (0-7)

    Raises:
        InvalidRegister: If the register name is invalid
    """
    if isinstance(name, str) and is_valid_register(name):
        return REGISTER_MAP[name]
    raise InvalidRegister(name)


def is_valid_register(name: str) -> bool:
    """Check if a string is a valid register name."""
    return name in REGISTER_MAP


def get_register_name(num: int) -> str:
    """
    Get the name for a register number.

    Args:
        num: Register number (0-7)

    Returns:
        Register name string
    """
    if not 0 <= num < REGISTER_COUNT:
        raise ValueError(f"Invalid register number: {num}")
    return f"R{num}"
