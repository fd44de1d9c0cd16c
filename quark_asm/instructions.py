"""
Quark instruction definitions.

Each instruction is a 40-bit word. The low 3 bits hold the opcode and the
operands follow in source order, packed upwards from bit 3:

    LDC    [const(16) @6  | B(3) @3 | opcode(3)]
    LDR    [C(3) @6       | B(3) @3 | opcode(3)]
    STR    [D(3) @18 | offset(12) @6 | B(3) @3 | opcode(3)]
    POPCNT [C(31) @6      | B(3) @3 | opcode(3)]

Bits above the last field of an opcode are always zero.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import ClassVar, Dict, Optional, Tuple

from .errors import MalformedRow, UnsupportedOpcode
from .operands import check_operand_range
from .registers import get_register_name

WORD_BITS = 40
OPCODE_BITS = 3


class Opcode(IntEnum):
    """3-bit opcode values."""

    POPCNT = 1
    STR = 2
    LDR = 4
    LDC = 5


class OperandKind(Enum):
    """How an operand is written in source."""

    REGISTER = auto()  # R0-R7
    INTEGER = auto()  # unsigned decimal literal


@dataclass(frozen=True)
class Field:
    """
    A bit field inside the packed word.

    Attributes:
        name: Attribute name on the instruction variant
        kind: Source representation of the operand
        shift: Bit position of the field's least-significant bit
        width: Field width in bits
    """

    name: str
    kind: OperandKind
    shift: int
    width: int

    @property
    def mask(self) -> int:
        return ((1 << self.width) - 1) << self.shift

    @property
    def end(self) -> int:
        return self.shift + self.width


@dataclass(frozen=True)
class InstructionFormat:
    """Layout of one opcode: mnemonic, operand fields in source order."""

    opcode: Opcode
    mnemonic: str
    fields: Tuple[Field, ...]
    description: str = ""

    @property
    def used_bits(self) -> int:
        """Number of low bits covered by the opcode and its fields."""
        return max([OPCODE_BITS] + [f.end for f in self.fields])


def _reg(name: str, shift: int) -> Field:
    return Field(name, OperandKind.REGISTER, shift, 3)


def _imm(name: str, shift: int, width: int) -> Field:
    return Field(name, OperandKind.INTEGER, shift, width)


# =============================================================================
# Quark instruction set
# =============================================================================

FORMATS: Dict[Opcode, InstructionFormat] = {
    Opcode.LDC: InstructionFormat(
        Opcode.LDC,
        "ldc",
        (_reg("reg_b", 3), _imm("constant", 6, 16)),
        "B <- C",
    ),
    Opcode.LDR: InstructionFormat(
        Opcode.LDR,
        "ldr",
        (_reg("reg_b", 3), _reg("reg_c", 6)),
        "B <- mem[C]",
    ),
    Opcode.STR: InstructionFormat(
        Opcode.STR,
        "str",
        (_reg("reg_b", 3), _imm("offset", 6, 12), _reg("reg_d", 18)),
        "mem[D + offset] <- B",
    ),
    Opcode.POPCNT: InstructionFormat(
        Opcode.POPCNT,
        "popcnt",
        (_reg("reg_b", 3), _imm("operand", 6, 31)),
        "B <- popcnt(mem[C])",
    ),
}

# Mnemonics and decimal opcode numbers both select an instruction
OPCODE_NAMES: Dict[str, Opcode] = {}
for _fmt in FORMATS.values():
    OPCODE_NAMES[_fmt.mnemonic] = _fmt.opcode
    OPCODE_NAMES[str(int(_fmt.opcode))] = _fmt.opcode


def resolve_opcode(name: str) -> Optional[Opcode]:
    """
    Look up an opcode by mnemonic or decimal number.

    Args:
        name: "ldc", "LDC", "5", ... (case-insensitive)

    Returns:
        Opcode if found, None otherwise
    """
    return OPCODE_NAMES.get(name.lower())


def get_format(opcode) -> Optional[InstructionFormat]:
    """Get the layout for an opcode value, or None if unsupported."""
    try:
        return FORMATS.get(Opcode(opcode))
    except ValueError:
        return None


class Instruction:
    """
    Base for the tagged instruction variants.

    Subclasses are frozen dataclasses whose attributes are named after the
    fields of their format. Construction validates every operand against its
    field width, so an existing instance is always encodable.
    """

    opcode: ClassVar[Opcode]

    @property
    def format(self) -> InstructionFormat:
        return FORMATS[self.opcode]

    @property
    def mnemonic(self) -> str:
        return self.format.mnemonic

    def operands(self) -> Tuple[int, ...]:
        """Operand values in source (and bit) order."""
        return tuple(getattr(self, f.name) for f in self.format.fields)

    def to_dict(self) -> dict:
        return {
            "opcode": int(self.opcode),
            "mnemonic": self.mnemonic,
            "operands": {f.name: getattr(self, f.name) for f in self.format.fields},
        }

    def __post_init__(self):
        for f in self.format.fields:
            check_operand_range(getattr(self, f.name), f.width, f.name)

    def __str__(self):
        parts = []
        for f, value in zip(self.format.fields, self.operands()):
            parts.append(get_register_name(value) if f.kind is OperandKind.REGISTER else str(value))
        return f"{self.mnemonic} {', '.join(parts)}"


@dataclass(frozen=True)
class Ldc(Instruction):
    """Load a 16-bit constant into register B."""

    reg_b: int
    constant: int
    opcode: ClassVar[Opcode] = Opcode.LDC


@dataclass(frozen=True)
class Ldr(Instruction):
    """Load into register B from the address held in register C."""

    reg_b: int
    reg_c: int
    opcode: ClassVar[Opcode] = Opcode.LDR


@dataclass(frozen=True)
class Str(Instruction):
    """Store register B to memory at register D plus a 12-bit offset."""

    reg_b: int
    offset: int
    reg_d: int
    opcode: ClassVar[Opcode] = Opcode.STR


@dataclass(frozen=True)
class Popcnt(Instruction):
    """Population count of the 31-bit operand C into register B."""

    reg_b: int
    operand: int
    opcode: ClassVar[Opcode] = Opcode.POPCNT


VARIANTS = {cls.opcode: cls for cls in (Ldc, Ldr, Str, Popcnt)}


def make_instruction(opcode, *operands) -> Instruction:
    """
    Build the tagged variant for an opcode from positional operand values.

    Raises:
        UnsupportedOpcode: If opcode is not part of the instruction set
        MalformedRow: If the operand count does not match the opcode
    """
    fmt = get_format(opcode)
    if fmt is None:
        raise UnsupportedOpcode(opcode)
    if len(operands) != len(fmt.fields):
        raise MalformedRow(
            f"{fmt.mnemonic} requires {len(fmt.fields)} operands "
            f"({', '.join(f.name for f in fmt.fields)}), got {len(operands)}"
        )
    return VARIANTS[fmt.opcode](*operands)


def get_all_mnemonics() -> list:
    """Get a list of all supported instruction mnemonics."""
    return [fmt.mnemonic for fmt in FORMATS.values()]
