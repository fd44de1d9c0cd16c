"""
Quark instruction encoder.

Packs tagged instructions into 40-bit words and serializes each word as
5 big-endian bytes.
"""

from typing import Sequence

from .errors import MalformedRow, UnsupportedOpcode
from .instructions import Instruction, OPCODE_BITS, WORD_BITS, get_format
from .operands import check_operand_range

WORD_BYTES = WORD_BITS // 8


def used_bits_mask(opcode) -> int:
    """
    Mask of every bit an opcode is allowed to set.

    Args:
        opcode: Opcode value

    Returns:
        Mask covering the opcode field plus all operand fields
    """
    fmt = get_format(opcode)
    if fmt is None:
        raise UnsupportedOpcode(opcode)
    mask = (1 << OPCODE_BITS) - 1
    for field in fmt.fields:
        mask |= field.mask
    return mask


def pack_fields(opcode, values: Sequence[int]) -> int:
    """
    Pack an opcode and its operand values into a 40-bit word.

    Format: [0...0 | fieldN | ... | field1 | opcode(3)]

    Args:
        opcode: Opcode value
        values: Operand values in source order

    Returns:
        40-bit packed word
    """
    fmt = get_format(opcode)
    if fmt is None:
        raise UnsupportedOpcode(opcode)
    if len(values) != len(fmt.fields):
        raise MalformedRow(
            f"{fmt.mnemonic} requires {len(fmt.fields)} operands, got {len(values)}"
        )

    encoding = int(fmt.opcode) & ((1 << OPCODE_BITS) - 1)
    for field, value in zip(fmt.fields, values):
        check_operand_range(value, field.width, field.name)
        encoding |= value << field.shift
    return encoding


def encode_instruction(instr: Instruction) -> int:
    """
    Encode an instruction into its 40-bit packed word.

    Raises:
        UnsupportedOpcode: If instr is not one of the four instruction variants
    """
    opcode = getattr(instr, "opcode", None)
    if not isinstance(instr, Instruction) or get_format(opcode) is None:
        raise UnsupportedOpcode(opcode if opcode is not None else type(instr).__name__)
    return pack_fields(opcode, instr.operands())


def word_to_bytes(word: int) -> bytes:
    """Serialize a packed word as 5 bytes, most-significant byte first."""
    return word.to_bytes(WORD_BYTES, "big")


def encode_bytes(instr: Instruction) -> bytes:
    """Encode an instruction straight to its 5-byte record."""
    return word_to_bytes(encode_instruction(instr))
