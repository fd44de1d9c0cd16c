"""
Quark Assembler - translates Quark CSV sources into 40-bit binary images.

This package provides the encoder, decoder and assembler for the four-opcode
Quark instruction set (LDC, LDR, STR, POPCNT).
"""

from .assembler import Assembler, assemble
from .decoder import decode_instruction, decode_word, inspect_image
from .encoder import encode_instruction
from .errors import (
    AssemblerError,
    DecodingError,
    EncodingError,
    InvalidRegister,
    MalformedRow,
    OperandOutOfRange,
    ParseError,
    TruncatedRecord,
    UnsupportedOpcode,
)
from .instructions import Ldc, Ldr, Opcode, Popcnt, Str
from .operands import parse_integer
from .registers import parse_register

__version__ = "1.0.0"
__all__ = [
    "Assembler",
    "assemble",
    "encode_instruction",
    "decode_word",
    "decode_instruction",
    "inspect_image",
    "parse_register",
    "parse_integer",
    "Opcode",
    "Ldc",
    "Ldr",
    "Str",
    "Popcnt",
    "AssemblerError",
    "ParseError",
    "MalformedRow",
    "InvalidRegister",
    "UnsupportedOpcode",
    "EncodingError",
    "OperandOutOfRange",
    "DecodingError",
    "TruncatedRecord",
]
