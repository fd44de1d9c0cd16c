"""
CSV source parser.

Each non-blank row is `mnemonic_or_opcode, operand, operand, ...`. Every
row is turned into a validated instruction in one step, so a row either
yields an encodable instruction or raises an error naming the row.
"""

import csv
import io
from dataclasses import dataclass, field
from typing import List

from .errors import AssemblerError, MalformedRow, UnsupportedOpcode
from .instructions import FORMATS, VARIANTS, Field, Instruction, OperandKind, resolve_opcode
from .operands import parse_integer
from .registers import parse_register


@dataclass
class ParsedRow:
    """
    Represents one row of source.

    Attributes:
        row_num: Physical row number in the source file (1-based)
        mnemonic: First cell, lowercased
        operands: Remaining cells
        original: Original row text, cells joined with commas
    """

    row_num: int
    mnemonic: str = ""
    operands: List[str] = field(default_factory=list)
    original: str = ""


def clean_token(token: str) -> str:
    """Remove all whitespace from a cell."""
    return "".join(token.split())


def parse_row(cells: List[str], row_num: int) -> ParsedRow:
    """
    Normalize the cells of a single row.

    Whitespace is removed from every cell and trailing empty cells are
    dropped. The mnemonic is lowercased; operands keep their case.
    """
    original = ",".join(cells)
    tokens = [clean_token(c) for c in cells]
    while tokens and not tokens[-1]:
        tokens.pop()

    result = ParsedRow(row_num=row_num, original=original)
    if tokens:
        result.mnemonic = tokens[0].lower()
        result.operands = tokens[1:]
    return result


def parse_operand(spec: Field, token: str) -> int:
    """Convert one operand token according to its field."""
    if spec.kind is OperandKind.REGISTER:
        return parse_register(token)
    return parse_integer(token, spec.width, spec.name)


def build_instruction(row: ParsedRow) -> Instruction:
    """
    Build a validated instruction from a parsed row.

    Raises:
        UnsupportedOpcode: Unknown mnemonic or opcode number
        MalformedRow: Wrong operand count or bad integer literal
        InvalidRegister: Register token outside R0-R7
        OperandOutOfRange: Integer does not fit its field
    """
    try:
        if not row.mnemonic:
            raise MalformedRow("Missing mnemonic")

        opcode = resolve_opcode(row.mnemonic)
        if opcode is None:
            raise UnsupportedOpcode(row.mnemonic)

        cls = VARIANTS[opcode]
        fmt_fields = FORMATS[opcode].fields
        if len(row.operands) != len(fmt_fields):
            raise MalformedRow(
                f"{row.mnemonic} requires {len(fmt_fields)} operands "
                f"({', '.join(f.name for f in fmt_fields)}), got {len(row.operands)}"
            )

        values = [parse_operand(f, tok) for f, tok in zip(fmt_fields, row.operands)]
        return cls(*values)
    except AssemblerError as e:
        if e.row_num is not None:
            raise
        raise e.at_row(row.row_num, row.original) from None


class Parser:
    """
    CSV source parser.

    Provides methods to parse entire files or strings into instructions.
    """

    def __init__(self):
        self.rows: List[ParsedRow] = []

    def parse_file(self, filepath: str) -> List[ParsedRow]:
        """
        Parse a CSV source file.

        Args:
            filepath: Path to the source file

        Returns:
            List of non-blank ParsedRow objects
        """
        with open(filepath, "r", encoding="utf-8", newline="") as f:
            return self._parse_reader(csv.reader(f))

    def parse_string(self, content: str) -> List[ParsedRow]:
        """
        Parse CSV source from a string.

        Args:
            content: Source text

        Returns:
            List of non-blank ParsedRow objects
        """
        return self._parse_reader(csv.reader(io.StringIO(content, newline="")))

    def _parse_reader(self, reader) -> List[ParsedRow]:
        self.rows = []
        i = 0
        while True:
            try:
                cells = next(reader)
            except StopIteration:
                break
            except (csv.Error, UnicodeDecodeError) as e:
                raise MalformedRow(f"Unreadable row: {e}", i + 1) from None
            i += 1
            parsed = parse_row(cells, i)
            if not parsed.mnemonic and not parsed.operands:
                continue
            self.rows.append(parsed)
        return self.rows

    def get_instructions(self) -> List[Instruction]:
        """
        Build instructions for every parsed row, stopping at the first error.
        """
        return [build_instruction(row) for row in self.rows]
