"""
Main assembler implementation.

Single-pass assembler for Quark CSV source to a raw binary image: every row
is encoded to a 5-byte record and the records are concatenated in row order.
"""

import os
import tempfile
from typing import List, Optional, Sequence

from .decoder import DiagnosticRecord, inspect_image
from .encoder import encode_instruction, word_to_bytes
from .errors import AssemblerError
from .instructions import Instruction
from .parser import ParsedRow, Parser, build_instruction


class Assembler:
    """
    Quark assembler.

    Rows are validated and encoded in order. The first failing row aborts the
    whole run and nothing is written.
    """

    def __init__(self, verbose: bool = False, hex_byte_order: str = "reversed"):
        """
        Initialize the assembler.

        Args:
            verbose: If True, print detailed assembly information
            hex_byte_order: Byte order for hex renderings in diagnostics
        """
        self.verbose = verbose
        self.hex_byte_order = hex_byte_order
        self.parser = Parser()
        self.program: List[Instruction] = []
        self.words: List[int] = []  # encoded 40-bit words
        self.source_map: List[ParsedRow] = []  # row each word came from
        self.image: bytes = b""

    def log(self, message: str) -> None:
        """Print message if verbose mode is enabled."""
        if self.verbose:
            print(message)

    def assemble_file(self, input_path: str, output_path: str = None) -> bytes:
        """
        Assemble a CSV file to a binary image.

        Args:
            input_path: Path to input .csv file
            output_path: Path to output .bin file (optional)

        Returns:
            The binary image
        """
        self.log(f"Assembling: {input_path}")
        rows = self.parser.parse_file(input_path)
        self.assemble_rows(rows)

        if output_path:
            self.write_binary(output_path)
            self.log(f"Output written to: {output_path}")

        return self.image

    def assemble_string(self, source: str) -> bytes:
        """
        Assemble from a CSV string.

        Args:
            source: CSV source text

        Returns:
            The binary image
        """
        return self.assemble_rows(self.parser.parse_string(source))

    def assemble_rows(self, rows: Sequence[ParsedRow]) -> bytes:
        """Validate every row, then encode the resulting program."""
        self.log("\n=== Building instructions ===")
        program = []
        for row in rows:
            instr = build_instruction(row)
            self.log(f"  Row {row.row_num}: {instr}")
            program.append(instr)

        self.assemble(program, list(rows))
        return self.image

    def assemble(
        self, instructions: Sequence[Instruction], rows: Optional[List[ParsedRow]] = None
    ) -> bytes:
        """
        Encode a program into a binary image.

        Args:
            instructions: Instructions in execution order
            rows: Source rows matching instructions, for error reporting

        Returns:
            Concatenated 5-byte records, in instruction order
        """
        instructions = list(instructions)
        self.log("\n=== Encoding instructions ===")
        words = []
        for i, instr in enumerate(instructions):
            row = rows[i] if rows else None
            try:
                word = encode_instruction(instr)
            except AssemblerError as e:
                if row is not None:
                    raise e.at_row(row.row_num, row.original) from None
                raise e.at_row(i + 1) from None
            words.append(word)
            self.log(f"  {i:04d}: {word:010X}  {instr}")

        self.program = instructions
        self.words = words
        self.source_map = list(rows) if rows else []
        self.image = b"".join(word_to_bytes(w) for w in words)
        self.log(f"\n  Total instructions: {len(words)}")
        return self.image

    def write_binary(self, output_path: str) -> None:
        """
        Write the assembled image to a file.

        The image goes to a temporary file next to output_path which is then
        renamed over it, so output_path is either the old file or the
        complete new image.

        Args:
            output_path: Path to output file
        """
        directory = os.path.dirname(os.path.abspath(output_path))
        fd, tmp_path = tempfile.mkstemp(
            prefix=".", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(self.image)
            os.replace(tmp_path, output_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get_hex_string(self) -> str:
        """
        Get assembled words as a hex string.

        Returns:
            String with one 10-digit hex word per line
        """
        return "\n".join(f"{word:010x}" for word in self.words)

    def get_listing(self) -> str:
        """
        Get an assembly listing showing indices, encodings, and source.

        Returns:
            Formatted listing string
        """
        lines = []
        lines.append("Index  Code         Source")
        lines.append("-" * 60)

        for i, word in enumerate(self.words):
            if i < len(self.source_map):
                source = self.source_map[i].original.strip()
            else:
                source = str(self.program[i])
            lines.append(f"{i:5d}  {word:010X}   {source}")

        return "\n".join(lines)

    def get_diagnostics(self) -> List[DiagnosticRecord]:
        """Decode the assembled image back into diagnostic records."""
        return inspect_image(self.image, self.hex_byte_order)


def assemble(instructions: Sequence[Instruction]) -> bytes:
    """Encode a program into a binary image."""
    return Assembler().assemble(instructions)
