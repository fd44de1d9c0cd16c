"""
Quark binary image decoder.

Splits an image into 5-byte records and recovers their fields. The
structural decode (opcode, register B, remaining bits) works on any record;
the typed decode goes through the opcode's layout and rebuilds the
instruction.
"""

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from .encoder import WORD_BYTES, used_bits_mask
from .errors import DecodingError, TruncatedRecord
from .instructions import OPCODE_BITS, Instruction, get_format, make_instruction

RECORD_SIZE = WORD_BYTES

HEX_BYTE_ORDERS = ("reversed", "big_endian")


@dataclass
class DiagnosticRecord:
    """
    Structured view of one record for reporting.

    Attributes:
        index: 1-based record number in the image
        word: 40-bit packed word
        opcode_bits: Low 3 bits of the word
        reg_b_bits: Bits [3:6)
        remaining_bits: Everything from bit 6 upwards
        mnemonic: Instruction mnemonic, None if the opcode is unsupported
        fields: Named field values, None if the opcode is unsupported
        binary: Bytes as 8-bit groups, storage order
        hex: Bytes as 0xNN groups in the configured byte order
    """

    index: int
    word: int
    opcode_bits: int
    reg_b_bits: int
    remaining_bits: int
    mnemonic: Optional[str]
    fields: Optional[Dict[str, int]]
    binary: str
    hex: str

    def to_dict(self) -> dict:
        return asdict(self)


def split_records(data: bytes) -> List[bytes]:
    """
    Split an image into 5-byte records.

    Raises:
        TruncatedRecord: If the length is not a multiple of 5
    """
    if len(data) % RECORD_SIZE:
        raise TruncatedRecord(len(data), RECORD_SIZE)
    return [bytes(data[i:i + RECORD_SIZE]) for i in range(0, len(data), RECORD_SIZE)]


def bytes_to_word(record: bytes) -> int:
    """Read a 5-byte big-endian record as a 40-bit word."""
    if len(record) != RECORD_SIZE:
        raise TruncatedRecord(len(record), RECORD_SIZE)
    return int.from_bytes(record, "big")


def decode_word(record: bytes) -> Dict[str, int]:
    """
    Structural decode of one record.

    Args:
        record: Exactly 5 bytes

    Returns:
        Dict with opcode_bits, reg_b_bits and remaining_bits
    """
    word = bytes_to_word(record)
    return {
        "opcode_bits": word & 0x7,
        "reg_b_bits": (word >> OPCODE_BITS) & 0x7,
        "remaining_bits": word >> 6,
    }


def decode_fields(word: int) -> Dict[str, int]:
    """
    Recover the named field values of a word through its opcode's layout.

    Raises:
        UnsupportedOpcode: If the opcode bits select no instruction
        DecodingError: If bits outside the layout are set
    """
    opcode = word & 0x7
    mask = used_bits_mask(opcode)
    if word & ~mask:
        raise DecodingError(
            f"Word 0x{word:010X} has bits set outside the {get_format(opcode).mnemonic} layout"
        )
    fmt = get_format(opcode)
    return {f.name: (word & f.mask) >> f.shift for f in fmt.fields}


def decode_instruction(word: int) -> Instruction:
    """Rebuild the tagged instruction a word was encoded from."""
    values = decode_fields(word)
    return make_instruction(word & 0x7, *values.values())


def render_binary(record: bytes) -> str:
    """Render bytes as space-separated 8-bit groups, most-significant bit first."""
    return " ".join(f"{b:08b}" for b in record)


def render_hex(record: bytes, byte_order: str = "reversed") -> str:
    """
    Render bytes as space-separated 0xNN groups.

    The default "reversed" order lists the least-significant byte first, so
    the opcode byte comes first. "big_endian" keeps storage order.
    """
    if byte_order not in HEX_BYTE_ORDERS:
        raise ValueError(f"Unknown hex byte order: {byte_order}")
    ordered = reversed(record) if byte_order == "reversed" else record
    return " ".join(f"0x{b:02X}" for b in ordered)


def inspect_record(index: int, record: bytes, byte_order: str = "reversed") -> DiagnosticRecord:
    """Build the diagnostic view of a single record."""
    word = bytes_to_word(record)
    structural = decode_word(record)
    fmt = get_format(structural["opcode_bits"])
    fields = None
    if fmt is not None:
        fields = {f.name: (word & f.mask) >> f.shift for f in fmt.fields}
    return DiagnosticRecord(
        index=index,
        word=word,
        mnemonic=fmt.mnemonic if fmt else None,
        fields=fields,
        binary=render_binary(record),
        hex=render_hex(record, byte_order),
        **structural,
    )


def inspect_image(data: bytes, byte_order: str = "reversed") -> List[DiagnosticRecord]:
    """
    Decode every record of an image for display.

    Records with unsupported opcodes are still reported, with mnemonic and
    fields left as None.

    Raises:
        TruncatedRecord: If the image length is not a multiple of 5
    """
    return [
        inspect_record(i, record, byte_order)
        for i, record in enumerate(split_records(data), start=1)
    ]


def read_image(path: str) -> bytes:
    """Read a binary image from disk."""
    with open(path, "rb") as f:
        return f.read()
