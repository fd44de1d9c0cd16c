"""
Tests for binary image decoding and rendering.
"""

import pytest

from quark_asm.decoder import (
    decode_fields,
    decode_instruction,
    decode_word,
    inspect_image,
    render_binary,
    render_hex,
    split_records,
)
from quark_asm.encoder import encode_bytes, encode_instruction
from quark_asm.errors import DecodingError, TruncatedRecord, UnsupportedOpcode
from quark_asm.instructions import Ldc, Ldr, Popcnt, Str


class TestDecodeWord:
    """Structural decode of single records."""

    def test_ldc(self):
        fields = decode_word(bytes.fromhex("0000004B0D"))
        assert fields == {"opcode_bits": 5, "reg_b_bits": 1, "remaining_bits": 300}

    def test_str_remaining_bits(self):
        """STR keeps offset and reg D together above bit 6."""
        fields = decode_word(encode_bytes(Str(2, 10, 3)))
        assert fields["opcode_bits"] == 2
        assert fields["reg_b_bits"] == 2
        assert fields["remaining_bits"] == (3 << 12) | 10

    def test_wrong_length(self):
        with pytest.raises(TruncatedRecord):
            decode_word(b"\x00\x01")


class TestRoundTrip:
    """Decoding recovers exactly what was encoded."""

    @pytest.mark.parametrize(
        "instr",
        [
            Ldc(0, 0),
            Ldc(1, 300),
            Ldc(7, 65535),
            Ldr(1, 2),
            Ldr(7, 0),
            Str(2, 10, 3),
            Str(7, 4095, 7),
            Popcnt(0, 5),
            Popcnt(6, (1 << 31) - 1),
        ],
    )
    def test_instruction_round_trip(self, instr):
        word = encode_instruction(instr)
        assert decode_instruction(word) == instr
        structural = decode_word(encode_bytes(instr))
        assert structural["opcode_bits"] == int(instr.opcode)
        assert structural["reg_b_bits"] == instr.reg_b
        assert structural["remaining_bits"] == word >> 6

    def test_decode_fields(self):
        assert decode_fields(0xC0292) == {"reg_b": 2, "offset": 10, "reg_d": 3}

    def test_unsupported_opcode(self):
        with pytest.raises(UnsupportedOpcode):
            decode_fields(0b000_011)

    def test_stray_high_bits(self):
        """A LDR word with a bit above bit 9 set is rejected."""
        with pytest.raises(DecodingError, match="outside the ldr layout"):
            decode_instruction((1 << 30) | 0x8C)


class TestRendering:
    def test_binary(self):
        assert render_binary(bytes.fromhex("0000004B0D")) == (
            "00000000 00000000 00000000 01001011 00001101"
        )

    def test_hex_reversed(self):
        """Default hex rendering lists the opcode byte first."""
        assert render_hex(bytes.fromhex("0000004B0D")) == "0x0D 0x4B 0x00 0x00 0x00"

    def test_hex_big_endian(self):
        assert render_hex(bytes.fromhex("0000004B0D"), "big_endian") == (
            "0x00 0x00 0x00 0x4B 0x0D"
        )

    def test_hex_unknown_order(self):
        with pytest.raises(ValueError):
            render_hex(b"\x00" * 5, "middle")


class TestInspectImage:
    def test_split_records(self):
        data = bytes(range(10))
        assert split_records(data) == [bytes(range(5)), bytes(range(5, 10))]
        assert split_records(b"") == []

    def test_truncated_image(self):
        """A 7-byte image is not a whole number of records."""
        with pytest.raises(TruncatedRecord) as exc:
            split_records(b"\x00" * 7)
        assert exc.value.length == 7

    def test_records(self):
        image = encode_bytes(Ldc(1, 300)) + encode_bytes(Popcnt(0, 5))
        records = inspect_image(image)
        assert [r.index for r in records] == [1, 2]
        assert records[0].mnemonic == "ldc"
        assert records[0].fields == {"reg_b": 1, "constant": 300}
        assert records[0].hex == "0x0D 0x4B 0x00 0x00 0x00"
        assert records[1].opcode_bits == 1
        assert records[1].remaining_bits == 5

    def test_unknown_opcode_still_reported(self):
        records = inspect_image(b"\x00\x00\x00\x00\x07")
        assert records[0].mnemonic is None
        assert records[0].fields is None
        assert records[0].opcode_bits == 7

    def test_to_dict(self):
        record = inspect_image(encode_bytes(Ldr(1, 2)), "big_endian")[0]
        data = record.to_dict()
        assert data["word"] == 0x8C
        assert data["hex"] == "0x00 0x00 0x00 0x00 0x8C"
