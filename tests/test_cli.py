"""
Tests for the command line interface.
"""

import sys

import pytest

from quark_asm.__main__ import main

PROGRAM = "ldc,R1,300\nstr,R2,10,R3\n"


def run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["quark-asm", *argv])
    main()


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "prog.csv"
    path.write_text(PROGRAM)
    return path


class TestAssembleCommand:
    def test_quiet_run(self, monkeypatch, capsys, source, tmp_path):
        output = tmp_path / "prog.bin"
        run(monkeypatch, str(source), str(output), "0")
        assert output.read_bytes() == bytes.fromhex("0000004B0D00000C0292")
        assert capsys.readouterr().out == ""

    def test_diagnostics(self, monkeypatch, capsys, source, tmp_path):
        output = tmp_path / "prog.bin"
        run(monkeypatch, str(source), str(output), "1")
        out = capsys.readouterr().out
        assert "Instruction 0: {'opcode': 5" in out
        assert f"Instruction 0: {0x4B0D:040b}" in out
        assert "Binary file size: 10 bytes" in out
        assert "Record count: 2" in out
        assert "Record 1: 0x0D 0x4B 0x00 0x00 0x00" in out

    def test_diagnostics_from_config(self, monkeypatch, capsys, source, tmp_path):
        config = tmp_path / "quark.yaml"
        config.write_text("diagnostics: true\nhex_byte_order: big_endian\n")
        output = tmp_path / "prog.bin"
        run(monkeypatch, "--config", str(config), str(source), str(output))
        assert "Record 1: 0x00 0x00 0x00 0x4B 0x0D" in capsys.readouterr().out

    def test_listing(self, monkeypatch, capsys, source, tmp_path):
        run(monkeypatch, "-l", str(source), str(tmp_path / "prog.bin"))
        assert "0000004B0D" in capsys.readouterr().out

    def test_missing_output_argument(self, monkeypatch, source):
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, str(source))
        assert exc.value.code != 0

    def test_no_arguments(self, monkeypatch):
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch)
        assert exc.value.code != 0

    def test_missing_input(self, monkeypatch, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, str(tmp_path / "none.csv"), str(tmp_path / "out.bin"))
        assert exc.value.code == 1
        assert "Input file not found" in capsys.readouterr().err

    def test_row_error(self, monkeypatch, capsys, tmp_path):
        source = tmp_path / "bad.csv"
        source.write_text("ldc,R1,1\nmov,R1,R2\n")
        output = tmp_path / "bad.bin"
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, str(source), str(output), "1")
        assert exc.value.code == 1
        err = capsys.readouterr().err
        assert "Row 2" in err
        assert "Unsupported opcode: 'mov'" in err
        assert not output.exists()

    def test_bad_config(self, monkeypatch, capsys, source, tmp_path):
        config = tmp_path / "quark.yaml"
        config.write_text("nonsense: 1\n")
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, "-c", str(config), str(source), str(tmp_path / "o.bin"))
        assert exc.value.code == 1


class TestInspectCommand:
    def test_inspect(self, monkeypatch, capsys, tmp_path):
        image = tmp_path / "prog.bin"
        image.write_bytes(bytes.fromhex("0000000141"))
        run(monkeypatch, "--inspect", str(image))
        out = capsys.readouterr().out
        assert "Record count: 1" in out
        assert "Record 1: 00000000 00000000 00000000 00000001 01000001" in out

    def test_inspect_truncated(self, monkeypatch, capsys, tmp_path):
        image = tmp_path / "bad.bin"
        image.write_bytes(b"\x00" * 7)
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, "--inspect", str(image))
        assert exc.value.code == 1
        assert "not a multiple of 5" in capsys.readouterr().err


class TestErrorReporting:
    def test_long_literal_names_row(self, monkeypatch, capsys, tmp_path):
        source = tmp_path / "long.csv"
        source.write_text("ldc,R1,1\nldc,R1," + "9" * 5000 + "\n")
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, str(source), str(tmp_path / "long.bin"))
        assert exc.value.code == 1
        err = capsys.readouterr().err
        assert err.startswith("Error: Row 2:")
        assert "Unexpected error" not in err

    def test_invalid_utf8_names_row(self, monkeypatch, capsys, tmp_path):
        source = tmp_path / "bad.csv"
        source.write_bytes(b"ldc,R\xff1,2\n")
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, str(source), str(tmp_path / "bad.bin"))
        assert exc.value.code == 1
        assert "Error: Row 1: Unreadable row" in capsys.readouterr().err

    def test_help_lists_mnemonics(self, monkeypatch, capsys):
        with pytest.raises(SystemExit):
            run(monkeypatch, "--help")
        assert "ldc, ldr, str, popcnt" in capsys.readouterr().out
