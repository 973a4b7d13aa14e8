"""Unit tests for the ``python -m sqlfn`` entry point."""
from __future__ import annotations

from sqlfn.__main__ import main
from tests.fixtures import dsl_path


def test_writes_output_file(tmp_path):
    out = tmp_path / "pets_generated.py"
    assert main([str(dsl_path("pets")), "-o", str(out)]) == 0
    source = out.read_text()
    assert "def execute_insert_new_pet(" in source
    assert "AUTO_TESTS" in source


def test_writes_stdout(capsys):
    assert main([str(dsl_path("pets_pg")), "--no-tests"]) == 0
    out = capsys.readouterr().out
    assert "def queue_one_get_pet_id_data(" in out
    assert "AUTO_TESTS" not in out


def test_compile_error_exit_status(tmp_path, caplog):
    src = tmp_path / "bad.sqlfn"
    src.write_text('#[sqlite, bogus] q() { "x" }')
    assert main([str(src)]) == 1
    assert "bogus" in caplog.text


def test_strict_flag(tmp_path):
    src = tmp_path / "named.sqlfn"
    src.write_text('#[postgres, named] q(id: int) { "SELECT :idd" }')
    assert main([str(src), "-o", str(tmp_path / "a.py")]) == 0
    assert main([str(src), "--strict", "-o", str(tmp_path / "b.py")]) == 1


def test_missing_input(tmp_path):
    assert main([str(tmp_path / "absent.sqlfn")]) == 2
