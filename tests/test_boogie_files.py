from types import SimpleNamespace

import pytest

from scverify.boogie_files import (
    BoogieFile,
    BoogieFileError,
    cleanup_files,
    generate_filename,
    write_file,
    write_files,
    write_temp_file,
)
from scverify.ir import CfgProgram, Function


def test_generate_filename():
    cfg = CfgProgram(functions={0: Function("deposit"), 1: Function("withdraw")})
    unit = SimpleNamespace(function_a=0, function_b=1, final_a=3, final_b=7)
    assert generate_filename(unit, cfg) == "deposit_3_withdraw_7.bpl"


def test_write_file_round_trip(tmp_path):
    path = write_file(BoogieFile("a.bpl", "procedure main() {}\n"), tmp_path)
    assert path == tmp_path / "a.bpl"
    assert path.read_text() == "procedure main() {}\n"


def test_write_file_into_missing_directory_fails(tmp_path):
    with pytest.raises(BoogieFileError, match="Failed to write Boogie file"):
        write_file(BoogieFile("a.bpl", "x"), tmp_path / "missing")


def test_write_files_creates_directory(tmp_path):
    files = [BoogieFile("a.bpl", "one"), BoogieFile("b.bpl", "two")]
    target = tmp_path / "out" / "nested"
    paths = write_files(files, target)
    assert [p.name for p in paths] == ["a.bpl", "b.bpl"]
    assert [p.read_text() for p in paths] == ["one", "two"]


def test_write_files_directory_blocked_by_file(tmp_path):
    blocker = tmp_path / "out"
    blocker.write_text("")
    with pytest.raises(BoogieFileError, match="Failed to create directory"):
        write_files([BoogieFile("a.bpl", "x")], blocker)


def test_write_temp_file_uses_tmp_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = write_temp_file(BoogieFile("t.bpl", "code"))
    assert (tmp_path / path).resolve() == (tmp_path / "tmp" / "t.bpl").resolve()
    assert (tmp_path / "tmp" / "t.bpl").read_text() == "code"


def test_write_temp_file_blocked(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "tmp").write_text("")
    with pytest.raises(BoogieFileError, match="Failed to create tmp directory"):
        write_temp_file(BoogieFile("t.bpl", "code"))


def test_cleanup_files_removes_and_warns(tmp_path, capsys):
    existing = tmp_path / "a.bpl"
    existing.write_text("x")
    missing = tmp_path / "gone.bpl"
    cleanup_files([existing, missing])
    assert not existing.exists()
    assert "Warning: Failed to remove file" in capsys.readouterr().err