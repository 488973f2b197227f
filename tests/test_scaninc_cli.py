import pytest

from agbkit.scaninc.asm_file import ScanincError
from agbkit.scaninc.cli import USAGE, can_open_file, main, scan_dependencies


@pytest.fixture
def project(tmp_path):
    src = tmp_path / "src"
    inc = tmp_path / "include"
    src.mkdir()
    inc.mkdir()
    (src / "main.c").write_text(
        '#include "foo.h"\n#include <stdio.h>\nconst u8 x[] = INCBIN_U8("gfx.bin");\n'
    )
    (inc / "foo.h").write_text('#include "bar.h"\n')
    return tmp_path


def test_can_open_file(tmp_path):
    existing = tmp_path / "here.txt"
    existing.write_text("x")
    assert can_open_file(str(existing)) is True
    assert can_open_file(str(tmp_path / "absent.txt")) is False


def test_scan_dependencies_follows_includes(project):
    inc_dir = str(project / "include") + "/"
    result = scan_dependencies(str(project / "src" / "main.c"), [inc_dir])
    assert set(result) == {"gfx.bin", inc_dir + "foo.h", inc_dir + "bar.h"}
    assert result == sorted(result)


def test_scan_dependencies_asm_keeps_unresolved_name(tmp_path):
    path = tmp_path / "code.s"
    path.write_text('.include "missing.inc"\n.incbin "data.bin"\n')
    assert scan_dependencies(str(path)) == ["data.bin", "missing.inc"]


def test_scan_dependencies_finds_sibling(tmp_path):
    (tmp_path / "main.s").write_text('.include "macros.inc"\n')
    (tmp_path / "macros.inc").write_text('.incbin "blob.bin"\n')
    base = str(tmp_path) + "/"
    result = scan_dependencies(base + "main.s")
    assert set(result) == {base + "macros.inc", "blob.bin"}


def test_scan_dependencies_missing_input(tmp_path):
    with pytest.raises(ScanincError):
        scan_dependencies(str(tmp_path / "absent.c"))


def test_main_prints_dependencies(project, capsys):
    inc_dir = str(project / "include")
    status = main(["-I", inc_dir, str(project / "src" / "main.c")])
    out = capsys.readouterr().out.splitlines()
    assert status == 0
    assert set(out) == {"gfx.bin", inc_dir + "/foo.h", inc_dir + "/bar.h"}


def test_main_attached_include_flag(project, capsys):
    inc_dir = str(project / "include") + "/"
    status = main(["-I" + inc_dir, str(project / "src" / "main.c")])
    out = capsys.readouterr().out.splitlines()
    assert status == 0
    assert inc_dir + "foo.h" in out


@pytest.mark.parametrize("argv", [[], ["-X", "main.c"], ["a.c", "b.c"], ["-I", "dir"]])
def test_main_usage_errors(argv, capsys):
    assert main(argv) == 1
    assert USAGE in capsys.readouterr().err


def test_main_unknown_extension(tmp_path, capsys):
    path = tmp_path / "thing.txt"
    path.write_text("x")
    assert main([str(path)]) == 1
    assert "Unrecognized extension" in capsys.readouterr().err