"""outputs のテスト。"""

from pathlib import Path

from prdesc.outputs import write_outputs


def test_write_outputs(tmp_path: Path) -> None:
    out = tmp_path / "out.txt"
    out.write_text("existing=1\n", encoding="utf-8")
    p = write_outputs({"was_update": True, "changed": False}, env={"GITHUB_OUTPUT": str(out)})
    assert p == out
    assert out.read_text(encoding="utf-8") == "existing=1\nwas_update=true\nchanged=false\n"


def test_multiline_value_uses_delimiter(tmp_path: Path) -> None:
    out = tmp_path / "out.txt"
    write_outputs({"body": "a\nb"}, env={"GITHUB_OUTPUT": str(out)})
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("body<<ghadelimiter_")
    assert lines[1:3] == ["a", "b"]
    assert lines[3] == lines[0].split("<<", 1)[1]


def test_no_output_file_is_noop() -> None:
    assert write_outputs({"was_update": True}, env={}) is None
