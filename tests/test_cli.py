"""CLI のテスト（GitHub への通信は FakeStore に差し替える）。"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

import prdesc.cli as cli
from prdesc.errors import AuthError
from prdesc.markers import header_marker

runner = CliRunner()


@pytest.fixture(autouse=True)
def _cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, fake_store) -> None:  # noqa: ANN001
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "setup_logging", lambda **kw: None)
    monkeypatch.setattr(cli, "make_store", lambda cfg, repo: fake_store)
    monkeypatch.setenv("GITHUB_REPOSITORY", "octo/demo")


def test_update_creates_then_updates(fake_store, tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    out = tmp_path / "gh_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(out))

    r = runner.invoke(cli.app, ["update", "--section", "a", "--content", "X", "--pr", "1"])
    assert r.exit_code == 0, r.output
    assert "created: a" in r.output
    assert "<!-- a -->\nX\n<!-- end: a -->" in fake_store.body

    r = runner.invoke(cli.app, ["update", "-s", "a", "-c", "Y", "--pr", "1"])
    assert r.exit_code == 0, r.output
    assert "updated: a" in r.output

    text = out.read_text(encoding="utf-8")
    assert "was_update=false\n" in text
    assert "was_update=true\n" in text


def test_update_reads_action_inputs(fake_store, monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setenv("INPUT_SECTION", "bench")
    monkeypatch.setenv("INPUT_CONTENT", "fast")
    monkeypatch.setenv("INPUT_PR_NUMBER", "9")
    r = runner.invoke(cli.app, ["update"])
    assert r.exit_code == 0, r.output
    assert "<!-- bench -->\nfast\n" in fake_store.body


def test_update_content_from_file_and_stdin(fake_store, tmp_path: Path) -> None:  # noqa: ANN001
    f = tmp_path / "c.md"
    f.write_text("from file\n", encoding="utf-8")
    r = runner.invoke(cli.app, ["update", "-s", "a", "--content-file", str(f), "--pr", "1"])
    assert r.exit_code == 0, r.output
    r = runner.invoke(cli.app, ["update", "-s", "b", "--pr", "1"], input="from stdin")
    assert r.exit_code == 0, r.output
    assert "from file\n" in fake_store.body
    assert "from stdin\n" in fake_store.body


def test_dry_run_does_not_write(fake_store) -> None:  # noqa: ANN001
    r = runner.invoke(cli.app, ["update", "-s", "a", "-c", "X", "--pr", "1", "--dry-run"])
    assert r.exit_code == 0, r.output
    assert "dry-run" in r.output
    assert fake_store.writes == []


def test_missing_pr_is_environment_error() -> None:
    r = runner.invoke(cli.app, ["update", "-s", "a", "-c", "X"])
    assert r.exit_code == cli.EXIT_ENV_ERROR


def test_auth_error_is_environment_error(monkeypatch) -> None:  # noqa: ANN001
    def boom(cfg, repo):  # noqa: ANN001, ANN202
        raise AuthError("token is not set")

    monkeypatch.setattr(cli, "make_store", boom)
    r = runner.invoke(cli.app, ["update", "-s", "a", "-c", "X", "--pr", "1"])
    assert r.exit_code == cli.EXIT_ENV_ERROR


def test_malformed_is_section_error(fake_store) -> None:  # noqa: ANN001
    fake_store.body = "<!-- a -->\n"
    r = runner.invoke(cli.app, ["update", "-s", "a", "-c", "X", "--pr", "1"])
    assert r.exit_code == cli.EXIT_SECTION_ERROR
    assert fake_store.writes == []


def test_invalid_identifier_is_section_error() -> None:
    r = runner.invoke(cli.app, ["update", "-s", "end: a", "-c", "X", "--pr", "1"])
    assert r.exit_code == cli.EXIT_SECTION_ERROR


def test_show_and_sections(fake_store) -> None:  # noqa: ANN001
    runner.invoke(cli.app, ["update", "-s", "a", "-c", "[bold]X[/bold]", "--pr", "1"])
    runner.invoke(cli.app, ["update", "-s", "b", "-c", "Y", "--pr", "1"])

    r = runner.invoke(cli.app, ["show", "-s", "a", "--pr", "1"])
    assert r.exit_code == 0, r.output
    assert "[bold]X[/bold]" in r.output

    r = runner.invoke(cli.app, ["show", "-s", "zzz", "--pr", "1"])
    assert r.exit_code == 1

    r = runner.invoke(cli.app, ["sections", "--pr", "1"])
    assert r.exit_code == 0, r.output
    assert "- a" in r.output
    assert "- b" in r.output


def test_patch_file(tmp_path: Path) -> None:
    p = tmp_path / "BODY.md"
    p.write_bytes(b"human\r\n")

    r = runner.invoke(cli.app, ["patch-file", str(p), "-s", "a", "-c", "X", "--check"])
    assert r.exit_code == 1
    assert p.read_bytes() == b"human\r\n"

    r = runner.invoke(cli.app, ["patch-file", str(p), "-s", "a", "-c", "X"])
    assert r.exit_code == 0, r.output
    data = p.read_bytes().decode("utf-8")
    assert data.startswith(header_marker() + "\r\n\r\nhuman\r\n")
    assert "<!-- a -->\r\nX\r\n<!-- end: a -->" in data

    r = runner.invoke(cli.app, ["patch-file", str(p), "-s", "a", "-c", "X", "--check"])
    assert r.exit_code == 0
    assert "unchanged" in r.output


def test_missing_content_file_is_environment_error(fake_store, tmp_path: Path) -> None:  # noqa: ANN001
    missing = tmp_path / "nope.md"
    args = ["update", "-s", "a", "--content-file", str(missing), "--pr", "1"]
    r = runner.invoke(cli.app, args)
    assert r.exit_code == cli.EXIT_ENV_ERROR
    assert not isinstance(r.exception, FileNotFoundError)
    assert fake_store.writes == []

    args = ["patch-file", str(tmp_path / "BODY.md"), "-s", "a", "--content-file", str(missing)]
    r = runner.invoke(cli.app, args)
    assert r.exit_code == cli.EXIT_ENV_ERROR
