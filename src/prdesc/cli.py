"""prdesc CLI エントリポイント。"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import typer
from rich.console import Console

from prdesc.adapter import get_section, list_sections, update_section
from prdesc.config import PrdescConfig, load_config
from prdesc.context import resolve_target
from prdesc.errors import EnvironmentFault, SectionError
from prdesc.github_ops import BodyStore, make_store
from prdesc.logging_setup import setup_logging
from prdesc.outputs import write_outputs
from prdesc.patcher import patch

APP_HELP = "PR本文をセクション単位で更新する（他の人が書いた部分はそのまま）"

EXIT_SECTION_ERROR = 1
EXIT_ENV_ERROR = 2

app = typer.Typer(add_completion=False, help=APP_HELP)
console = Console()
err_console = Console(stderr=True)


def _env_default(name: str) -> str | None:
    return os.environ.get(name) or None


def _setup(config: Path | None) -> PrdescConfig:
    try:
        cfg = load_config(config)
    except ValueError as e:
        err_console.print(f"❌ config: {e}", style="red")
        raise typer.Exit(code=EXIT_ENV_ERROR) from e
    setup_logging(level=cfg.log.level, log_file=Path(cfg.log.file) if cfg.log.file else None)
    return cfg


def _read_content(content: str | None, content_file: Path | None) -> str:
    if content is not None:
        return content
    if content_file is not None:
        try:
            return content_file.read_text(encoding="utf-8")
        except OSError as e:
            err_console.print(
                f"❌ environment error: cannot read {content_file}: {e.strerror or e}",
                style="red",
            )
            raise typer.Exit(code=EXIT_ENV_ERROR) from e
    env_content = os.environ.get("INPUT_CONTENT")
    if env_content is not None:
        return env_content
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return ""


def _read_raw(path: Path) -> str:
    # 改行コードを変換しない
    if not path.exists():
        return ""
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


def _write_raw(path: Path, text: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(text)


def _open_store(cfg: PrdescConfig, repo: str | None, pr: int | None) -> tuple[BodyStore, int]:
    target = resolve_target(repo=repo, pr_number=pr, env=os.environ)
    return make_store(cfg, target.repo), target.number


def _fail(e: Exception) -> typer.Exit:
    if isinstance(e, SectionError):
        err_console.print(f"❌ section error: {e}", style="red")
        return typer.Exit(code=EXIT_SECTION_ERROR)
    err_console.print(f"❌ environment error: {e}", style="red")
    return typer.Exit(code=EXIT_ENV_ERROR)


_SECTION_OPT = typer.Option(
    None, "--section", "-s", help="セクション識別子 (既定: $INPUT_SECTION)"
)
_PR_OPT = typer.Option(None, "--pr", help="PR番号（省略時は実行文脈から推測）")
_REPO_OPT = typer.Option(None, "--repo", help="OWNER/NAME（省略時は $GITHUB_REPOSITORY）")
_CONFIG_OPT = typer.Option(None, "--config", help="設定ファイル (既定: prdesc.toml)")


def _section_id(section: str | None) -> str:
    section = section or _env_default("INPUT_SECTION")
    if not section:
        err_console.print("❌ --section is required", style="red")
        raise typer.Exit(code=EXIT_SECTION_ERROR)
    return section


def _pr_number(pr: int | None) -> int | None:
    if pr is not None:
        return pr
    raw = _env_default("INPUT_PR_NUMBER")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        err_console.print(f"❌ environment error: invalid PR number: {raw!r}", style="red")
        raise typer.Exit(code=EXIT_ENV_ERROR) from None


@app.command()
def update(
    section: str | None = _SECTION_OPT,
    content: str | None = typer.Option(None, "--content", "-c", help="セクションの中身"),
    content_file: Path | None = typer.Option(
        None, "--content-file", help="中身をファイルから読む"
    ),
    pr: int | None = _PR_OPT,
    repo: str | None = _REPO_OPT,
    config: Path | None = _CONFIG_OPT,
    dry_run: bool = typer.Option(False, "--dry-run", help="書き戻さずに結果だけ表示"),
) -> None:
    """PR本文のセクションを作成/更新する。"""
    cfg = _setup(config)
    section_id = _section_id(section)
    text = _read_content(content, content_file)

    try:
        store, number = _open_store(cfg, repo, _pr_number(pr))
        result = update_section(
            store, number, section_id, text,
            tool_identity=cfg.tool_identity, dry_run=dry_run,
        )
    except (SectionError, EnvironmentFault) as e:
        raise _fail(e) from e

    write_outputs({"was_update": result.was_update, "changed": result.changed})
    verb = "updated" if result.was_update else "created"
    if dry_run:
        console.print(result.body, markup=False, highlight=False)
        console.print(f"(dry-run) would have {verb}: {section_id}", style="yellow")
    else:
        console.print(f"{verb}: {section_id}", style="green")


@app.command()
def show(
    section: str | None = _SECTION_OPT,
    pr: int | None = _PR_OPT,
    repo: str | None = _REPO_OPT,
    config: Path | None = _CONFIG_OPT,
) -> None:
    """セクションの現在の中身を表示する。"""
    cfg = _setup(config)
    section_id = _section_id(section)
    try:
        store, number = _open_store(cfg, repo, _pr_number(pr))
        text = get_section(store, number, section_id)
    except (SectionError, EnvironmentFault) as e:
        raise _fail(e) from e

    if text is None:
        err_console.print(f"section not found: {section_id}", style="yellow")
        raise typer.Exit(code=1)
    console.print(text.rstrip("\r\n"), markup=False, highlight=False)


@app.command()
def sections(
    pr: int | None = _PR_OPT,
    repo: str | None = _REPO_OPT,
    config: Path | None = _CONFIG_OPT,
) -> None:
    """PR本文にあるセクション識別子を一覧表示する。"""
    cfg = _setup(config)
    try:
        store, number = _open_store(cfg, repo, _pr_number(pr))
        ids = list_sections(store, number)
    except (SectionError, EnvironmentFault) as e:
        raise _fail(e) from e

    if not ids:
        console.print("(no sections)")
        return
    for sid in ids:
        console.print(f"- {sid}", markup=False, highlight=False)


@app.command("patch-file")
def patch_file(
    path: Path = typer.Argument(..., help="パッチするローカルファイル"),
    section: str | None = _SECTION_OPT,
    content: str | None = typer.Option(None, "--content", "-c", help="セクションの中身"),
    content_file: Path | None = typer.Option(None, "--content-file", help="中身をファイルから読む"),
    check: bool = typer.Option(False, "--check", help="変更が必要なら exit 1（書き込まない）"),
    config: Path | None = _CONFIG_OPT,
) -> None:
    """ローカルファイルに同じパッチを当てる（オフライン確認用）。"""
    cfg = _setup(config)
    section_id = _section_id(section)
    text = _read_content(content, content_file)

    current = _read_raw(path)
    try:
        body, was_update = patch(current, section_id, text, tool_identity=cfg.tool_identity)
    except SectionError as e:
        raise _fail(e) from e

    verb = "updated" if was_update else "created"
    if body == current:
        console.print(f"unchanged: {section_id}", style="dim")
        return
    if check:
        console.print(f"would have {verb}: {section_id}", style="yellow")
        raise typer.Exit(code=1)
    _write_raw(path, body)
    console.print(f"{verb}: {section_id} ({path})", style="green")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
