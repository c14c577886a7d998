"""設定の読み込み。

設定ファイル: `prdesc.toml`（任意）。環境変数が上書きする。

トークンはこのファイルに直書きしない。環境変数
(`PRDESC_TOKEN` / `GITHUB_TOKEN` / `GH_TOKEN` / `INPUT_TOKEN`) だけから読む。
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib  # type: ignore[no-redef]

from prdesc.markers import DEFAULT_TOOL_IDENTITY

DEFAULT_CONFIG_PATH = Path("prdesc.toml")

TOKEN_ENV_VARS = ("PRDESC_TOKEN", "INPUT_TOKEN", "GITHUB_TOKEN", "GH_TOKEN")


@dataclass
class GitHubConfig:
    backend: str = "rest"  # rest | gh
    api_url: str = "https://api.github.com"
    timeout: float = 30.0
    max_retries: int = 3
    backoff: float = 1.0


@dataclass
class LogConfig:
    level: str = "INFO"
    file: str | None = None


@dataclass
class PrdescConfig:
    github: GitHubConfig = field(default_factory=GitHubConfig)
    log: LogConfig = field(default_factory=LogConfig)
    tool_identity: str = DEFAULT_TOOL_IDENTITY
    token: str | None = field(default=None, repr=False)


def find_token(env: Mapping[str, str]) -> str | None:
    for name in TOKEN_ENV_VARS:
        value = env.get(name, "").strip()
        if value:
            return value
    return None


def load_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> PrdescConfig:
    if env is None:
        env = os.environ
    if path is None:
        path = DEFAULT_CONFIG_PATH

    raw: dict = {}
    if path.exists():
        raw = tomllib.loads(path.read_text(encoding="utf-8"))

    github = raw.get("github", {})
    patch_ = raw.get("patch", {})
    log = raw.get("log", {})

    backend = env.get("PRDESC_BACKEND") or str(github.get("backend", "rest"))
    if backend not in {"rest", "gh"}:
        raise ValueError(f"unknown backend: {backend!r} (expected 'rest' or 'gh')")

    return PrdescConfig(
        github=GitHubConfig(
            backend=backend,
            api_url=env.get("GITHUB_API_URL") or str(github.get("api_url", "https://api.github.com")),
            timeout=float(github.get("timeout", 30.0)),
            max_retries=int(github.get("max_retries", 3)),
            backoff=float(github.get("backoff", 1.0)),
        ),
        log=LogConfig(
            level=env.get("PRDESC_LOG_LEVEL") or str(log.get("level", "INFO")),
            file=env.get("PRDESC_LOG_FILE") or log.get("file") or None,
        ),
        tool_identity=env.get("PRDESC_TOOL_IDENTITY")
        or str(patch_.get("tool_identity", DEFAULT_TOOL_IDENTITY)),
        token=find_token(env),
    )
