"""対象PRの解決。

明示指定 → GitHub Actions の実行文脈からの推測 → エラー、の順で決める。
環境変数は引数 `env` で受け取り、グローバル状態を直接読まない。
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from prdesc.errors import TargetNotFound

log = logging.getLogger(__name__)

_REF_RE = re.compile(r"^refs/pull/(\d+)/(?:merge|head)$")
_REPO_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class TargetRef:
    repo: str
    number: int

    def __str__(self) -> str:
        return f"{self.repo}#{self.number}"


def _load_event(env: Mapping[str, str]) -> dict:
    path = env.get("GITHUB_EVENT_PATH", "")
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        log.warning("GITHUB_EVENT_PATH does not exist: %s", p)
        return {}
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        log.warning("cannot read event payload %s: %s", p, e)
        return {}
    return raw if isinstance(raw, dict) else {}


def _as_number(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and value > 0:
        return value
    return None


def infer_pr_number(env: Mapping[str, str]) -> int | None:
    """実行文脈からPR番号を推測する（見つからなければ None）。"""

    event = _load_event(env)

    pr = event.get("pull_request")
    if isinstance(pr, dict) and _as_number(pr.get("number")):
        return _as_number(pr.get("number"))

    # issue_comment on a PR
    issue = event.get("issue")
    if isinstance(issue, dict) and issue.get("pull_request") and _as_number(issue.get("number")):
        return _as_number(issue.get("number"))

    if _as_number(event.get("number")):
        return _as_number(event.get("number"))

    m = _REF_RE.match(env.get("GITHUB_REF", ""))
    if m:
        return int(m.group(1))
    return None


def resolve_target(
    *,
    repo: str | None,
    pr_number: int | None,
    env: Mapping[str, str],
) -> TargetRef:
    repo = repo or env.get("GITHUB_REPOSITORY", "")
    if not repo:
        raise TargetNotFound("repository is not set (use --repo or GITHUB_REPOSITORY)")
    if not _REPO_RE.match(repo):
        raise TargetNotFound(f"repository must be OWNER/NAME: {repo!r}")

    number = pr_number if pr_number is not None else infer_pr_number(env)
    if number is None:
        raise TargetNotFound(
            "pull request number is not set and cannot be inferred "
            "(use --pr or run on a pull_request event)"
        )
    if number <= 0:
        raise TargetNotFound(f"invalid pull request number: {number}")
    return TargetRef(repo=repo, number=number)
