"""GitHub の PR 本文の取得/書き戻し。

- GitHubRest: REST API を requests で直接呼ぶ（Actions ではこちらが既定）
- Gh: `gh` CLI 経由（ローカルで `gh auth login` 済みの場合に便利）

どちらも `get_body(number)` / `set_body(number, body)` だけを提供する。
リトライ/タイムアウトはここで扱い、patcher には持ち込まない。
"""

from __future__ import annotations

import json
import logging
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import requests

from prdesc.config import PrdescConfig
from prdesc.errors import AuthError, StoreError, TargetNotFound

log = logging.getLogger(__name__)

_RETRY_STATUS = {429, 500, 502, 503, 504}


class BodyStore(Protocol):
    repo: str

    def get_body(self, number: int) -> str: ...

    def set_body(self, number: int, body: str) -> None: ...


@dataclass
class GitHubRest:
    repo: str
    token: str = field(repr=False)
    api_url: str = "https://api.github.com"
    timeout: float = 30.0
    max_retries: int = 3
    backoff: float = 1.0
    session: requests.Session = field(default_factory=requests.Session, repr=False)

    def _url(self, number: int) -> str:
        return f"{self.api_url.rstrip('/')}/repos/{self.repo}/pulls/{number}"

    def _request(self, method: str, number: int, payload: dict | None = None) -> dict:
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        url = self._url(number)
        attempt = 0
        while True:
            try:
                r = self.session.request(
                    method, url, headers=headers, json=payload, timeout=self.timeout
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt >= self.max_retries:
                    raise StoreError(f"{method} {url} failed: {e}") from e
                reason = type(e).__name__
            else:
                if r.status_code in (401, 403) and not _is_rate_limited(r):
                    raise AuthError(f"{method} {url}: HTTP {r.status_code} {_message(r)}")
                if r.status_code == 404:
                    raise TargetNotFound(f"pull request not found: {self.repo}#{number}")
                if r.status_code in _RETRY_STATUS or _is_rate_limited(r):
                    if attempt >= self.max_retries:
                        raise StoreError(f"{method} {url}: HTTP {r.status_code} {_message(r)}")
                    reason = f"HTTP {r.status_code}"
                elif r.status_code >= 400:
                    raise StoreError(f"{method} {url}: HTTP {r.status_code} {_message(r)}")
                else:
                    try:
                        return r.json()
                    except ValueError as e:
                        raise StoreError(f"{method} {url}: response is not JSON") from e

            delay = self.backoff * (2**attempt)
            attempt += 1
            log.warning(
                "%s %s: %s; retry %d/%d in %.1fs",
                method, url, reason, attempt, self.max_retries, delay,
            )
            time.sleep(delay)

    def get_body(self, number: int) -> str:
        return _body_of(self._request("GET", number), f"{self.repo}#{number}")

    def set_body(self, number: int, body: str) -> None:
        self._request("PATCH", number, {"body": body})


def _body_of(data: object, where: str) -> str:
    if not isinstance(data, dict):
        raise StoreError(f"unexpected pull request payload for {where}")
    return data.get("body") or ""


def _is_rate_limited(r: requests.Response) -> bool:
    return r.status_code == 403 and r.headers.get("x-ratelimit-remaining") == "0"


def _message(r: requests.Response) -> str:
    try:
        return str(r.json().get("message", ""))
    except ValueError:
        return r.text[:200]


@dataclass
class Gh:
    repo_path: Path
    repo: str

    def run(self, args: list[str], stdin: str | None = None) -> str:
        try:
            proc = subprocess.run(
                ["gh", *args],
                cwd=self.repo_path,
                input=stdin,
                text=True,
                capture_output=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise StoreError("gh CLI not found") from e
        if proc.returncode != 0:
            msg = proc.stderr.strip() or "gh failed"
            if "HTTP 404" in msg:
                raise TargetNotFound(msg)
            if "HTTP 401" in msg or "auth login" in msg:
                raise AuthError(msg)
            raise StoreError(msg)
        return proc.stdout.strip()

    def get_body(self, number: int) -> str:
        out = self.run(["api", f"repos/{self.repo}/pulls/{number}"])
        try:
            data = json.loads(out)
        except ValueError as e:
            raise StoreError(f"gh api: output is not JSON: {out[:200]!r}") from e
        return _body_of(data, f"{self.repo}#{number}")

    def set_body(self, number: int, body: str) -> None:
        self.run(
            ["api", "-X", "PATCH", f"repos/{self.repo}/pulls/{number}", "--input", "-"],
            stdin=json.dumps({"body": body}),
        )


def make_store(cfg: PrdescConfig, repo: str, *, repo_path: Path | None = None) -> BodyStore:
    if cfg.github.backend == "gh":
        return Gh(repo_path=repo_path or Path("."), repo=repo)
    if not cfg.token:
        raise AuthError("token is not set (GITHUB_TOKEN / PRDESC_TOKEN)")
    return GitHubRest(
        repo=repo,
        token=cfg.token,
        api_url=cfg.github.api_url,
        timeout=cfg.github.timeout,
        max_retries=cfg.github.max_retries,
        backoff=cfg.github.backoff,
    )
