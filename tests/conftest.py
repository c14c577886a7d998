from __future__ import annotations

import pytest

_GH_ENV = (
    "GITHUB_EVENT_PATH",
    "GITHUB_REF",
    "GITHUB_REPOSITORY",
    "GITHUB_OUTPUT",
    "GITHUB_API_URL",
    "GITHUB_TOKEN",
    "GH_TOKEN",
    "PRDESC_TOKEN",
    "PRDESC_BACKEND",
    "PRDESC_LOG_LEVEL",
    "PRDESC_LOG_FILE",
    "PRDESC_TOOL_IDENTITY",
    "INPUT_TOKEN",
    "INPUT_SECTION",
    "INPUT_CONTENT",
    "INPUT_PR_NUMBER",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """ランナー(GitHub Actions)の環境変数がテストに漏れないようにする。"""
    for name in _GH_ENV:
        monkeypatch.delenv(name, raising=False)


class FakeStore:
    def __init__(self, body: str = "", repo: str = "octo/demo") -> None:
        self.repo = repo
        self.body = body
        self.writes: list[str] = []

    def get_body(self, number: int) -> str:
        return self.body

    def set_body(self, number: int, body: str) -> None:
        self.body = body
        self.writes.append(body)


@pytest.fixture()
def fake_store() -> FakeStore:
    return FakeStore("Fixes #12\n\nSome notes by a human.\n")
