"""例外の定義。

- SectionError: 入力(本文/識別子)の問題。コアが送出する
- EnvironmentFault: 対象PRの解決・認証・通信など実行環境の問題。アダプタが送出する

CLI はこの2系統を別の終了コードで報告する。
"""

from __future__ import annotations


class PrdescError(Exception):
    pass


class SectionError(PrdescError, ValueError):
    pass


class InvalidIdentifier(SectionError):
    def __init__(self, section_id: str, reason: str) -> None:
        super().__init__(f"invalid section id {section_id!r}: {reason}")
        self.section_id = section_id
        self.reason = reason


class MalformedSection(SectionError):
    def __init__(self, section_id: str, reason: str) -> None:
        super().__init__(f"malformed section {section_id!r}: {reason}")
        self.section_id = section_id
        self.reason = reason


class EnvironmentFault(PrdescError, RuntimeError):
    pass


class TargetNotFound(EnvironmentFault):
    pass


class AuthError(EnvironmentFault):
    pass


class StoreError(EnvironmentFault):
    pass
