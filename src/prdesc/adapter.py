"""PR本文の read → patch → write を1回分行う。

同一プロセス内では同じPRへの read-modify-write を直列化する。
別ホストとの競合解決はしない（常に最新の本文を読んでから書く）。
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from prdesc.github_ops import BodyStore
from prdesc.markers import DEFAULT_TOOL_IDENTITY
from prdesc.patcher import find_sections, patch, read_section

log = logging.getLogger(__name__)

_LOCKS: dict[tuple[str, int], threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(store: BodyStore, number: int) -> threading.Lock:
    key = (store.repo, number)
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.Lock()
        return lock


@dataclass
class UpdateResult:
    was_update: bool
    changed: bool
    body: str


def update_section(
    store: BodyStore,
    number: int,
    section_id: str,
    content: str,
    *,
    tool_identity: str = DEFAULT_TOOL_IDENTITY,
    dry_run: bool = False,
) -> UpdateResult:
    with _lock_for(store, number):
        current = store.get_body(number)
        body, was_update = patch(current, section_id, content, tool_identity=tool_identity)
        changed = body != current

        if not changed:
            log.info("%s#%d: section %r unchanged", store.repo, number, section_id)
        elif dry_run:
            log.info("%s#%d: dry-run, not writing section %r", store.repo, number, section_id)
        else:
            store.set_body(number, body)
            log.info(
                "%s#%d: %s section %r",
                store.repo, number, "updated" if was_update else "created", section_id,
            )
        return UpdateResult(was_update=was_update, changed=changed, body=body)


def get_section(store: BodyStore, number: int, section_id: str) -> str | None:
    return read_section(store.get_body(number), section_id)


def list_sections(store: BodyStore, number: int) -> list[str]:
    return [s.section_id for s in find_sections(store.get_body(number))]
