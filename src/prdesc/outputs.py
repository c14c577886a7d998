"""GitHub Actions のステップ出力 (`$GITHUB_OUTPUT`) への書き込み。"""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Mapping
from pathlib import Path

log = logging.getLogger(__name__)


def _render(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def write_outputs(values: Mapping[str, object], env: Mapping[str, str] | None = None) -> Path | None:
    if env is None:
        env = os.environ
    path = env.get("GITHUB_OUTPUT", "")
    if not path:
        return None

    p = Path(path)
    with p.open("a", encoding="utf-8") as f:
        for key, value in values.items():
            text = _render(value)
            if "\n" in text:
                delim = f"ghadelimiter_{uuid.uuid4().hex}"
                f.write(f"{key}<<{delim}\n{text}\n{delim}\n")
            else:
                f.write(f"{key}={text}\n")
    log.debug("wrote outputs %s to %s", sorted(values), p)
    return p
