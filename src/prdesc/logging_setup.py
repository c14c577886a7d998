"""logging の初期化。

- stderr: 常に出す（Actions のログにそのまま載る）
- ファイル: `log_file` 指定時のみ RotatingFileHandler

トークンはどのログにも出さない。
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging(*, level: str = "INFO", log_file: Path | None = None) -> None:
    # 既に設定済みなら二重設定しない
    if getattr(setup_logging, "_configured", False):
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(fmt)
    root_logger.addHandler(stream)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=2_000_000,
            backupCount=3,
            encoding="utf-8",
        )
        handler.setFormatter(fmt)
        root_logger.addHandler(handler)

    # noisy lib
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    setup_logging._configured = True  # type: ignore[attr-defined]
