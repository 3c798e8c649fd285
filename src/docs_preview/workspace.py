"""워크플로 단위 임시 작업 디렉터리."""

from __future__ import annotations

import logging
import shutil
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


@contextmanager
def workspace(prefix: str, *, keep: bool = False, base_dir: Path | None = None) -> Iterator[Path]:
    """고유한 이름의 임시 디렉터리를 만들고, 성공/실패와 무관하게 종료 시 삭제한다.

    Args:
        prefix: 디렉터리 이름 접두사 (예: "preview", "preview-repo")
        keep: True이면 삭제하지 않는다 (디버깅용)
        base_dir: 생성 위치 (기본: 시스템 임시 디렉터리)
    """
    path = Path(tempfile.mkdtemp(prefix=f"{prefix}-{int(time.time() * 1000)}-", dir=base_dir))
    logger.debug("Created workspace %s", path)
    try:
        yield path
    finally:
        if keep:
            logger.info("Keeping workspace %s", path)
        else:
            _remove(path)


def _remove(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except OSError as exc:
        logger.warning("Failed to remove workspace %s: %s", path, exc)
