"""JSON 구조화 로깅 설정.

워크플로 단계마다 event_code를 extra로 남겨 CI 로그에서 필터링할 수 있게 한다.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

PACKAGE_LOGGER = "docs_preview"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# logger.info(..., extra={...})로 전달되어 JSON에 포함되는 필드
PREVIEW_FIELDS = (
    "event_code",
    "repository",
    "pr_number",
    "preview_path",
    "commit",
    "duration_ms",
    "counts",
)


class JsonFormatter(logging.Formatter):
    """로그 레코드를 한 줄 JSON으로 직렬화한다."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        entry: dict[str, Any] = {
            "timestamp": created.strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            {key: value for key in PREVIEW_FIELDS if (value := getattr(record, key, None)) is not None}
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(*, json_format: bool = True, level: int = logging.INFO) -> None:
    """docs_preview 로거에 핸들러 하나를 설정한다. 여러 번 호출해도 핸들러는 하나만 남는다.

    Args:
        json_format: False이면 사람이 읽는 텍스트 포맷 (--no-json-log)
        level: 로그 레벨
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
