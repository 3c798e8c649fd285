"""이벤트 정규화 + 라우팅.

- 원시 payload(JSON 문자열/bytes/dict)를 PullRequestEvent로 변환
- 필수 필드(action, repository, pull_request) 누락은 치명적 검증 오류
- 모니터링 대상 여부와 action으로 실행할 워크플로를 결정
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Any

import orjson
from pydantic import ValidationError

from docs_preview.config import AppConfig
from docs_preview.models import Action, PullRequestEvent

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("action", "repository", "pull_request")

PAYLOAD_ENV_VAR = "GITHUB_EVENT_PAYLOAD"
PAYLOAD_PATH_ENV_VAR = "GITHUB_EVENT_PATH"


class EventValidationError(ValueError):
    """이벤트 payload 검증 실패."""


class Route(StrEnum):
    PUBLISH = "publish"
    CLEANUP = "cleanup"
    SKIP = "skip"


_ACTION_ROUTES = {
    Action.OPENED: Route.PUBLISH,
    Action.SYNCHRONIZE: Route.PUBLISH,
    Action.CLOSED: Route.CLEANUP,
    Action.MERGED: Route.CLEANUP,
}


def parse_event(raw: str | bytes | Mapping[str, Any]) -> PullRequestEvent:
    """원시 payload를 검증하여 PullRequestEvent를 반환한다.

    Raises:
        EventValidationError: JSON 파싱 실패, 필수 필드 누락/null, 중첩 필드 형식 오류
    """
    if isinstance(raw, (str, bytes)):
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            raise EventValidationError(f"Event payload is not valid JSON: {exc}") from exc
    else:
        data = dict(raw)

    if not isinstance(data, dict):
        raise EventValidationError("Event payload must be a JSON object")

    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if missing:
        raise EventValidationError(
            f"Missing required event payload fields: {', '.join(missing)}"
        )

    try:
        return PullRequestEvent.model_validate(data)
    except ValidationError as exc:
        raise EventValidationError(f"Invalid event payload: {exc}") from exc


def read_event_payload(
    event: str | None = None,
    event_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> str | bytes:
    """이벤트 payload 원문을 찾는다.

    우선순위: --event 인자 > --event-file > GITHUB_EVENT_PAYLOAD > GITHUB_EVENT_PATH
    """
    env = os.environ if environ is None else environ

    if event:
        return event
    if event_file is not None:
        return event_file.read_bytes()
    if payload := env.get(PAYLOAD_ENV_VAR):
        return payload
    if payload_path := env.get(PAYLOAD_PATH_ENV_VAR):
        return Path(payload_path).read_bytes()

    raise EventValidationError(
        f"No event payload: pass --event/--event-file or set {PAYLOAD_ENV_VAR}"
    )


def is_monitored(repository_name: str, config: AppConfig) -> bool:
    """저장소 이름이 모니터링 대상 목록에 있는지 확인한다."""
    return repository_name in set(config.monitored_repositories)


def route_event(event: PullRequestEvent, config: AppConfig) -> Route:
    """이벤트를 실행할 워크플로로 매핑한다.

    모니터링 대상이 아니거나 처리하지 않는 action이면 Route.SKIP (정상 종료).
    """
    if not is_monitored(event.repo_name, config):
        logger.info(
            "Repository %s is not in monitored list. Skipping.",
            event.repo_name,
            extra={"event_code": "EVENT_SKIPPED", "repository": event.repo_name},
        )
        return Route.SKIP

    route = _ACTION_ROUTES.get(event.action, Route.SKIP)
    if route is Route.SKIP:
        logger.info(
            "Action %s not handled. Skipping.",
            event.action,
            extra={"event_code": "EVENT_SKIPPED", "repository": event.repo_name},
        )
    return route
