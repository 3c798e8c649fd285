"""Slack 알림 모듈.

Slack Incoming Webhook으로 프리뷰 배포/정리 결과를 알린다.
- 재시도: 최대 2회, 1초 백오프
- 전송 실패는 로그만 남기고 워크플로 결과에 영향을 주지 않는다
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from docs_preview.config import AppConfig

logger = logging.getLogger(__name__)


@dataclass
class AlertMessage:
    """알림 메시지."""

    level: Literal["INFO", "WARN", "ERROR"]
    title: str
    text: str
    context: dict[str, Any] = field(default_factory=dict)


_LEVEL_EMOJI = {"INFO": ":information_source:", "WARN": ":warning:", "ERROR": ":rotating_light:"}

WEBHOOK_MAX_ATTEMPTS = 3
WEBHOOK_BACKOFF_SECONDS = 1.0
WEBHOOK_TIMEOUT_SECONDS = 10.0


def _format_alert(message: AlertMessage) -> dict[str, Any]:
    emoji = _LEVEL_EMOJI.get(message.level, "")
    return {"text": f"{emoji} *[{message.level}] {message.title}*\n{message.text}"}


def send_slack_webhook(message: AlertMessage, webhook_url: str) -> bool:
    """프리뷰 결과 알림을 Slack webhook으로 보낸다.

    실패하면 WEBHOOK_BACKOFF_SECONDS 간격으로 WEBHOOK_MAX_ATTEMPTS번까지 시도하고,
    끝내 실패하면 False를 반환한다. 예외는 밖으로 전파하지 않는다.
    """
    payload = _format_alert(message)

    for attempt in range(1, WEBHOOK_MAX_ATTEMPTS + 1):
        try:
            with httpx.Client(timeout=WEBHOOK_TIMEOUT_SECONDS) as client:
                client.post(webhook_url, json=payload).raise_for_status()
            return True
        except httpx.HTTPError as exc:
            logger.warning(
                "Slack webhook attempt %d/%d failed: %s", attempt, WEBHOOK_MAX_ATTEMPTS, exc
            )
            if attempt < WEBHOOK_MAX_ATTEMPTS:
                time.sleep(WEBHOOK_BACKOFF_SECONDS)

    logger.error("Slack notification for %r was not delivered", message.title)
    return False


def build_workflow_summary(
    workflow: str,
    preview_path: str,
    *,
    succeeded: bool,
    changed: bool = True,
    preview_url: str | None = None,
    error: str | None = None,
) -> AlertMessage:
    """워크플로 실행 요약 AlertMessage 생성."""
    if not succeeded:
        level: Literal["INFO", "WARN", "ERROR"] = "ERROR"
        status = "FAILED"
    else:
        level = "INFO"
        status = "SUCCESS" if changed else "NO CHANGES"

    lines = [
        f"Preview: {preview_path}",
        f"Status: {status}",
    ]
    if preview_url:
        lines.append(f"URL: {preview_url}")
    if error:
        lines.append(f"Error: {error}")

    return AlertMessage(
        level=level,
        title=f"Docs preview {workflow}: {preview_path}",
        text="\n".join(lines),
        context={"workflow": workflow, "preview_path": preview_path, "succeeded": succeeded},
    )


def notify(config: AppConfig, message: AlertMessage) -> bool:
    """웹훅 환경변수가 설정된 경우에만 전송한다."""
    webhook_url = os.environ.get(config.notify.slack_webhook_env_var, "")
    if not webhook_url:
        return False
    return send_slack_webhook(message, webhook_url)
