"""워크플로 오케스트레이션.

Publish: 소스 clone → 빌드 스크립트 실행 → HTML 탐색 → 프리뷰 저장소 동기화
Cleanup: 프리뷰 저장소 clone → 프리뷰 경로 삭제 → commit/push

각 호출은 이벤트 하나를 처음부터 끝까지 처리하며 상태를 남기지 않는다.
작업 디렉터리는 성공/실패와 무관하게 정리된다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from docs_preview.artifacts import locate_artifacts
from docs_preview.builder import BuildOutcome, resolve_build
from docs_preview.config import AppConfig, resolve_token
from docs_preview.events import Route, route_event
from docs_preview.git import GitCommandError, GitRepo, clone
from docs_preview.models import PullRequestEvent
from docs_preview.notify import build_workflow_summary, notify
from docs_preview.paths import preview_path
from docs_preview.sync import PreviewSync, SyncResult
from docs_preview.workspace import workspace

logger = logging.getLogger(__name__)


@dataclass
class WorkflowResult:
    """이벤트 처리 결과."""

    route: Route
    preview_path: str | None = None
    build: BuildOutcome | None = None
    artifact_count: int = 0
    sync: SyncResult | None = None


def source_clone_url(config: AppConfig, event: PullRequestEvent) -> str:
    return config.source.url_template.format(
        full_name=event.repository.full_name,
        owner=event.repository.owner.login,
        name=event.repository.name,
    )


def preview_url(config: AppConfig, target: PurePosixPath) -> str | None:
    base = config.preview_repository.pages_base_url
    if not base:
        return None
    return f"{base.rstrip('/')}/{target}/"


def _checkout_source(repo: GitRepo, event: PullRequestEvent) -> None:
    """대상 커밋을 체크아웃한다. 포크 PR 커밋이 없으면 pull/{n}/head를 fetch 후 재시도."""
    try:
        repo.checkout(event.head_sha)
    except GitCommandError:
        logger.info("Commit %s not found, fetching pull/%d/head", event.short_sha, event.pr_number)
        repo.run("fetch", "--quiet", "origin", f"pull/{event.pr_number}/head")
        repo.checkout(event.head_sha)


def run_publish(
    event: PullRequestEvent,
    config: AppConfig,
    token: str,
    *,
    dry_run: bool = False,
    keep_workspace: bool = False,
    workspace_base: Path | None = None,
) -> WorkflowResult:
    """PR 커밋에서 문서를 빌드하여 프리뷰 경로에 배포한다."""
    target = preview_path(event.repo_name, event.pr_number)
    result = WorkflowResult(route=Route.PUBLISH, preview_path=str(target))

    with (
        workspace("preview", keep=keep_workspace, base_dir=workspace_base) as source_dir,
        workspace("preview-repo", keep=keep_workspace, base_dir=workspace_base) as clone_dir,
    ):
        logger.info("Cloning %s at commit %s...", event.repository.full_name, event.head_sha)
        source_repo = clone(source_clone_url(config, event), source_dir)
        _checkout_source(source_repo, event)

        result.build = resolve_build(source_dir)
        if not result.build.executed:
            logger.warning(
                "No build script found. Looking for HTML files in common directories...",
                extra={"event_code": "BUILD_NOT_FOUND", "repository": event.repo_name},
            )

        # 산출물 경로는 여기서 절대 경로로 확정된다
        artifacts = locate_artifacts(source_dir)
        result.artifact_count = len(artifacts)

        syncer = PreviewSync(config, token, clone_dir, dry_run=dry_run)
        result.sync = syncer.publish(target, artifacts, commit_sha=event.head_sha)

    logger.info(
        "Preview updated for %s#%d",
        event.repo_name,
        event.pr_number,
        extra={
            "event_code": "PREVIEW_PUBLISHED",
            "repository": event.repo_name,
            "pr_number": event.pr_number,
            "preview_path": str(target),
            "commit": event.short_sha,
            "counts": {
                "files_copied": result.sync.files_copied,
                "files_missing": len(result.sync.files_missing),
            },
        },
    )
    if url := preview_url(config, target):
        logger.info("Preview available at %s", url)
    return result


def run_cleanup(
    event: PullRequestEvent,
    config: AppConfig,
    token: str,
    *,
    dry_run: bool = False,
    keep_workspace: bool = False,
    workspace_base: Path | None = None,
) -> WorkflowResult:
    """PR의 프리뷰 경로를 프리뷰 저장소에서 삭제한다."""
    target = preview_path(event.repo_name, event.pr_number)
    result = WorkflowResult(route=Route.CLEANUP, preview_path=str(target))

    with workspace(
        "preview-repo-cleanup", keep=keep_workspace, base_dir=workspace_base
    ) as clone_dir:
        syncer = PreviewSync(config, token, clone_dir, dry_run=dry_run)
        result.sync = syncer.cleanup(target)

    logger.info(
        "Preview cleanup completed for %s#%d",
        event.repo_name,
        event.pr_number,
        extra={
            "event_code": "PREVIEW_REMOVED",
            "repository": event.repo_name,
            "pr_number": event.pr_number,
            "preview_path": str(target),
        },
    )
    return result


def handle_event(
    event: PullRequestEvent,
    config: AppConfig,
    *,
    dry_run: bool = False,
    keep_workspace: bool = False,
    workspace_base: Path | None = None,
) -> WorkflowResult:
    """이벤트를 라우팅하여 워크플로 하나를 실행한다.

    Raises:
        MissingCredentialError: 토큰 미설정 (어떤 clone보다 먼저 확인)
        그 외 워크플로 단계에서 발생한 예외는 그대로 전파된다
    """
    route = route_event(event, config)
    if route is Route.SKIP:
        return WorkflowResult(route=route)

    logger.info(
        "Processing PR #%d from %s (action: %s)",
        event.pr_number,
        event.repository.full_name,
        event.action,
        extra={"repository": event.repo_name, "pr_number": event.pr_number},
    )
    token = resolve_token(config)
    runner = run_publish if route is Route.PUBLISH else run_cleanup
    target = str(preview_path(event.repo_name, event.pr_number))

    try:
        result = runner(
            event,
            config,
            token,
            dry_run=dry_run,
            keep_workspace=keep_workspace,
            workspace_base=workspace_base,
        )
    except Exception as exc:
        notify(
            config,
            build_workflow_summary(route, target, succeeded=False, error=str(exc)),
        )
        raise

    changed = result.sync is not None and result.sync.committed
    notify(
        config,
        build_workflow_summary(
            route,
            target,
            succeeded=True,
            changed=changed,
            preview_url=preview_url(config, PurePosixPath(target)) if route is Route.PUBLISH else None,
        ),
    )
    return result
