"""click CLI 엔트리포인트.

docs-preview handle 명령으로 pull_request 이벤트 하나를 처리합니다.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import yaml

from docs_preview.artifacts import NoArtifactsError, locate_artifacts
from docs_preview.builder import resolve_build
from docs_preview.config import load_config
from docs_preview.events import EventValidationError, parse_event, read_event_payload
from docs_preview.logging_config import setup_logging
from docs_preview.paths import map_file, preview_path
from docs_preview.workflow import handle_event

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version="0.1.0", prog_name="docs-preview")
def main() -> None:
    """Docs Preview - PR 문서 빌드 결과를 프리뷰 저장소에 배포합니다."""


@main.command()
@click.option("--event", "event_json", default=None, help="이벤트 payload JSON 문자열")
@click.option(
    "--event-file",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="이벤트 payload JSON 파일 경로",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="설정 파일 경로 (기본: 프로젝트 루트 config.yaml)",
)
@click.option("--dry-run", is_flag=True, default=False, help="커밋까지만 하고 push하지 않음")
@click.option("--keep-workspace", is_flag=True, default=False, help="임시 작업 디렉터리를 삭제하지 않음")
@click.option("--json-log/--no-json-log", default=True, help="JSON 로그 포맷 (기본: 활성)")
def handle(
    event_json: str | None,
    event_file: Path | None,
    config_path: Path | None,
    dry_run: bool,
    keep_workspace: bool,
    json_log: bool,
) -> None:
    """pull_request 이벤트를 처리합니다.

    opened/synchronize는 프리뷰를 배포하고, closed/merged는 프리뷰를 삭제합니다.
    모니터링 대상이 아닌 저장소나 처리하지 않는 action은 정상 종료(0)합니다.
    """
    setup_logging(json_format=json_log)

    try:
        event = parse_event(read_event_payload(event_json, event_file))
    except (EventValidationError, OSError) as exc:
        logger.error("Invalid event payload: %s", exc, extra={"event_code": "WORKFLOW_FAILED"})
        sys.exit(1)

    try:
        config = load_config(config_path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.error("Failed to load config: %s", exc, extra={"event_code": "WORKFLOW_FAILED"})
        sys.exit(1)

    try:
        result = handle_event(
            event,
            config,
            dry_run=dry_run,
            keep_workspace=keep_workspace,
        )
    except Exception:
        logger.exception(
            "Error handling %s event for %s#%d",
            event.action,
            event.repo_name,
            event.pr_number,
            extra={
                "event_code": "WORKFLOW_FAILED",
                "repository": event.repo_name,
                "pr_number": event.pr_number,
            },
        )
        sys.exit(1)

    click.echo(f"{result.route}: {result.preview_path or event.repo_name}")


@main.command()
@click.argument(
    "source_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("--repo", "repo_name", default=None, help="프리뷰 경로 표시용 저장소 이름 (기본: 디렉터리 이름)")
@click.option("--pr", "pr_number", default=1, type=int, help="프리뷰 경로 표시용 PR 번호")
@click.option("--skip-build", is_flag=True, default=False, help="빌드 없이 산출물 탐색만 수행")
@click.option("--json-log/--no-json-log", default=False, help="JSON 로그 포맷 (기본: 비활성)")
def build(
    source_dir: Path,
    repo_name: str | None,
    pr_number: int,
    skip_build: bool,
    json_log: bool,
) -> None:
    """로컬 체크아웃에서 빌드 스크립트 탐색/실행 후 산출물 배치를 출력합니다."""
    setup_logging(json_format=json_log)

    root = source_dir.resolve()
    try:
        target = preview_path(repo_name or root.name, pr_number)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    if not skip_build:
        outcome = resolve_build(root)
        if outcome.executed:
            click.echo(f"Build: {outcome.script_used}")
        else:
            click.echo("Build: no build script found", err=True)

    try:
        artifacts = locate_artifacts(root)
    except NoArtifactsError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)

    click.echo(f"Artifacts ({len(artifacts)} in {artifacts.source_dir}):")
    for source in artifacts:
        click.echo(f"  {source.relative_to(root)} -> {map_file(source, root, target)}")


@main.command(name="preview-path")
@click.argument("repo_name")
@click.argument("pr_number", type=int)
def preview_path_command(repo_name: str, pr_number: int) -> None:
    """저장소 이름과 PR 번호에 대한 프리뷰 경로를 출력합니다."""
    try:
        click.echo(str(preview_path(repo_name, pr_number)))
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
