"""프리뷰 저장소 동기화 — clone → 파일 변경 → commit → push.

- publish: {repo}/{pr}/ 를 비운 뒤 산출물을 복사하고 해당 서브트리만 스테이징
- cleanup: {repo}/{pr}/ 서브트리를 삭제 (없으면 no-op)
- 변경 없는 커밋(동일 산출물 재배포)은 오류가 아닌 no-op 성공
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from docs_preview.artifacts import ArtifactSet
from docs_preview.config import AppConfig, PreviewRepositoryConfig
from docs_preview.git import CommitResult, GitCommandError, GitRepo, clone
from docs_preview.paths import map_file

logger = logging.getLogger(__name__)


class SyncError(RuntimeError):
    """프리뷰 저장소 clone/commit/push 실패."""


@dataclass
class SyncResult:
    """동기화 결과."""

    preview_path: str
    files_copied: int = 0
    files_missing: list[str] = field(default_factory=list)
    removed: bool = False
    committed: bool = False
    pushed: bool = False
    dry_run: bool = False


def build_remote_url(config: PreviewRepositoryConfig, token: str) -> str:
    """토큰이 포함된 프리뷰 저장소 https URL을 만든다. url이 지정되면 그대로 사용한다."""
    if config.url:
        return config.url
    return f"https://{token}@{config.host}/{config.owner}/{config.name}.git"


def publish_message(target: PurePosixPath, commit_sha: str) -> str:
    repo_name, pr_number = target.parts
    return f"Update preview for {repo_name}#{pr_number} ({commit_sha[:7]})"


def cleanup_message(target: PurePosixPath) -> str:
    repo_name, pr_number = target.parts
    return f"Remove preview for {repo_name}#{pr_number}"


class PreviewSync:
    """공유 프리뷰 저장소에 대한 단일 변경 작업."""

    def __init__(
        self,
        config: AppConfig,
        token: str,
        clone_dir: Path,
        *,
        dry_run: bool = False,
    ) -> None:
        if not token:
            raise ValueError("token must not be empty")
        self._config = config
        self._repo_config = config.preview_repository
        self._token = token
        self._clone_dir = clone_dir
        self._dry_run = dry_run

    def _clone(self) -> GitRepo:
        url = build_remote_url(self._repo_config, self._token)
        logger.info("Cloning preview repository %s...", self._repo_config.full_name)
        repo = clone(url, self._clone_dir, branch=self._repo_config.branch, secrets=(self._token,))
        # push에도 토큰이 사용되도록 origin URL을 고정
        repo.set_remote_url(url)
        repo.configure_identity(self._config.git.user_name, self._config.git.user_email)
        return repo

    def _commit_and_push(self, repo: GitRepo, message: str, result: SyncResult) -> None:
        outcome = repo.commit(message)
        if outcome is CommitResult.NOTHING_TO_COMMIT:
            logger.info(
                "No changes to commit.",
                extra={"event_code": "NO_CHANGES", "preview_path": result.preview_path},
            )
            return

        result.committed = True
        if self._dry_run:
            logger.info("[DRY RUN] Would push %r to %s", message, self._repo_config.branch)
            return

        repo.push(self._repo_config.branch)
        result.pushed = True

    def publish(
        self,
        target: PurePosixPath,
        artifacts: ArtifactSet,
        *,
        commit_sha: str,
    ) -> SyncResult:
        """산출물을 프리뷰 경로 아래로 복사하고 commit/push한다.

        Raises:
            SyncError: clone/commit/push 실패
        """
        result = SyncResult(preview_path=str(target), dry_run=self._dry_run)

        try:
            repo = self._clone()

            # 이전 배포의 파일을 비워야 이름이 바뀌거나 삭제된 페이지가 남지 않는다
            target_dir = self._clone_dir / target
            if target_dir.exists():
                shutil.rmtree(target_dir)
            target_dir.mkdir(parents=True)

            logger.info("Copying HTML files to %s...", target)
            for source in artifacts.files:
                destination = self._clone_dir / map_file(source, artifacts.root, target)
                destination.parent.mkdir(parents=True, exist_ok=True)
                try:
                    shutil.copyfile(source, destination)
                except FileNotFoundError:
                    logger.error("Source file does not exist: %s", source)
                    result.files_missing.append(str(source))
                    continue
                result.files_copied += 1
                logger.debug("Copied: %s", destination.relative_to(self._clone_dir))

            repo.add(str(target))
            self._commit_and_push(repo, publish_message(target, commit_sha), result)
        except GitCommandError as exc:
            raise SyncError(f"Failed to publish preview {target}: {exc}") from exc

        return result

    def cleanup(self, target: PurePosixPath) -> SyncResult:
        """프리뷰 경로를 삭제하고 commit/push한다. 경로가 없으면 아무것도 하지 않는다.

        Raises:
            SyncError: clone/commit/push 실패
        """
        result = SyncResult(preview_path=str(target), dry_run=self._dry_run)

        try:
            repo = self._clone()

            target_dir = self._clone_dir / target
            if not target_dir.exists():
                logger.info("Preview folder %s does not exist. Nothing to clean up.", target)
                return result

            logger.info("Deleting %s...", target)
            shutil.rmtree(target_dir)
            result.removed = True

            repo.add_all()
            self._commit_and_push(repo, cleanup_message(target), result)
        except GitCommandError as exc:
            raise SyncError(f"Failed to remove preview {target}: {exc}") from exc

        return result
