"""git CLI 래퍼 — subprocess 기반 clone/checkout/commit/push.

- 모든 명령은 완료될 때까지 블로킹 실행
- 실패는 GitCommandError로 변환 (명령줄/stderr에서 토큰 마스킹)
- 커밋할 변경이 없으면 예외 대신 CommitResult.NOTHING_TO_COMMIT 반환
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable, Sequence
from enum import StrEnum
from pathlib import Path

logger = logging.getLogger(__name__)

_MASK = "***"


class GitCommandError(RuntimeError):
    """git 명령 실패."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"{' '.join(self.command)} exited with {returncode}{detail}")


class CommitResult(StrEnum):
    COMMITTED = "committed"
    NOTHING_TO_COMMIT = "nothing_to_commit"


def redact(text: str, secrets: Iterable[str]) -> str:
    """텍스트에서 비밀 값을 마스킹한다."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, _MASK)
    return text


def run_git(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    secrets: Iterable[str] = (),
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """git 명령을 실행한다.

    Raises:
        GitCommandError: git이 설치되지 않았거나 check=True에서 0이 아닌 종료 코드
    """
    secrets = tuple(secrets)
    cmd = ["git", *args]
    safe_cmd = [redact(part, secrets) for part in cmd]
    logger.debug("Running: %s", " ".join(safe_cmd))

    try:
        result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise GitCommandError(safe_cmd, 127, "git is not installed or not in PATH") from exc

    if check and result.returncode != 0:
        raise GitCommandError(safe_cmd, result.returncode, redact(result.stderr or "", secrets))
    return result


def clone(
    url: str,
    dest: Path,
    *,
    branch: str | None = None,
    secrets: Iterable[str] = (),
) -> GitRepo:
    """저장소를 dest로 clone하고 GitRepo를 반환한다."""
    secrets = tuple(secrets)
    args = ["clone"]
    if branch:
        args += ["--branch", branch]
    args += [url, str(dest)]
    logger.info("Cloning %s into %s", redact(url, secrets), dest)
    run_git(args, secrets=secrets)
    return GitRepo(dest, secrets=secrets)


class GitRepo:
    """로컬 작업 사본에 대한 git 작업."""

    def __init__(self, path: Path, *, secrets: Iterable[str] = ()) -> None:
        self.path = path
        self._secrets = tuple(secrets)

    def run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        return run_git(args, cwd=self.path, secrets=self._secrets, check=check)

    def checkout(self, ref: str) -> None:
        logger.info("Checking out %s", ref)
        self.run("checkout", "--quiet", ref)

    def configure_identity(self, user_name: str, user_email: str) -> None:
        self.run("config", "user.name", user_name)
        self.run("config", "user.email", user_email)

    def set_remote_url(self, url: str, remote: str = "origin") -> None:
        self.run("remote", "set-url", remote, url)

    def add(self, *paths: str) -> None:
        self.run("add", "--", *paths)

    def add_all(self) -> None:
        self.run("add", "-A")

    def has_staged_changes(self) -> bool:
        """스테이징된 변경이 있는지 확인한다 (git diff --cached --quiet: 0=없음, 1=있음)."""
        result = self.run("diff", "--cached", "--quiet", check=False)
        if result.returncode not in (0, 1):
            raise GitCommandError(
                ["git", "diff", "--cached", "--quiet"], result.returncode, result.stderr or ""
            )
        return result.returncode == 1

    def commit(self, message: str) -> CommitResult:
        """스테이징된 변경을 커밋한다. 변경이 없으면 커밋하지 않는다."""
        if not self.has_staged_changes():
            return CommitResult.NOTHING_TO_COMMIT
        self.run("commit", "--quiet", "-m", message)
        return CommitResult.COMMITTED

    def push(self, branch: str, remote: str = "origin") -> None:
        logger.info("Pushing to %s/%s", remote, branch)
        self.run("push", remote, f"HEAD:{branch}")
