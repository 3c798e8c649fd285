"""공통 fixture."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Any

import pytest
import yaml

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")


def git(*args: str, cwd: Path) -> str:
    """테스트용 git 실행 헬퍼 (커밋 작성자 고정)."""
    result = subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def commit_all(repo: Path, message: str) -> str:
    """작업 트리 전체를 커밋하고 SHA를 반환한다."""
    git("add", "-A", cwd=repo)
    git("commit", "-q", "-m", message, cwd=repo)
    return git("rev-parse", "HEAD", cwd=repo)


def init_repo(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    git("init", "-q", cwd=path)
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=path)
    return path


@pytest.fixture()
def sample_event_data() -> dict[str, Any]:
    """정상 pull_request 이벤트 JSON 샘플."""
    return {
        "action": "opened",
        "number": 42,
        "repository": {
            "id": 100,
            "name": "libx",
            "full_name": "boostorg/libx",
            "owner": {"login": "boostorg", "id": 200},
        },
        "pull_request": {
            "number": 42,
            "title": "Improve docs",
            "head": {"sha": "abc1234def5678900000000000000000000000ff", "ref": "feature"},
        },
        "organization": {"login": "boostorg", "id": 200},
    }


@pytest.fixture()
def sample_config_data() -> dict[str, Any]:
    """테스트용 config dict."""
    return {
        "monitored_repositories": ["libx", "liby"],
        "preview_repository": {"owner": "cppalliance", "name": "docs-previews"},
    }


@pytest.fixture()
def tmp_config_file(tmp_path: Path, sample_config_data: dict[str, Any]) -> Path:
    """임시 YAML 설정 파일."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(sample_config_data), encoding="utf-8")
    return config_path


@pytest.fixture()
def preview_remote(tmp_path: Path) -> Path:
    """main 브랜치에 README 하나가 있는 bare 프리뷰 저장소."""
    remote = tmp_path / "previews.git"
    remote.mkdir()
    git("init", "-q", "--bare", cwd=remote)
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=remote)

    seed = init_repo(tmp_path / "seed")
    (seed / "README.md").write_text("# previews\n", encoding="utf-8")
    commit_all(seed, "Initial commit")
    git("push", "-q", str(remote), "main", cwd=seed)
    return remote


def remote_files(remote: Path) -> list[str]:
    """bare 저장소 main 브랜치의 파일 목록."""
    output = git("ls-tree", "-r", "--name-only", "main", cwd=remote)
    return sorted(line for line in output.splitlines() if line)


def remote_commit_count(remote: Path) -> int:
    return int(git("rev-list", "--count", "main", cwd=remote))
