"""문서 빌드 스크립트 탐색 + 실행.

후보 목록을 순서대로 시도하여 처음 성공한 빌드를 사용한다.
- ScriptCandidate: 파일 존재 여부를 먼저 확인, 스크립트가 있는 디렉터리에서 실행
- CommandCandidate: 존재 확인 없이 저장소 루트에서 실행, 실패하면 다음 후보로
"""

from __future__ import annotations

import logging
import stat
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)


class BuildScriptError(RuntimeError):
    """발견된 빌드 스크립트가 실패했을 때 발생한다."""


# ── 후보 정의 ─────────────────────────────────────────


@dataclass(frozen=True)
class ScriptCandidate:
    """저장소 내 상대 경로의 빌드 스크립트 (존재 확인 후 실행)."""

    path: str
    kind: Literal["script"] = "script"

    def interpreter(self) -> list[str]:
        if self.path.endswith(".ps1"):
            return ["pwsh", "-NoProfile", "-File"]
        return ["bash"]


@dataclass(frozen=True)
class CommandCandidate:
    """존재 확인 없이 시도하는 일반 빌드 명령."""

    argv: tuple[str, ...]
    kind: Literal["command"] = "command"

    @property
    def label(self) -> str:
        return " ".join(self.argv)


BuildCandidate = ScriptCandidate | CommandCandidate

# Antora 전용 스크립트 > doc/ 아래 일반 스크립트 > 루트 일반 스크립트 > 명령 순
BUILD_CANDIDATES: tuple[BuildCandidate, ...] = (
    ScriptCandidate("doc/antora_docs.sh"),
    ScriptCandidate("doc/build_antora.sh"),
    ScriptCandidate("doc/build_antora.ps1"),
    ScriptCandidate("doc/build.sh"),
    ScriptCandidate("doc/generate-docs.sh"),
    ScriptCandidate("doc/build-docs.sh"),
    ScriptCandidate("build-docs.sh"),
    ScriptCandidate("generate-docs.sh"),
    ScriptCandidate("build.sh"),
    CommandCandidate(("npm", "run", "build-docs")),
    CommandCandidate(("npm", "run", "generate-docs")),
    CommandCandidate(("python", "generate_docs.py")),
    ScriptCandidate("generate.sh"),
)


@dataclass
class BuildOutcome:
    """빌드 탐색 결과."""

    executed: bool = False
    script_used: str | None = None
    candidate_kind: Literal["script", "command"] | None = None
    duration_ms: float = 0.0


# ── 내부 헬퍼 함수 ────────────────────────────────────────


def _normalize_line_endings(script_path: Path) -> None:
    """CRLF 줄바꿈을 LF로 변환한다. 실패해도 빌드는 계속 진행한다."""
    try:
        content = script_path.read_bytes()
        if b"\r\n" in content:
            script_path.write_bytes(content.replace(b"\r\n", b"\n"))
            logger.debug("Normalized line endings: %s", script_path)
    except OSError as exc:
        logger.debug("Could not normalize line endings for %s: %s", script_path, exc)


def _make_executable(script_path: Path) -> None:
    mode = script_path.stat().st_mode
    script_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def _run_script(candidate: ScriptCandidate, script_path: Path) -> None:
    """스크립트를 자신이 위치한 디렉터리를 cwd로 실행한다."""
    _normalize_line_endings(script_path)
    _make_executable(script_path)

    cmd = [*candidate.interpreter(), str(script_path)]
    logger.info("Executing: %s", candidate.path)
    try:
        subprocess.run(cmd, cwd=script_path.parent, check=True)
    except FileNotFoundError as exc:
        raise BuildScriptError(
            f"Interpreter {cmd[0]!r} for {candidate.path} is not installed or not in PATH"
        ) from exc
    except subprocess.CalledProcessError as exc:
        raise BuildScriptError(
            f"Build script {candidate.path} failed with exit code {exc.returncode}"
        ) from exc


def _try_command(candidate: CommandCandidate, workspace_root: Path) -> bool:
    """명령을 저장소 루트에서 시도한다. 실패는 삼키고 False를 반환한다."""
    logger.info("Trying: %s", candidate.label)
    try:
        subprocess.run(list(candidate.argv), cwd=workspace_root, check=True)
    except (subprocess.CalledProcessError, FileNotFoundError) as exc:
        logger.debug("Build command %s failed: %s", candidate.label, exc)
        return False
    return True


# ── 메인 함수 ──────────────────────────────────────────


def resolve_build(
    workspace_root: Path,
    candidates: tuple[BuildCandidate, ...] = BUILD_CANDIDATES,
) -> BuildOutcome:
    """후보 목록을 순서대로 시도하여 첫 번째로 성공한 빌드를 실행한다.

    Args:
        workspace_root: 대상 커밋으로 체크아웃된 소스 저장소 루트
        candidates: 시도할 후보 목록 (순서가 우선순위)

    Returns:
        BuildOutcome. 어떤 후보도 성공하지 못하면 executed=False (오류 아님)

    Raises:
        BuildScriptError: 존재하는 스크립트가 실행에 실패한 경우
    """
    root = workspace_root.resolve()
    start = time.monotonic()
    logger.info("Looking for build script in %s", root)

    for candidate in candidates:
        if isinstance(candidate, ScriptCandidate):
            script_path = root / candidate.path
            if not script_path.is_file():
                continue
            logger.info("Found build script: %s", candidate.path)
            _run_script(candidate, script_path)
            label = candidate.path
        else:
            if not _try_command(candidate, root):
                continue
            label = candidate.label

        duration_ms = (time.monotonic() - start) * 1000
        logger.info(
            "Build finished with %s",
            label,
            extra={"event_code": "BUILD_EXECUTED", "duration_ms": round(duration_ms)},
        )
        return BuildOutcome(
            executed=True,
            script_used=label,
            candidate_kind=candidate.kind,
            duration_ms=duration_ms,
        )

    return BuildOutcome(executed=False, duration_ms=(time.monotonic() - start) * 1000)

