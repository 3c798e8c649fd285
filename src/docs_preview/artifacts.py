"""빌드 산출물(HTML) 탐색."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

HTML_SUFFIX = ".html"

# 문서 도구 전용 디렉터리 > 일반 빌드 출력 디렉터리 > 저장소 루트
OUTPUT_DIR_CANDIDATES: tuple[str, ...] = (
    "doc/html",
    "dist",
    "output",
    "docs/html",
    "build",
    "html",
    ".",
)


class NoArtifactsError(RuntimeError):
    """어떤 후보 디렉터리에서도 HTML 파일을 찾지 못했다."""


@dataclass
class ArtifactSet:
    """하나의 출력 디렉터리에서 발견된 HTML 파일 목록.

    - root: 소스 저장소 루트 (프리뷰 경로 매핑 기준)
    - source_dir: 파일이 발견된 후보 디렉터리 이름
    - files: 절대 경로, 정렬됨, 항상 1개 이상
    """

    root: Path
    source_dir: str
    files: list[Path] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.files)


def find_html_files(directory: Path) -> list[Path]:
    """디렉터리를 재귀 탐색하여 .html 파일의 절대 경로를 반환한다.

    심볼릭 링크는 따라가지 않고 발견된 위치 그대로의 경로를 유지한다.
    """
    found: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(directory):
        for name in filenames:
            if name.endswith(HTML_SUFFIX):
                path = Path(dirpath) / name
                if path.is_file():
                    found.append(path.absolute())
    return sorted(found)


def locate_artifacts(
    workspace_root: Path,
    candidates: tuple[str, ...] = OUTPUT_DIR_CANDIDATES,
) -> ArtifactSet:
    """후보 디렉터리를 순서대로 확인하여 HTML 파일이 있는 첫 디렉터리의 파일을 반환한다.

    "가장 많은" 디렉터리가 아니라 "HTML이 하나라도 있는 첫 디렉터리"가 선택된다.

    Raises:
        NoArtifactsError: 모든 후보에서 HTML 파일이 없는 경우
    """
    root = workspace_root.resolve()

    for candidate in candidates:
        directory = root / candidate
        if not directory.is_dir():
            continue

        files = find_html_files(directory)
        if files:
            logger.info(
                "Found %d HTML files in %s",
                len(files),
                candidate,
                extra={"event_code": "ARTIFACTS_FOUND", "counts": {"html_files": len(files)}},
            )
            return ArtifactSet(root=root, source_dir=candidate, files=files)

    raise NoArtifactsError(
        "No HTML files found. Build script may not have generated output. "
        f"Checked: {', '.join(candidates)}"
    )
