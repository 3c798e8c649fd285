"""프리뷰 경로 매핑.

프리뷰 저장소 트리 구조: {repository_name}/{pr_number}/{소스 저장소 기준 상대 경로}
같은 (저장소, PR)은 커밋과 무관하게 항상 같은 경로로 매핑되어 재배포 시 덮어쓴다.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath


def preview_path(repository_name: str, pr_number: int) -> PurePosixPath:
    """(저장소 이름, PR 번호)에 대한 프리뷰 경로를 반환한다.

    Raises:
        ValueError: 저장소 이름이 단일 경로 구성요소가 아니거나 PR 번호가 양수가 아닌 경우
    """
    if not repository_name or "/" in repository_name or "\\" in repository_name:
        raise ValueError(f"Invalid repository name: {repository_name!r}")
    if repository_name in (".", ".."):
        raise ValueError(f"Invalid repository name: {repository_name!r}")
    if pr_number <= 0:
        raise ValueError(f"Invalid pull request number: {pr_number}")
    return PurePosixPath(repository_name) / str(pr_number)


def map_file(source_file: Path, workspace_root: Path, target: PurePosixPath) -> PurePosixPath:
    """소스 파일을 프리뷰 경로 아래의 대상 경로로 매핑한다.

    워크스페이스 루트 기준 상대 경로를 그대로 유지하므로 문서 간 상대 링크가 깨지지 않는다.

    Raises:
        ValueError: 소스 파일이 워크스페이스 밖에 있는 경우
    """
    relative = source_file.absolute().relative_to(workspace_root.absolute())
    return target / PurePosixPath(*relative.parts)
