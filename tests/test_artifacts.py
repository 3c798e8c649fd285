"""산출물 탐색 테스트."""

from __future__ import annotations

from pathlib import Path

import pytest
from docs_preview.artifacts import (
    OUTPUT_DIR_CANDIDATES,
    NoArtifactsError,
    find_html_files,
    locate_artifacts,
)


def _touch(root: Path, relative: str, content: str = "<html></html>") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class TestFindHtmlFiles:
    """재귀 탐색 테스트."""

    def test_recursive(self, tmp_path: Path) -> None:
        _touch(tmp_path, "index.html")
        _touch(tmp_path, "a/b/c/deep.html")
        _touch(tmp_path, "a/style.css")
        _touch(tmp_path, "a/notes.htm")

        files = find_html_files(tmp_path)

        assert [f.relative_to(tmp_path).as_posix() for f in files] == [
            "a/b/c/deep.html",
            "index.html",
        ]
        assert all(f.is_absolute() for f in files)

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert find_html_files(tmp_path) == []


class TestLocateArtifacts:
    """후보 디렉터리 우선순위 테스트."""

    def test_doc_html_first(self, tmp_path: Path) -> None:
        _touch(tmp_path, "doc/html/guide.html")
        _touch(tmp_path, "dist/index.html")

        artifacts = locate_artifacts(tmp_path)

        assert artifacts.source_dir == "doc/html"
        assert [f.name for f in artifacts] == ["guide.html"]
        assert artifacts.root == tmp_path.resolve()

    def test_first_with_html_not_largest(self, tmp_path: Path) -> None:
        _touch(tmp_path, "dist/one.html")
        for i in range(5):
            _touch(tmp_path, f"build/page{i}.html")

        artifacts = locate_artifacts(tmp_path)

        assert artifacts.source_dir == "dist"
        assert len(artifacts) == 1

    def test_existing_dir_without_html_is_skipped(self, tmp_path: Path) -> None:
        _touch(tmp_path, "doc/html/readme.txt")
        _touch(tmp_path, "output/index.html")

        artifacts = locate_artifacts(tmp_path)

        assert artifacts.source_dir == "output"

    def test_root_fallback(self, tmp_path: Path) -> None:
        _touch(tmp_path, "site/index.html")

        artifacts = locate_artifacts(tmp_path)

        assert artifacts.source_dir == "."
        assert artifacts.files == [(tmp_path / "site/index.html").resolve()]

    def test_no_html_raises(self, tmp_path: Path) -> None:
        _touch(tmp_path, "dist/app.js")
        _touch(tmp_path, "README.md")

        with pytest.raises(NoArtifactsError, match="No HTML files found"):
            locate_artifacts(tmp_path)

    def test_candidate_order(self) -> None:
        assert OUTPUT_DIR_CANDIDATES[0] == "doc/html"
        assert OUTPUT_DIR_CANDIDATES[-1] == "."

    def test_symlinked_output_dir_keeps_found_location(self, tmp_path: Path) -> None:
        _touch(tmp_path, "build/site/guide.html")
        (tmp_path / "doc").mkdir()
        (tmp_path / "doc" / "html").symlink_to(tmp_path / "build" / "site", target_is_directory=True)

        artifacts = locate_artifacts(tmp_path)

        assert artifacts.source_dir == "doc/html"
        assert [f.relative_to(artifacts.root).as_posix() for f in artifacts] == ["doc/html/guide.html"]
