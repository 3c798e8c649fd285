"""빌드 스크립트 탐색 테스트."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from docs_preview.builder import (
    BUILD_CANDIDATES,
    BuildScriptError,
    CommandCandidate,
    ScriptCandidate,
    _normalize_line_endings,
    resolve_build,
)

from conftest import requires_bash


def _write_script(root: Path, relative: str, body: str, *, crlf: bool = False) -> Path:
    script = root / relative
    script.parent.mkdir(parents=True, exist_ok=True)
    text = "#!/bin/bash\nset -e\n" + body + "\n"
    if crlf:
        text = text.replace("\n", "\r\n")
    script.write_bytes(text.encode())
    return script


# ── TestCandidateOrder ─────────────────────────────────────


class TestCandidateOrder:
    """후보 목록 순서 테스트."""

    def test_antora_scripts_first(self) -> None:
        first = [c.path for c in BUILD_CANDIDATES[:3] if isinstance(c, ScriptCandidate)]
        assert first == ["doc/antora_docs.sh", "doc/build_antora.sh", "doc/build_antora.ps1"]

    def test_doc_scripts_before_generic(self) -> None:
        paths = [c.path for c in BUILD_CANDIDATES if isinstance(c, ScriptCandidate)]
        assert paths.index("doc/build_antora.sh") < paths.index("build.sh")
        assert paths.index("doc/build.sh") < paths.index("build.sh")

    def test_commands_are_after_root_scripts(self) -> None:
        kinds = [c.kind for c in BUILD_CANDIDATES]
        first_command = kinds.index("command")
        assert all(k == "script" for k in kinds[:first_command])
        assert BUILD_CANDIDATES[first_command] == CommandCandidate(("npm", "run", "build-docs"))

    def test_ps1_uses_pwsh(self) -> None:
        assert ScriptCandidate("doc/build_antora.ps1").interpreter()[0] == "pwsh"
        assert ScriptCandidate("build.sh").interpreter() == ["bash"]


# ── TestResolveBuild (실제 bash 실행) ───────────────────────


@requires_bash
class TestResolveBuildScripts:
    """파일 기반 후보 실행 테스트."""

    def test_antora_script_preferred_over_generic(self, tmp_path: Path) -> None:
        _write_script(tmp_path, "doc/build_antora.sh", "echo antora > ../ran.txt")
        _write_script(tmp_path, "build.sh", "echo generic > ran.txt")

        outcome = resolve_build(tmp_path)

        assert outcome.executed is True
        assert outcome.script_used == "doc/build_antora.sh"
        assert outcome.candidate_kind == "script"
        assert (tmp_path / "ran.txt").read_text().strip() == "antora"

    def test_script_runs_in_its_own_directory(self, tmp_path: Path) -> None:
        _write_script(tmp_path, "doc/build_antora.sh", "mkdir -p html && pwd > html/cwd.txt")

        resolve_build(tmp_path)

        cwd = (tmp_path / "doc" / "html" / "cwd.txt").read_text().strip()
        assert Path(cwd).resolve() == (tmp_path / "doc").resolve()

    def test_crlf_script_is_normalized(self, tmp_path: Path) -> None:
        script = _write_script(tmp_path, "build.sh", "echo ok > out.txt", crlf=True)

        outcome = resolve_build(tmp_path)

        assert outcome.executed is True
        assert b"\r\n" not in script.read_bytes()
        assert (tmp_path / "out.txt").read_text().strip() == "ok"

    def test_script_made_executable(self, tmp_path: Path) -> None:
        script = _write_script(tmp_path, "build-docs.sh", "true")
        script.chmod(0o644)

        resolve_build(tmp_path)

        assert script.stat().st_mode & 0o100

    def test_failing_script_raises(self, tmp_path: Path) -> None:
        _write_script(tmp_path, "doc/build.sh", "exit 3")

        with pytest.raises(BuildScriptError, match="exit code 3"):
            resolve_build(tmp_path)

    def test_remaining_candidates_not_tried(self, tmp_path: Path) -> None:
        _write_script(tmp_path, "generate-docs.sh", "true")

        with patch("docs_preview.builder._try_command") as mock_try:
            outcome = resolve_build(tmp_path)

        assert outcome.script_used == "generate-docs.sh"
        mock_try.assert_not_called()


# ── TestResolveBuildCommands (subprocess mock) ─────────────


class TestResolveBuildCommands:
    """명령 기반 후보 테스트."""

    @patch("docs_preview.builder.subprocess.run")
    def test_no_candidate_succeeds(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = subprocess.CalledProcessError(1, "npm")

        outcome = resolve_build(tmp_path)

        assert outcome.executed is False
        assert outcome.script_used is None
        # 명령 후보 3개만 시도됨 (파일 후보는 존재하지 않음)
        assert mock_run.call_count == 3

    @patch("docs_preview.builder.subprocess.run")
    def test_command_failure_swallowed_then_next(
        self, mock_run: MagicMock, tmp_path: Path
    ) -> None:
        mock_run.side_effect = [
            FileNotFoundError("npm"),
            subprocess.CompletedProcess(args=[], returncode=0),
        ]

        outcome = resolve_build(tmp_path)

        assert outcome.executed is True
        assert outcome.script_used == "npm run generate-docs"
        assert outcome.candidate_kind == "command"

    @patch("docs_preview.builder.subprocess.run")
    def test_command_runs_from_workspace_root(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)

        resolve_build(tmp_path)

        call = mock_run.call_args
        assert call.args[0] == ["npm", "run", "build-docs"]
        assert call.kwargs["cwd"] == tmp_path.resolve()

    @patch("docs_preview.builder.subprocess.run")
    def test_missing_interpreter_raises(self, mock_run: MagicMock, tmp_path: Path) -> None:
        _write_script(tmp_path, "doc/build_antora.ps1", "Write-Host hi")
        mock_run.side_effect = FileNotFoundError("pwsh")

        with pytest.raises(BuildScriptError, match="pwsh"):
            resolve_build(tmp_path)

    @patch("docs_preview.builder.subprocess.run")
    def test_custom_candidates(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)

        outcome = resolve_build(tmp_path, (CommandCandidate(("make", "docs")),))

        assert outcome.script_used == "make docs"


class TestNormalizeLineEndings:
    """줄바꿈 변환 테스트."""

    def test_missing_file_is_ignored(self, tmp_path: Path) -> None:
        _normalize_line_endings(tmp_path / "missing.sh")

    def test_lf_file_untouched(self, tmp_path: Path) -> None:
        script = tmp_path / "build.sh"
        script.write_bytes(b"echo hi\n")
        _normalize_line_endings(script)
        assert script.read_bytes() == b"echo hi\n"
