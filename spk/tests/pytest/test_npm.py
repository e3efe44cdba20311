"""
Tests for npm artifact predicates and link commands.

The predicates are pure filesystem checks; the link commands are checked by
capturing what would be handed to run_cmd.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from spk.core import npm


def _codegen(repo_dir: Path, projection: str = "source", plugin: str = "typescript-codegen") -> Path:
    package_dir = repo_dir / npm.SMITHY_PROJECTIONS / projection / plugin
    package_dir.mkdir(parents=True)
    (package_dir / "package.json").write_text("{}")
    return package_dir


@pytest.mark.evergreen
class TestIsBuilt:
    """What counts as a local build."""

    def test_fresh_repo(self, tmp_path: Path) -> None:
        assert not npm.is_built(tmp_path)

    def test_empty_dist(self, tmp_path: Path) -> None:
        (tmp_path / "dist").mkdir()
        assert not npm.is_built(tmp_path)

    def test_populated_dist(self, tmp_path: Path) -> None:
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "index.js").write_text("")
        assert npm.is_built(tmp_path)

    def test_smithy_codegen(self, tmp_path: Path) -> None:
        _codegen(tmp_path)
        assert npm.is_built(tmp_path)

    def test_projection_without_package(self, tmp_path: Path) -> None:
        (tmp_path / npm.SMITHY_PROJECTIONS / "source" / "model").mkdir(parents=True)
        assert not npm.is_built(tmp_path)


@pytest.mark.evergreen
class TestBuildOutputDir:
    def test_plain_package(self, tmp_path: Path) -> None:
        assert npm.build_output_dir(tmp_path) == tmp_path

    def test_codegen_package(self, tmp_path: Path) -> None:
        package_dir = _codegen(tmp_path)
        assert npm.build_output_dir(tmp_path) == package_dir

    def test_first_projection_in_name_order(self, tmp_path: Path) -> None:
        _codegen(tmp_path, projection="zeta")
        first = _codegen(tmp_path, projection="alpha")
        assert npm.build_output_dir(tmp_path) == first


@pytest.mark.evergreen
class TestIsLinked:
    """A link is a symlink at node_modules/<package>."""

    def test_not_installed(self, tmp_path: Path) -> None:
        assert not npm.is_linked(tmp_path, "pkg")

    def test_installed_from_registry(self, tmp_path: Path) -> None:
        (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
        assert not npm.is_linked(tmp_path, "pkg")

    def test_symlinked(self, tmp_path: Path) -> None:
        target = tmp_path / "producer"
        target.mkdir()
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "pkg").symlink_to(target)
        assert npm.is_linked(tmp_path, "pkg")

    def test_scoped_package(self, tmp_path: Path) -> None:
        target = tmp_path / "producer"
        target.mkdir()
        scope = tmp_path / "node_modules" / "@spark-rewards"
        scope.mkdir(parents=True)
        (scope / "sra-sdk").symlink_to(target)

        assert npm.is_linked(tmp_path, "@spark-rewards/sra-sdk")
        assert not npm.is_linked(tmp_path, "@spark-rewards/srw-sdk")


@pytest.mark.evergreen
class TestLinkCommands:
    """npm invocations issued by the probe."""

    @pytest.fixture
    def calls(self, monkeypatch: pytest.MonkeyPatch) -> list[tuple]:
        recorded: list[tuple] = []

        def fake_run_cmd(cmd, cwd=None, capture=False, check=True, quiet=False):
            recorded.append((cmd, cwd))

        monkeypatch.setattr(npm, "run_cmd", fake_run_cmd)
        return recorded

    def test_register_linkable(self, tmp_path: Path, calls: list[tuple]) -> None:
        npm.NpmProbe().register_linkable(tmp_path)
        assert calls == [(["npm", "link"], tmp_path)]

    def test_apply_link(self, tmp_path: Path, calls: list[tuple]) -> None:
        npm.NpmProbe().apply_link(tmp_path, "@spark-rewards/sra-sdk")
        assert calls == [(["npm", "link", "@spark-rewards/sra-sdk"], tmp_path)]

    def test_probe_reads_filesystem(self, tmp_path: Path) -> None:
        probe = npm.NpmProbe()
        assert not probe.is_built(tmp_path)
        assert probe.build_output_dir(tmp_path) == tmp_path


@pytest.mark.evergreen
class TestLinkFailures:
    """A failed npm run is raised to the caller, never echoed as fatal."""

    @pytest.fixture
    def failing_npm(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fail(cmd, **kwargs):
            raise subprocess.CalledProcessError(
                1, cmd, output="", stderr="npm ERR! missing package.json"
            )

        monkeypatch.setattr(subprocess, "run", fail)

    def test_register_failure_raises_quietly(self, tmp_path: Path, failing_npm, capsys) -> None:
        with pytest.raises(subprocess.CalledProcessError) as excinfo:
            npm.NpmProbe().register_linkable(tmp_path)

        assert excinfo.value.stderr == "npm ERR! missing package.json"
        assert "[ERROR]" not in capsys.readouterr().out

    def test_apply_failure_raises_quietly(self, tmp_path: Path, failing_npm, capsys) -> None:
        with pytest.raises(subprocess.CalledProcessError):
            npm.NpmProbe().apply_link(tmp_path, "pkg")

        assert "[ERROR]" not in capsys.readouterr().out
