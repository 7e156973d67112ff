"""Shared fixtures for the RPM builder test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from rpm_test_helpers import write_fake_rpmbuild, write_files


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create an isolated workspace and make it the current directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def fixtures_dir(workspace: Path) -> Path:
    """Populate ``workspace/fixtures`` with two text files and a markdown file."""
    root = workspace / "fixtures"
    write_files(
        root,
        {
            "a.txt": "alpha",
            "b.txt": "bravo",
            "c.md": "# charlie",
        },
    )
    return root


@pytest.fixture
def build_root(tmp_path: Path) -> Path:
    """Return an empty ``BUILDROOT`` directory outside the workspace."""
    root = tmp_path / "tree" / "BUILDROOT"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def rpm_output(tmp_path: Path) -> Path:
    """Path the fake ``rpmbuild`` writes its package to."""
    return tmp_path / "rpmbuild-out" / "RPMS" / "noarch" / "app-1.0.0-1.noarch.rpm"


@pytest.fixture
def fake_rpmbuild(tmp_path: Path, rpm_output: Path) -> Path:
    """Install a successful fake ``rpmbuild`` and return its path."""
    return write_fake_rpmbuild(tmp_path / "bin" / "rpmbuild", rpm_output)
