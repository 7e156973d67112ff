"""Shared helpers for the RPM builder test suites."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

from rpm_builder import BuildConfig, ManifestEntry

__all__ = [
    "RecordingWriter",
    "posix_only",
    "write_fake_rpmbuild",
    "write_files",
    "write_spec",
]

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="fake rpmbuild is a POSIX shell script"
)


def write_files(root: Path, files: dict[str, str]) -> None:
    """Create ``files`` (relative path -> text) beneath ``root``."""
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


def write_fake_rpmbuild(
    path: Path,
    rpm_output: Path | None,
    *,
    exit_code: int = 0,
    extra: str = "",
) -> Path:
    """Write an executable shell script standing in for ``rpmbuild``.

    Parameters
    ----------
    path : Path
        Location of the script.
    rpm_output : Path | None
        Package the script creates and reports with a ``Wrote:`` line. When
        ``None`` nothing is reported.
    exit_code : int
        Status the script exits with. Non-zero codes print to stderr first.
    extra : str
        Additional shell lines run before the package is written.
    """
    lines = [
        "#!/bin/sh",
        f'printf "%s\\n" "$*" > {shlex.quote(str(path.with_suffix(".args")))}',
    ]
    if extra:
        lines.append(extra)
    if exit_code:
        lines.append('echo "error: Bad exit status from build" >&2')
        lines.append(f"exit {exit_code}")
    if rpm_output is not None:
        quoted = shlex.quote(str(rpm_output))
        lines.append(f"mkdir -p {shlex.quote(str(rpm_output.parent))}")
        lines.append(f"printf rpm > {quoted}")
        lines.append(f"echo Wrote: {quoted}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    path.chmod(0o755)
    return path


def write_spec(manifest: list[ManifestEntry], config: BuildConfig) -> Path:
    """Minimal descriptor writer listing the manifest in ``SPECS``."""
    spec = config.tree_dir / "SPECS" / f"{config.name}.spec"
    lines = [f"Name: {config.name}", f"Version: {config.version}", "%files"]
    for entry in manifest:
        prefix = f"%{entry.directive} " if entry.directive else ""
        lines.append(f"{prefix}{entry.path}")
    spec.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return spec


class RecordingWriter:
    """Descriptor writer that remembers each call before delegating."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[ManifestEntry], BuildConfig]] = []

    def __call__(self, manifest: list[ManifestEntry], config: BuildConfig) -> Path:
        self.calls.append((list(manifest), config))
        return write_spec(manifest, config)
