"""Lifecycle of the temporary ``rpmbuild`` directory tree."""

from __future__ import annotations

import dataclasses
import shutil
from pathlib import Path

from .console import NULL_LOGGER, Logger

__all__ = ["RPM_LAYOUT", "RpmTree", "setup_build_tree", "teardown_build_tree"]

RPM_LAYOUT: tuple[str, ...] = ("BUILD", "BUILDROOT", "RPMS", "SOURCES", "SPECS", "SRPMS")


@dataclasses.dataclass(frozen=True, slots=True)
class RpmTree:
    """Paths of an ``rpmbuild`` topdir created by :func:`setup_build_tree`."""

    root: Path

    @property
    def build_root(self) -> Path:
        """Directory files are staged into (``BUILDROOT``)."""
        return self.root / "BUILDROOT"

    @property
    def specs_dir(self) -> Path:
        return self.root / "SPECS"

    @property
    def rpms_dir(self) -> Path:
        return self.root / "RPMS"

    def subdirectories(self) -> list[Path]:
        return [self.root / name for name in RPM_LAYOUT]


def setup_build_tree(tree_dir: Path, *, log: Logger = NULL_LOGGER) -> RpmTree:
    """Create a fresh ``rpmbuild`` tree at ``tree_dir``.

    Parameters
    ----------
    tree_dir : Path
        Directory that will hold the six ``rpmbuild`` subdirectories. Any
        existing content, such as a previous build left behind with
        ``keep_temp``, is deleted first.
    log : Logger
        Receives progress messages.

    Returns
    -------
    RpmTree
        Accessors for the created subdirectories.

    Examples
    --------
    >>> import tempfile
    >>> tree = setup_build_tree(Path(tempfile.mkdtemp()) / "tree")
    >>> sorted(path.name for path in tree.root.iterdir())
    ['BUILD', 'BUILDROOT', 'RPMS', 'SOURCES', 'SPECS', 'SRPMS']
    """
    tree = RpmTree(Path(tree_dir))
    if tree.root.exists():
        log("Removing old temporary directory.")
        shutil.rmtree(tree.root)

    log(f"Creating RPM directory structure at: {tree.root}")
    for directory in tree.subdirectories():
        directory.mkdir(parents=True, exist_ok=True)
    return tree


def teardown_build_tree(tree_dir: Path, *, log: Logger = NULL_LOGGER) -> None:
    """Delete the tree at ``tree_dir``; a missing tree is not an error."""
    log(f"Removing RPM directory structure at: {tree_dir}")
    if Path(tree_dir).exists():
        shutil.rmtree(tree_dir)
