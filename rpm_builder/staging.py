"""Copy file selections into the build root and collect the manifest."""

from __future__ import annotations

import dataclasses
import os
import posixpath
import re
import shutil
import typing as typ
from pathlib import Path, PurePath

from .console import NULL_LOGGER, Logger
from .errors import ConfigurationError, InvalidDirectiveError
from .exclusion import ExclusionSet
from .glob_utils import normalise_path, resolve_patterns

if typ.TYPE_CHECKING:
    from .config import FileSelection

__all__ = ["DIRECTIVE_PATTERN", "ManifestEntry", "check_directive", "stage_files"]

DIRECTIVE_PATTERN = re.compile(r"^(?:doc|config|attr|verify|docdir|dir)")


@dataclasses.dataclass(frozen=True, slots=True)
class ManifestEntry:
    """A staged file as it should appear in the ``%files`` section.

    Attributes
    ----------
    path : str
        POSIX path of the file inside the package, e.g. ``"/opt/app/a.txt"``.
    directive : str | None
        ``%files`` directive for the entry, ``None`` for ordinary files.
    """

    path: str
    directive: str | None = None


def check_directive(directive: object) -> bool:
    """Return ``True`` when ``directive`` is ``None`` or a known directive.

    Matching is by prefix, so parametrised forms are accepted.

    Examples
    --------
    >>> check_directive("config(noreplace)")
    True
    >>> check_directive("bogus")
    False
    """
    if directive is None:
        return True
    return isinstance(directive, str) and DIRECTIVE_PATTERN.match(directive) is not None


def stage_files(
    selections: typ.Sequence[FileSelection],
    exclusions: ExclusionSet,
    build_root: Path,
    *,
    log: Logger = NULL_LOGGER,
) -> list[ManifestEntry]:
    """Copy every selected file into ``build_root`` and return the manifest.

    Parameters
    ----------
    selections : Sequence[FileSelection]
        Selections processed in order.
    exclusions : ExclusionSet
        Paths skipped regardless of which selection matched them.
    build_root : Path
        ``BUILDROOT`` directory of the current tree.
    log : Logger
        Receives one message per staged file.

    Returns
    -------
    list[ManifestEntry]
        One entry per copied path, in selection then match order.

    Raises
    ------
    ConfigurationError
        Raised before any copy when a selection lacks ``src`` or ``dest``, or
        while staging when a destination escapes ``build_root``.
    InvalidDirectiveError
        Raised when a selection's directive is unknown. Files copied for
        earlier selections are left in place.
    OSError
        Propagated from failed copies.
    """
    for index, selection in enumerate(selections, start=1):
        _require_src_and_dest(selection, index)

    manifest: list[ManifestEntry] = []
    for selection in selections:
        manifest.extend(_stage_selection(selection, exclusions, build_root, log))
    return manifest


def _require_src_and_dest(selection: FileSelection, index: int) -> None:
    if not selection.src or not selection.dest:
        message = (
            "All files/folders must have source (src) and destination (dest) "
            f"set (entry #{index})"
        )
        raise ConfigurationError(message)


def _stage_selection(
    selection: FileSelection,
    exclusions: ExclusionSet,
    build_root: Path,
    log: Logger,
) -> typ.Iterator[ManifestEntry]:
    if not check_directive(selection.directive):
        raise InvalidDirectiveError(str(selection.directive))

    cwd_prefix = _with_trailing_separator(normalise_path(selection.cwd))
    sources = resolve_patterns(selection.src, cwd_prefix)
    dest_dir = _safe_destination_dir(build_root, selection.dest)

    for source in sources:
        if source in exclusions:
            continue
        relative = _relative_to_cwd(source, cwd_prefix)
        entry = ManifestEntry(
            path=posixpath.normpath(posixpath.join(selection.dest, relative)),
            directive=selection.directive,
        )
        target = dest_dir / relative if relative else dest_dir
        _copy_path(source, target)
        log(f"Staged '{source}' -> '{entry.path}'")
        yield entry


def _with_trailing_separator(path: str) -> str:
    return path if path.endswith(os.sep) else path + os.sep


def _relative_to_cwd(source: Path, cwd_prefix: str) -> str:
    """Strip ``cwd_prefix`` from ``source`` (e.g. ``'/w/a/b.txt'`` -> ``'a/b.txt'``)."""
    text = str(source)
    if text == cwd_prefix.rstrip(os.sep):
        return ""
    if not text.startswith(cwd_prefix):
        message = f"Matched path {text} lies outside working directory {cwd_prefix}"
        raise ConfigurationError(message)
    return PurePath(text[len(cwd_prefix) :]).as_posix()


def _safe_destination_dir(build_root: Path, dest: str) -> Path:
    """Resolve ``dest`` under ``build_root``, creating it when absent.

    Leading slashes are anchored at ``build_root`` so ``"/opt/app"`` lands in
    ``BUILDROOT/opt/app``.
    """
    root = build_root.resolve()
    target = (root / dest.lstrip("/\\")).resolve()
    if not target.is_relative_to(root):
        message = f"Destination escapes build root: {dest}"
        raise ConfigurationError(message)
    target.mkdir(parents=True, exist_ok=True)
    return target


def _copy_path(source: Path, target: Path) -> None:
    if source.is_dir() and not source.is_symlink():
        shutil.copytree(source, target, symlinks=True, dirs_exist_ok=True)
        return
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, target, follow_symlinks=False)
