"""Exclusion set shared by every file selection of a build."""

from __future__ import annotations

import dataclasses
import os
import typing as typ
from pathlib import Path

from .glob_utils import normalise_path, resolve_patterns

__all__ = ["ExclusionSet"]


@dataclasses.dataclass(frozen=True, slots=True)
class ExclusionSet:
    """Normalised paths that staging must skip.

    Membership is an exact comparison against :func:`normalise_path`; a
    directory in the set does not exclude the files beneath it.

    Examples
    --------
    >>> exclusions = ExclusionSet(frozenset({normalise_path("/tmp/skip.txt")}))
    >>> "/tmp/./skip.txt" in exclusions
    True
    >>> "/tmp/keep.txt" in exclusions
    False
    """

    paths: frozenset[str] = frozenset()

    @classmethod
    def build(
        cls,
        patterns: typ.Sequence[str],
        cwd: str | os.PathLike[str] | None = None,
    ) -> ExclusionSet:
        """Expand ``patterns`` against ``cwd`` (default: current directory)."""
        if not patterns:
            return cls()
        base = Path.cwd() if cwd is None else cwd
        return cls(frozenset(str(path) for path in resolve_patterns(patterns, base)))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return normalise_path(path) in self.paths

    def __len__(self) -> int:
        return len(self.paths)
