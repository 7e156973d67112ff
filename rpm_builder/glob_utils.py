"""Pattern expansion helpers for file selections and exclusions."""

from __future__ import annotations

import glob
import os
import typing as typ
from pathlib import Path

from .errors import ConfigurationError

__all__ = ["normalise_path", "resolve_patterns"]

NEGATION_PREFIX = "!"


def normalise_path(path: str | os.PathLike[str]) -> str:
    """Return ``path`` as an absolute, separator-normalised string.

    Examples
    --------
    >>> normalise_path("/tmp/a/../b/./c.txt")
    '/tmp/b/c.txt'
    """
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def resolve_patterns(
    patterns: str | typ.Sequence[str], base: str | os.PathLike[str]
) -> list[Path]:
    """Expand ``patterns`` relative to ``base`` into concrete paths.

    Parameters
    ----------
    patterns : str | Sequence[str]
        A single glob pattern or an ordered list of them. ``**`` matches any
        number of directories. Patterns prefixed with ``!`` remove earlier
        matches instead of adding to them.
    base : str | os.PathLike[str]
        Directory that relative patterns are anchored at.

    Returns
    -------
    list[Path]
        Absolute, normalised paths to matching files and directories. Matches
        for each pattern are sorted, and the first occurrence of a path across
        patterns decides its position.

    Raises
    ------
    ConfigurationError
        Raised when a pattern is not a non-empty string.

    Examples
    --------
    >>> resolve_patterns("*.nothing-matches-this", ".")
    []
    """
    base_text = normalise_path(base)
    includes, excludes = _split_patterns(_as_pattern_list(patterns))

    seen: dict[str, None] = {}
    for pattern in includes:
        for match in _expand(pattern, base_text):
            seen.setdefault(match, None)

    removed = {match for pattern in excludes for match in _expand(pattern, base_text)}
    return [Path(match) for match in seen if match not in removed]


def _as_pattern_list(patterns: object) -> list[str]:
    if isinstance(patterns, str):
        patterns = [patterns]
    if not isinstance(patterns, typ.Sequence):
        message = f"Patterns must be a string or a list of strings, got {patterns!r}"
        raise ConfigurationError(message)
    for pattern in patterns:
        if not isinstance(pattern, str) or not pattern.strip(NEGATION_PREFIX):
            message = f"Malformed file pattern: {pattern!r}"
            raise ConfigurationError(message)
    return list(patterns)


def _split_patterns(patterns: list[str]) -> tuple[list[str], list[str]]:
    includes = [item for item in patterns if not item.startswith(NEGATION_PREFIX)]
    excludes = [
        item[len(NEGATION_PREFIX) :]
        for item in patterns
        if item.startswith(NEGATION_PREFIX)
    ]
    return includes, excludes


def _expand(pattern: str, base_text: str) -> list[str]:
    if not glob.has_magic(pattern):
        candidate = os.path.join(base_text, pattern)
        return [normalise_path(candidate)] if os.path.lexists(candidate) else []
    matches = glob.glob(pattern, root_dir=base_text, recursive=True)
    return sorted(normalise_path(os.path.join(base_text, match)) for match in matches)
