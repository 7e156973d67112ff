"""Configuration models and loader for RPM builds.

This module provides dataclasses describing a build, the merge of user
options over defaults, and a loader for TOML build files.

Usage
-----
Load a build description and merge it with the defaults::

    from pathlib import Path
    from rpm_builder.config import load_config, merge_config

    config = merge_config(load_config(Path("rpm.toml")))
    print(f"Temporary tree: {config.temp_dir}")

A TOML build file carries the package fields at the top level, one
``[[files]]`` table per selection, and an optional ``[exec_options]`` table::

    name = "hello"
    version = "1.2.3"
    exclude_files = ["dist/*.map"]

    [[files]]
    src = "**/*"
    dest = "/opt/hello"
    cwd = "dist"

    [exec_options]
    timeout = 600
"""

from __future__ import annotations

import dataclasses
import os
import tomllib
import types
import typing as typ
import uuid
from pathlib import Path

from .errors import ConfigurationError

__all__ = [
    "BuildConfig",
    "ExecOptions",
    "FileSelection",
    "default_temp_dir",
    "load_config",
    "merge_config",
]


def default_temp_dir() -> str:
    """Return a collision-resistant temporary tree name.

    Examples
    --------
    >>> name = default_temp_dir()
    >>> name.startswith("tmp-") and len(name) == 20
    True
    """
    return f"tmp-{uuid.uuid4().hex[:16]}"


@dataclasses.dataclass(frozen=True, slots=True)
class FileSelection:
    """Describe a group of files to copy into the build root.

    Parameters
    ----------
    src : str | tuple[str, ...]
        Glob pattern (or patterns) relative to :attr:`cwd`. Patterns starting
        with ``!`` remove matches of earlier patterns.
    dest : str
        Install location of the matched files inside the package, such as
        ``"/opt/app"``.
    cwd : str, default="."
        Directory the patterns are resolved against. Only the part of each
        match below ``cwd`` is reproduced under :attr:`dest`.
    directive : str | None, optional
        ``%files`` directive such as ``"doc"`` or ``"config(noreplace)"``.

    Examples
    --------
    >>> FileSelection.from_mapping({"src": "*.txt", "dest": "docs"}).cwd
    '.'
    """

    src: str | tuple[str, ...]
    dest: str
    cwd: str = "."
    directive: str | None = None

    @classmethod
    def from_mapping(cls, entry: typ.Mapping[str, typ.Any], index: int = 1) -> FileSelection:
        """Build a selection from a user mapping, validating required keys."""
        if not isinstance(entry, typ.Mapping):
            message = (
                "File selections must be tables of key/value pairs "
                f"(entry #{index})"
            )
            raise ConfigurationError(message)
        if missing := [key for key in ("src", "dest") if not entry.get(key)]:
            joined = ", ".join(missing)
            message = (
                "All files/folders must have source (src) and destination "
                f"(dest) set; missing {joined} in entry #{index}"
            )
            raise ConfigurationError(message)
        src = entry["src"]
        if isinstance(src, (list, tuple)):
            src = tuple(src)
        elif not isinstance(src, str):
            message = f"src must be a pattern or list of patterns in entry #{index}"
            raise ConfigurationError(message)
        return cls(
            src=src,
            dest=str(entry["dest"]),
            cwd=str(entry.get("cwd") or "."),
            directive=entry.get("directive") or None,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ExecOptions:
    """Process options applied when running ``rpmbuild``.

    Attributes
    ----------
    rpmbuild : str
        Executable name or path.
    env : Mapping[str, str]
        Extra environment variables for the process, held read-only.
    cwd : Path | None
        Working directory for the process; inherits ours when ``None``.
    timeout : float | None
        Seconds before the process is abandoned; ``None`` waits indefinitely.
    """

    rpmbuild: str = "rpmbuild"
    env: typ.Mapping[str, str] = dataclasses.field(default_factory=dict, hash=False)
    cwd: Path | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "env", types.MappingProxyType(dict(self.env)))

    @classmethod
    def from_mapping(cls, data: typ.Mapping[str, typ.Any]) -> ExecOptions:
        if not isinstance(data, typ.Mapping):
            message = f"exec_options must be a table, got {data!r}"
            raise ConfigurationError(message)
        if unknown := sorted(set(data) - {"rpmbuild", "env", "cwd", "timeout"}):
            message = f"Unknown exec_options key(s): {', '.join(unknown)}"
            raise ConfigurationError(message)
        env = data.get("env") or {}
        if not isinstance(env, typ.Mapping):
            message = f"exec_options.env must be a table, got {env!r}"
            raise ConfigurationError(message)
        cwd = data.get("cwd")
        timeout = data.get("timeout")
        return cls(
            rpmbuild=str(data.get("rpmbuild") or "rpmbuild"),
            env={str(key): str(value) for key, value in env.items()},
            cwd=Path(cwd) if cwd else None,
            timeout=float(timeout) if timeout is not None else None,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class BuildConfig:
    """Fully merged build configuration produced by :func:`merge_config`.

    The package fields (``name`` through ``build_arch``) are passed through
    to the descriptor writer untouched. ``extra`` holds any option that is
    not a known field, for writers that render additional SPEC sections.
    ``extra`` is exposed as a read-only mapping. An unset
    ``temp_dir`` gets a fresh name from :func:`default_temp_dir`.
    """

    name: str = "no-name"
    summary: str = "No summary"
    description: str = "No description"
    version: str = "0.0.0"
    release: str = "1"
    epoch: str = ""
    license: str = "MIT"
    vendor: str = "Vendor"
    group: str = "Development/Tools"
    build_arch: str = "noarch"
    temp_dir: Path = dataclasses.field(default_factory=lambda: Path(default_temp_dir()))
    files: tuple[FileSelection, ...] = ()
    exclude_files: tuple[str, ...] = ()
    rpm_dest: Path | None = None
    keep_temp: bool = False
    verbose: bool = True
    exec_options: ExecOptions = dataclasses.field(default_factory=ExecOptions)
    extra: typ.Mapping[str, typ.Any] = dataclasses.field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", types.MappingProxyType(dict(self.extra)))

    @property
    def tree_dir(self) -> Path:
        """Absolute path of the temporary ``rpmbuild`` tree."""
        return self.temp_dir.resolve()


_ALIASES = {
    "buildArch": "build_arch",
    "tempDir": "temp_dir",
    "excludeFiles": "exclude_files",
    "rpmDest": "rpm_dest",
    "keepTemp": "keep_temp",
    "execOpts": "exec_options",
}

_STRING_FIELDS = (
    "name",
    "summary",
    "description",
    "version",
    "release",
    "epoch",
    "license",
    "vendor",
    "group",
    "build_arch",
)

_FIELD_NAMES = frozenset(field.name for field in dataclasses.fields(BuildConfig)) - {
    "extra"
}


def merge_config(
    options: typ.Mapping[str, typ.Any] | BuildConfig,
    *,
    temp_dir_factory: typ.Callable[[], str | os.PathLike[str]] | None = None,
) -> BuildConfig:
    """Merge user ``options`` over the defaults, field by field.

    Parameters
    ----------
    options : Mapping[str, Any] | BuildConfig
        User supplied options. Keys may use the snake_case field names or
        the camelCase spellings (``tempDir``, ``execOpts``...). ``None``
        values fall back to the default. A :class:`BuildConfig` is returned
        unchanged.
    temp_dir_factory : Callable[[], str | PathLike], optional
        Produces the temporary tree name when ``temp_dir`` is unset.
        Defaults to :func:`default_temp_dir`.

    Returns
    -------
    BuildConfig
        Configuration with every field populated.

    Raises
    ------
    ConfigurationError
        Raised when ``options`` is not a mapping or a value has the wrong
        shape.
    """
    if isinstance(options, BuildConfig):
        return options
    if not isinstance(options, typ.Mapping):
        message = f"options must be a mapping, got {type(options).__name__}"
        raise ConfigurationError(message)

    provided = {
        _ALIASES.get(key, key): value
        for key, value in options.items()
        if value is not None
    }
    known = {key: value for key, value in provided.items() if key in _FIELD_NAMES}
    extra = {key: value for key, value in provided.items() if key not in _FIELD_NAMES}

    factory = temp_dir_factory or default_temp_dir
    fields: dict[str, typ.Any] = {
        key: str(known[key]) for key in _STRING_FIELDS if key in known
    }
    fields |= {
        "temp_dir": Path(known.get("temp_dir") or factory()),
        "files": _make_selections(known.get("files", [])),
        "exclude_files": _make_patterns(known.get("exclude_files", [])),
        "rpm_dest": _make_rpm_dest(known.get("rpm_dest", Path.cwd())),
        "keep_temp": _make_flag(known.get("keep_temp", False), "keep_temp"),
        "verbose": _make_flag(known.get("verbose", True), "verbose"),
        "exec_options": _make_exec_options(known.get("exec_options")),
        "extra": extra,
    }
    return BuildConfig(**fields)


def load_config(config_file: Path) -> dict[str, typ.Any]:
    """Load build options from the TOML ``config_file``.

    Parameters
    ----------
    config_file : Path
        Path to the TOML build description.

    Returns
    -------
    dict[str, Any]
        Raw options ready for :func:`merge_config`.

    Raises
    ------
    FileNotFoundError
        Raised when the configuration file is absent at ``config_file``.
    ConfigurationError
        Raised when the file is not valid TOML or ``files`` is malformed.
    """
    config_file = Path(config_file)
    if not config_file.is_file():
        message = f"Configuration file not found at {config_file}"
        raise FileNotFoundError(message)

    data = _load_toml(config_file)
    _require_keys(data, {"files"}, config_file)
    if not isinstance(data["files"], list):
        message = f"'files' must be an array of tables in {config_file}"
        raise ConfigurationError(message)
    return data


def _load_toml(path: Path) -> dict[str, typ.Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        message = f"Invalid TOML in {path}: {exc}"
        raise ConfigurationError(message) from exc


def _require_keys(section: dict[str, typ.Any], keys: set[str], config_path: Path) -> None:
    """Ensure ``section`` defines ``keys``.

    Examples
    --------
    >>> _require_keys({"files": []}, {"files"}, Path("rpm.toml"))
    """
    if missing := sorted(key for key in keys if key not in section):
        joined = ", ".join(missing)
        message = f"Missing required key(s) {joined} in {config_path}"
        raise ConfigurationError(message)


def _make_selections(value: object) -> tuple[FileSelection, ...]:
    if not isinstance(value, (list, tuple)):
        message = f"files must be a list of file selections, got {value!r}"
        raise ConfigurationError(message)
    return tuple(
        entry if isinstance(entry, FileSelection) else FileSelection.from_mapping(entry, index)
        for index, entry in enumerate(value, start=1)
    )


def _make_patterns(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value else ()
    if not isinstance(value, (list, tuple)) or not all(
        isinstance(item, str) for item in value
    ):
        message = f"exclude_files must be a list of strings, got {value!r}"
        raise ConfigurationError(message)
    return tuple(item for item in value if item)


def _make_rpm_dest(value: object) -> Path | None:
    if value in ("", False):
        return None
    if not isinstance(value, (str, os.PathLike)):
        message = f"rpm_dest must be a directory path, got {value!r}"
        raise ConfigurationError(message)
    return Path(value)


def _make_flag(value: object, name: str) -> bool:
    if not isinstance(value, bool):
        message = f"{name} must be a boolean, got {value!r}"
        raise ConfigurationError(message)
    return value


def _make_exec_options(value: object) -> ExecOptions:
    if value is None:
        return ExecOptions()
    if isinstance(value, ExecOptions):
        return value
    return ExecOptions.from_mapping(typ.cast(typ.Mapping[str, typ.Any], value))
