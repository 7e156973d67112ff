"""Run ``rpmbuild`` and locate the package it writes."""

from __future__ import annotations

import re
import shutil
import typing as typ
from pathlib import Path

from plumbum import local
from plumbum.commands import CommandNotFound, ProcessExecutionError, ProcessTimedOut

from .console import NULL_LOGGER, Logger
from .errors import ExternalToolError

if typ.TYPE_CHECKING:
    from plumbum.commands.base import BaseCommand

    from .config import ExecOptions

__all__ = ["RPM_PATH_PATTERN", "copy_rpm", "find_rpm_path", "run_rpmbuild"]

RPM_PATH_PATTERN = re.compile(r"(/.+\..+\.rpm)")


def run_rpmbuild(
    build_root: Path,
    spec_file: Path,
    exec_options: ExecOptions,
    *,
    log: Logger = NULL_LOGGER,
) -> str:
    """Build a binary package from ``spec_file`` and return ``rpmbuild``'s stdout.

    Parameters
    ----------
    build_root : Path
        Staged ``BUILDROOT`` passed via ``--buildroot``.
    spec_file : Path
        SPEC file produced by the descriptor writer.
    exec_options : ExecOptions
        Executable, environment, working directory, and timeout.
    log : Logger
        Receives the command line before it runs.

    Raises
    ------
    ExternalToolError
        Raised when the executable is missing, exits non-zero, or exceeds
        ``exec_options.timeout``.
    """
    command = _bind_command(exec_options)[
        "-bb",
        "--buildroot",
        str(build_root),
        str(spec_file),
    ]
    log(f"Executing: {command}")
    try:
        _, stdout, _ = command.run(timeout=exec_options.timeout)
    except ProcessExecutionError as exc:
        message = f"rpmbuild failed with exit {exc.retcode}: {str(exc.stderr).strip()}"
        raise ExternalToolError(
            message,
            returncode=exc.retcode,
            stdout=str(exc.stdout or ""),
            stderr=str(exc.stderr or ""),
        ) from exc
    except ProcessTimedOut as exc:
        message = f"rpmbuild did not finish within {exec_options.timeout} seconds"
        raise ExternalToolError(message) from exc
    except OSError as exc:
        # Paths are bound by plumbum without a lookup, so a missing file
        # only surfaces when the process is spawned.
        message = f"rpmbuild executable not found: {exec_options.rpmbuild}"
        raise ExternalToolError(message) from exc
    return stdout


def _bind_command(exec_options: ExecOptions) -> BaseCommand:
    try:
        command: BaseCommand = local[exec_options.rpmbuild]
    except CommandNotFound as exc:
        message = f"rpmbuild executable not found: {exec_options.rpmbuild}"
        raise ExternalToolError(message) from exc
    if exec_options.env:
        command = command.with_env(**exec_options.env)
    if exec_options.cwd is not None:
        command = command.with_cwd(str(exec_options.cwd))
    return command


def find_rpm_path(stdout: str) -> Path:
    """Return the first absolute ``.rpm`` path printed in ``stdout``.

    Examples
    --------
    >>> find_rpm_path("Wrote: /tmp/RPMS/noarch/app-1.0-1.noarch.rpm\\n")
    PosixPath('/tmp/RPMS/noarch/app-1.0-1.noarch.rpm')
    """
    if match := RPM_PATH_PATTERN.search(stdout or ""):
        return Path(match.group(1))
    message = "RPM package not found in rpmbuild output"
    raise ExternalToolError(message, returncode=0, stdout=stdout or "")


def copy_rpm(rpm: Path, rpm_dest: Path, *, log: Logger = NULL_LOGGER) -> Path:
    """Copy ``rpm`` into the ``rpm_dest`` directory and return the new path."""
    destination = Path(rpm_dest) / rpm.name
    log(f"Copying RPM package to: {destination}")
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(rpm, destination)
    return destination
