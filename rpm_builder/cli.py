"""Command-line entry point for building RPM packages.

Examples
--------
Build the package described by ``rpm.toml`` with a project SPEC writer::

    rpm-builder rpm.toml --descriptor-writer packaging.spec:write_spec

Keep the temporary ``rpmbuild`` tree around for inspection::

    rpm-builder rpm.toml --descriptor-writer packaging.spec:write_spec --keep-temp
"""

from __future__ import annotations

import sys
from pathlib import Path

import cyclopts

from .config import load_config
from .errors import RpmBuilderError
from .pipeline import build_package, load_descriptor_writer

app = cyclopts.App(help="Build an RPM package from a TOML build description.")


@app.default
def main(
    config_file: Path,
    *,
    descriptor_writer: str,
    rpm_dest: Path | None = None,
    keep_temp: bool = False,
    quiet: bool = False,
) -> None:
    """Stage files, render the SPEC, and run ``rpmbuild``.

    Parameters
    ----------
    config_file:
        Path to the TOML build description.
    descriptor_writer:
        ``module:callable`` reference to the SPEC writer.
    rpm_dest:
        Directory the finished package is copied into (overrides the file).
    keep_temp:
        Leave the temporary ``rpmbuild`` tree in place after success.
    quiet:
        Suppress progress messages.
    """
    try:
        options = load_config(Path(config_file))
        if rpm_dest is not None:
            options["rpm_dest"] = rpm_dest
        if keep_temp:
            options["keep_temp"] = True
        if quiet:
            options["verbose"] = False
        writer = load_descriptor_writer(descriptor_writer)
        rpm = build_package(options, writer)
    except (OSError, RpmBuilderError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(rpm)


if __name__ == "__main__":
    app()
