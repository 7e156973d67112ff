"""Build orchestration: stage files, write the SPEC, run ``rpmbuild``."""

from __future__ import annotations

import asyncio
import importlib
import os
import typing as typ
from pathlib import Path

from .build_tree import setup_build_tree, teardown_build_tree
from .config import BuildConfig, merge_config
from .console import ConsoleLogger, Logger
from .errors import ConfigurationError
from .exclusion import ExclusionSet
from .rpmbuild import copy_rpm, find_rpm_path, run_rpmbuild
from .staging import ManifestEntry, stage_files

__all__ = ["DescriptorWriter", "build", "build_package", "load_descriptor_writer"]


class DescriptorWriter(typ.Protocol):
    """Render a SPEC file for ``manifest`` and return its path."""

    def __call__(
        self, manifest: list[ManifestEntry], config: BuildConfig
    ) -> str | os.PathLike[str]: ...


def build_package(
    options: typ.Mapping[str, typ.Any] | BuildConfig,
    descriptor_writer: DescriptorWriter,
    *,
    log: Logger | None = None,
    temp_dir_factory: typ.Callable[[], str | os.PathLike[str]] | None = None,
) -> Path:
    """Run a complete build and return the path of the produced package.

    Parameters
    ----------
    options : Mapping[str, Any] | BuildConfig
        User options merged over the defaults by :func:`merge_config`.
    descriptor_writer : DescriptorWriter
        Renders the SPEC file from the manifest and merged configuration.
    log : Logger, optional
        Progress sink. Defaults to a :class:`ConsoleLogger` honouring
        ``verbose``.
    temp_dir_factory : Callable[[], str | PathLike], optional
        Names the temporary tree when ``temp_dir`` is not configured.

    Returns
    -------
    Path
        The package copied into ``rpm_dest``, or where ``rpmbuild`` wrote it
        when no destination is configured.

    Raises
    ------
    ConfigurationError
        Raised for invalid options, selections, or directives. The tree is
        left in place when staging fails.
    ExternalToolError
        Raised when ``rpmbuild`` fails or reports no package. The tree is
        left in place.
    OSError
        Propagated from filesystem operations.
    """
    if not callable(descriptor_writer):
        message = "descriptor_writer must be callable"
        raise ConfigurationError(message)

    config = merge_config(options, temp_dir_factory=temp_dir_factory)
    log = log or ConsoleLogger(verbose=config.verbose)

    tree = setup_build_tree(config.tree_dir, log=log)
    exclusions = ExclusionSet.build(config.exclude_files)
    manifest = stage_files(config.files, exclusions, tree.build_root, log=log)

    spec_file = Path(descriptor_writer(manifest, config))
    log(f"SPEC file created: {spec_file}")

    stdout = run_rpmbuild(tree.build_root, spec_file, config.exec_options, log=log)
    rpm = find_rpm_path(stdout)
    if config.rpm_dest is not None:
        rpm = copy_rpm(rpm, config.rpm_dest, log=log)

    if not config.keep_temp:
        teardown_build_tree(tree.root, log=log)
    return rpm


async def build(
    options: typ.Mapping[str, typ.Any] | BuildConfig,
    descriptor_writer: DescriptorWriter,
    *,
    log: Logger | None = None,
    temp_dir_factory: typ.Callable[[], str | os.PathLike[str]] | None = None,
) -> Path:
    """Asynchronous form of :func:`build_package`.

    The build runs in a worker thread; the awaitable resolves once with the
    package path or raises the build's error. No timeout is applied here,
    wrap the call in :func:`asyncio.wait_for` if one is needed.

    Examples
    --------
    >>> rpm = asyncio.run(build({"name": "app"}, write_spec))  # doctest: +SKIP
    """
    return await asyncio.to_thread(
        build_package,
        options,
        descriptor_writer,
        log=log,
        temp_dir_factory=temp_dir_factory,
    )


def load_descriptor_writer(reference: str) -> DescriptorWriter:
    """Import a descriptor writer from a ``"module:attribute"`` reference.

    Raises
    ------
    ConfigurationError
        Raised when the reference is malformed, cannot be imported, or does
        not name a callable.
    """
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        message = f"Descriptor writer must look like 'module:callable', got {reference!r}"
        raise ConfigurationError(message)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        message = f"Cannot import descriptor writer module {module_name!r}: {exc}"
        raise ConfigurationError(message) from exc
    writer = module
    for part in attribute.split("."):
        writer = getattr(writer, part, None)
        if writer is None:
            message = f"Descriptor writer {reference!r} not found"
            raise ConfigurationError(message)
    if not callable(writer):
        message = f"Descriptor writer {reference!r} is not callable"
        raise ConfigurationError(message)
    return typ.cast(DescriptorWriter, writer)
