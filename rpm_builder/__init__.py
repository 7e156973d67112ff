"""Public interface for the RPM build helper package."""

from .build_tree import RPM_LAYOUT, RpmTree, setup_build_tree, teardown_build_tree
from .config import BuildConfig, ExecOptions, FileSelection, load_config, merge_config
from .console import NULL_LOGGER, ConsoleLogger, Logger
from .errors import (
    ConfigurationError,
    ExternalToolError,
    InvalidDirectiveError,
    RpmBuilderError,
)
from .exclusion import ExclusionSet
from .glob_utils import resolve_patterns
from .pipeline import DescriptorWriter, build, build_package
from .rpmbuild import find_rpm_path, run_rpmbuild
from .staging import ManifestEntry, check_directive, stage_files

__all__ = [
    "BuildConfig",
    "build",
    "build_package",
    "check_directive",
    "ConfigurationError",
    "ConsoleLogger",
    "DescriptorWriter",
    "ExclusionSet",
    "ExecOptions",
    "ExternalToolError",
    "FileSelection",
    "find_rpm_path",
    "InvalidDirectiveError",
    "load_config",
    "Logger",
    "ManifestEntry",
    "merge_config",
    "NULL_LOGGER",
    "resolve_patterns",
    "RPM_LAYOUT",
    "RpmBuilderError",
    "RpmTree",
    "run_rpmbuild",
    "setup_build_tree",
    "stage_files",
    "teardown_build_tree",
]
