"""Tests covering option merging and TOML loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from rpm_builder import (
    BuildConfig,
    ConfigurationError,
    ExecOptions,
    FileSelection,
    load_config,
    merge_config,
)


def test_merge_config_fills_defaults(workspace: Path) -> None:
    """Every field has a default when no options are supplied."""
    config = merge_config({}, temp_dir_factory=lambda: "tmp-fixed")

    assert config.name == "no-name"
    assert config.version == "0.0.0"
    assert config.release == "1"
    assert config.license == "MIT"
    assert config.group == "Development/Tools"
    assert config.build_arch == "noarch"
    assert config.temp_dir == Path("tmp-fixed")
    assert config.tree_dir == workspace / "tmp-fixed"
    assert config.files == ()
    assert config.exclude_files == ()
    assert config.rpm_dest == workspace
    assert config.keep_temp is False
    assert config.verbose is True
    assert config.exec_options == ExecOptions()


def test_merge_config_default_temp_dir_is_random() -> None:
    """Unset temp dirs get distinct random names."""
    first = merge_config({}).temp_dir.name
    second = merge_config({}).temp_dir.name

    assert first.startswith("tmp-")
    assert first != second


def test_build_config_default_temp_dir_is_random() -> None:
    """Configs built directly also get a fresh tree name per instance."""
    first = BuildConfig().temp_dir
    second = BuildConfig().temp_dir

    assert first.name.startswith("tmp-")
    assert first != second
    assert merge_config(BuildConfig()).temp_dir.name.startswith("tmp-")


def test_mapping_fields_are_read_only_and_hashable() -> None:
    """``env`` and ``extra`` cannot be changed after construction."""
    source = {"QA_RPATHS": "0x0001"}
    options = ExecOptions(env=source)
    config = BuildConfig(temp_dir=Path("tree"), exec_options=options, extra={"requires": []})
    source["LATE"] = "1"

    assert options.env == {"QA_RPATHS": "0x0001"}, "Caller dict is copied"
    with pytest.raises(TypeError):
        options.env["OTHER"] = "1"  # type: ignore[index]
    with pytest.raises(TypeError):
        config.extra["requires"] = ["x"]  # type: ignore[index]
    assert isinstance(hash(options), int)
    assert isinstance(hash(config), int)


def test_merge_config_overrides_field_by_field() -> None:
    """User values replace defaults; ``None`` falls back to the default."""
    config = merge_config(
        {
            "name": "app",
            "version": "1.2.3",
            "summary": None,
            "buildArch": "x86_64",
            "keepTemp": True,
            "excludeFiles": "dist/*.map",
        }
    )

    assert config.name == "app"
    assert config.version == "1.2.3"
    assert config.summary == "No summary"
    assert config.build_arch == "x86_64"
    assert config.keep_temp is True
    assert config.exclude_files == ("dist/*.map",)


def test_merge_config_replaces_exec_options_wholesale(tmp_path: Path) -> None:
    """Nested exec options are not merged key by key."""
    config = merge_config({"execOpts": {"cwd": str(tmp_path), "env": {"A": 1}}})

    assert config.exec_options == ExecOptions(env={"A": "1"}, cwd=tmp_path)
    assert config.exec_options.rpmbuild == "rpmbuild"
    assert config.exec_options.timeout is None


def test_merge_config_keeps_unknown_keys_as_extra() -> None:
    """Unrecognised options are passed through for descriptor writers."""
    config = merge_config({"requires": ["nodejs"], "name": "app"})

    assert config.extra == {"requires": ["nodejs"]}


def test_merge_config_builds_file_selections() -> None:
    """Selection mappings become :class:`FileSelection` values."""
    config = merge_config(
        {
            "files": [
                {"src": "*.txt", "dest": "docs", "cwd": "fixtures", "directive": "doc"},
                {"src": ["**/*", "!*.map"], "dest": "/opt/app", "directive": ""},
            ]
        }
    )

    assert config.files == (
        FileSelection(src="*.txt", dest="docs", cwd="fixtures", directive="doc"),
        FileSelection(src=("**/*", "!*.map"), dest="/opt/app"),
    )


@pytest.mark.parametrize(
    "entry",
    [
        pytest.param({"dest": "docs"}, id="missing-src"),
        pytest.param({"src": "*.txt"}, id="missing-dest"),
        pytest.param("*.txt", id="not-a-table"),
        pytest.param({"src": 5, "dest": "docs"}, id="bad-src"),
    ],
)
def test_merge_config_rejects_invalid_selections(entry: object) -> None:
    """Incomplete selections are configuration errors."""
    with pytest.raises(ConfigurationError, match="entry #1"):
        merge_config({"files": [entry]})


@pytest.mark.parametrize(
    ("options", "expected_match"),
    [
        pytest.param({"keep_temp": "yes"}, "keep_temp must be a boolean", id="flag"),
        pytest.param({"files": "*.txt"}, "files must be a list", id="files"),
        pytest.param({"exclude_files": [1]}, "exclude_files", id="excludes"),
        pytest.param({"exec_options": {"shell": True}}, "Unknown exec_options", id="exec"),
        pytest.param({"exec_options": {"env": "A=1"}}, "env must be a table", id="env"),
        pytest.param({"rpm_dest": 3}, "rpm_dest", id="rpm-dest"),
    ],
)
def test_merge_config_validates_types(options: dict[str, object], expected_match: str) -> None:
    """Wrongly typed options are rejected."""
    with pytest.raises(ConfigurationError, match=expected_match):
        merge_config(options)


def test_merge_config_requires_mapping() -> None:
    """Non-mapping options are rejected."""
    with pytest.raises(ConfigurationError, match="options must be a mapping"):
        merge_config(["name", "app"])  # type: ignore[arg-type]


def test_merge_config_empty_rpm_dest_disables_copy() -> None:
    """An empty destination leaves the package where rpmbuild wrote it."""
    assert merge_config({"rpm_dest": ""}).rpm_dest is None


def test_merge_config_returns_build_config_unchanged() -> None:
    """An already merged configuration passes through."""
    config = BuildConfig(name="app")

    assert merge_config(config) is config


def test_load_config_reads_toml(tmp_path: Path) -> None:
    """``load_config`` returns the raw option tables."""
    config_file = tmp_path / "rpm.toml"
    config_file.write_text(
        """\
name = "app"
version = "1.0.0"
exclude_files = ["dist/*.map"]
requires = ["nodejs"]

[[files]]
src = "**/*"
dest = "/opt/app"
cwd = "dist"

[[files]]
src = "README.md"
dest = "/usr/share/doc/app"
directive = "doc"

[exec_options]
timeout = 600
env = { QA_RPATHS = "0x0001" }
""",
        encoding="utf-8",
    )

    config = merge_config(load_config(config_file))

    assert config.name == "app"
    assert [selection.dest for selection in config.files] == [
        "/opt/app",
        "/usr/share/doc/app",
    ]
    assert config.files[1].directive == "doc"
    assert config.exec_options.timeout == 600.0
    assert config.exec_options.env == {"QA_RPATHS": "0x0001"}
    assert config.extra == {"requires": ["nodejs"]}


def test_load_config_missing_file(tmp_path: Path) -> None:
    """A missing file raises ``FileNotFoundError``."""
    with pytest.raises(FileNotFoundError, match="Configuration file not found"):
        load_config(tmp_path / "absent.toml")


@pytest.mark.parametrize(
    ("content", "expected_match"),
    [
        ("name = ", "Invalid TOML"),
        ('name = "app"\n', "Missing required key"),
        ('files = "*.txt"\n', "array of tables"),
    ],
)
def test_load_config_rejects_invalid_files(
    tmp_path: Path, content: str, expected_match: str
) -> None:
    """Malformed build files are configuration errors."""
    config_file = tmp_path / "rpm.toml"
    config_file.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError, match=expected_match):
        load_config(config_file)
