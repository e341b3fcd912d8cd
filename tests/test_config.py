"""Tests for config.py."""

from pathlib import Path

import pytest
from pytest import MonkeyPatch

from apkversion import (
    BuildSettings,
    ConfigError,
    EnvironConfig,
    InvalidVersionError,
    MappingConfig,
    build_artifacts_dir,
    build_version_code,
    build_version_name,
    load_settings,
)
from apkversion.config import has_flag, is_true


# Providers
def test_environ_config_reads_at_call_time(monkeypatch: MonkeyPatch) -> None:
    """Test that EnvironConfig sees variables set after it was created."""
    config = EnvironConfig()
    monkeypatch.delenv("APKVERSION_TEST", raising=False)
    assert config.get("APKVERSION_TEST") is None

    monkeypatch.setenv("APKVERSION_TEST", "value")
    assert config.get("APKVERSION_TEST") == "value"


def test_environ_config_with_mapping() -> None:
    """Test EnvironConfig over an explicit mapping."""
    config = EnvironConfig({"A": "1"})
    assert config.get("A") == "1"
    assert config.get("B") is None


def test_mapping_config_copies_values() -> None:
    """Test that MappingConfig is not affected by later changes."""
    values = {"A": "1"}
    config = MappingConfig(values)
    values["A"] = "2"
    assert config.get("A") == "1"
    assert MappingConfig().get("A") is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, False), ("", False), ("false", False), ("0", False), ("OFF", False),
     ("true", True), ("1", True), ("anything", True)],
)  # fmt: skip
def test_has_flag(value: str | None, expected: bool) -> None:
    """Test property flag detection."""
    config = MappingConfig({} if value is None else {"IGNORE_VAULT": value})
    assert has_flag(config, "IGNORE_VAULT") is expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, False), ("", False), ("anything", False), ("TRUE", True),
     ("yes", True), ("1", True)],
)  # fmt: skip
def test_is_true(value: str | None, expected: bool) -> None:
    """Test explicit true values."""
    config = MappingConfig({} if value is None else {"FLAG": value})
    assert is_true(config, "FLAG") is expected


# Version name
def test_build_version_name_substitutes_build_number(
    ci_config: MappingConfig,
) -> None:
    """Test that the build number placeholder is replaced."""
    assert build_version_name(ci_config) == "2.65.97-SNAPSHOT"
    assert build_version_code(ci_config) == 2065097


def test_build_version_name_replaces_every_placeholder() -> None:
    """Test that all placeholders are replaced."""
    config = MappingConfig(
        {
            "CIRCLE_VERSION_NAME": "1.${CIRCLE_BUILD_NUM}.${CIRCLE_BUILD_NUM}",
            "CIRCLE_BUILD_NUM": "7",
        }
    )
    assert build_version_name(config) == "1.7.7"


def test_build_version_name_without_build_number() -> None:
    """Test that a missing build number is substituted with nothing."""
    config = MappingConfig({"CIRCLE_VERSION_NAME": "1.2.${CIRCLE_BUILD_NUM}"})
    assert build_version_name(config) == "1.2."
    assert build_version_code(config) == 1002000


@pytest.mark.parametrize("values", [{}, {"CIRCLE_VERSION_NAME": ""}])
def test_build_version_name_default(values: dict[str, str]) -> None:
    """Test the fallback version name."""
    config = MappingConfig(values)
    assert build_version_name(config) == "0.0.42"
    assert build_version_code(config) == 42


def test_build_version_name_custom_settings() -> None:
    """Test reading the version name from other variables."""
    settings = BuildSettings(
        version_name_env="TAG",
        build_number_env="BUILD_ID",
        default_version_name="1.0.0",
    )
    config = MappingConfig({"TAG": "3.1.${BUILD_ID} main", "BUILD_ID": "5"})
    assert build_version_name(config, settings) == "3.1.5 main"
    assert build_version_code(config, settings) == 3001005
    assert build_version_name(MappingConfig(), settings) == "1.0.0"


def test_build_version_code_propagates_parse_errors() -> None:
    """Test that a malformed version name is reported."""
    config = MappingConfig({"CIRCLE_VERSION_NAME": "release.candidate"})
    with pytest.raises(InvalidVersionError):
        build_version_code(config)


# Artifacts dir
def test_build_artifacts_dir_from_environment(ci_config: MappingConfig) -> None:
    """Test the artifacts dir set by the CI."""
    assert build_artifacts_dir(ci_config) == Path("/tmp/artifacts")


def test_build_artifacts_dir_default(tmp_path: Path) -> None:
    """Test the artifacts dir below the project root."""
    assert build_artifacts_dir(MappingConfig(), root=tmp_path) == (
        tmp_path / "build" / "artifacts"
    )


# Settings files
def test_load_settings_defaults(tmp_path: Path) -> None:
    """Test that defaults are used when no config file exists."""
    assert load_settings(tmp_path) == BuildSettings()


def test_load_settings_from_config_file(tmp_path: Path) -> None:
    """Test reading apkversion.toml."""
    (tmp_path / "apkversion.toml").write_text(
        """
[apkversion]
default_version_name = "1.0.0"
artifacts_dir = "out"

[apkversion.secret_paths]
key_alias = "kv/android/key_alias"
"""
    )
    settings = load_settings(tmp_path)
    assert settings.default_version_name == "1.0.0"
    assert settings.artifacts_dir == Path("out")
    assert settings.secret_paths.key_alias == "kv/android/key_alias"
    assert settings.secret_paths.key_password == "secret/key_password"


def test_load_settings_from_pyproject(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    """Test reading the tool table of pyproject.toml in the current dir."""
    (tmp_path / "pyproject.toml").write_text(
        """
[project]
name = "app"

[tool.apkversion]
version_name_env = "GIT_TAG"
"""
    )
    monkeypatch.chdir(tmp_path)
    assert load_settings().version_name_env == "GIT_TAG"


def test_load_settings_prefers_config_file(tmp_path: Path) -> None:
    """Test that apkversion.toml wins over pyproject.toml."""
    (tmp_path / "apkversion.toml").write_text('[apkversion]\nversion_name_env = "A"\n')
    (tmp_path / "pyproject.toml").write_text(
        '[tool.apkversion]\nversion_name_env = "B"\n'
    )
    assert load_settings(tmp_path).version_name_env == "A"


def test_load_settings_explicit_file(tmp_path: Path) -> None:
    """Test passing a config file path."""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[tool.apkversion]\nartifacts_env = "OUT"\n')
    other = tmp_path / "custom.toml"
    other.write_text('artifacts_env = "CUSTOM"\n')

    assert load_settings(pyproject).artifacts_env == "OUT"
    assert load_settings(other).artifacts_env == "CUSTOM"


def test_load_settings_invalid_toml(tmp_path: Path) -> None:
    """Test that broken TOML raises ConfigError."""
    (tmp_path / "apkversion.toml").write_text("[apkversion\n")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_settings(tmp_path)


def test_load_settings_unknown_key(tmp_path: Path) -> None:
    """Test that unknown settings are rejected."""
    (tmp_path / "apkversion.toml").write_text('[apkversion]\nversion = "1"\n')
    with pytest.raises(ConfigError, match="Invalid apkversion configuration"):
        load_settings(tmp_path)


def test_load_settings_missing_path(tmp_path: Path) -> None:
    """Test that an explicit path must exist."""
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "missing.toml")
