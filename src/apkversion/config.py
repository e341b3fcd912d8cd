"""Build configuration.

Settings are read from ``apkversion.toml`` (``[apkversion]`` table) or from
``pyproject.toml`` (``[tool.apkversion]`` table). Runtime values such as the
CI version name come from a ``ConfigProvider``, by default the process
environment.
"""

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigError
from .types import ConfigProvider, VersionCode, VersionName
from .version_code import compute_version_code

logger = logging.getLogger(__name__)

CONFIG_FILE: Final = "apkversion.toml"
PYPROJECT_FILE: Final = "pyproject.toml"

IGNORE_VAULT: Final = "IGNORE_VAULT"
IGNORE_REPOSITORY_STATE: Final = "IGNORE_REPOSITORY_STATE"
VAULT_ADDR: Final = "VAULT_ADDR"
VAULT_TOKEN: Final = "VAULT_TOKEN"

_FALSE_VALUES: Final = frozenset({"", "0", "false", "no", "off"})
_TRUE_VALUES: Final = frozenset({"1", "true", "yes", "on"})


class EnvironConfig:
    """Configuration provider backed by environment variables."""

    def __init__(self: Self, environ: Mapping[str, str] | None = None) -> None:
        """Initialize the provider.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``, read at
                call time.
        """
        self._environ = environ

    def get(self: Self, key: str) -> str | None:
        environ = os.environ if self._environ is None else self._environ
        return environ.get(key)


class MappingConfig:
    """Configuration provider backed by a plain dictionary."""

    def __init__(self: Self, values: Mapping[str, str] | None = None) -> None:
        self._values = dict(values or {})

    def get(self: Self, key: str) -> str | None:
        return self._values.get(key)


class SecretPaths(BaseModel):
    """Vault paths of the release signing secrets."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    keystore_file_data: str = "secret/keystore_file_data"
    keystore_password: str = "secret/keystore_password"
    key_alias: str = "secret/key_alias"
    key_password: str = "secret/key_password"


class BuildSettings(BaseModel):
    """Names and defaults used to resolve build information.

    Attributes:
        version_name_env: Variable holding the version name.
        build_number_env: Variable substituted for ``${<name>}`` placeholders
            in the version name.
        default_version_name: Version name used when none is configured.
        artifacts_env: Variable holding the artifacts directory.
        artifacts_dir: Artifacts directory relative to the project root.
        dummy_keystore: Keystore used when signing without the vault.
        secret_paths: Vault paths of the signing secrets.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    version_name_env: str = "CIRCLE_VERSION_NAME"
    build_number_env: str = "CIRCLE_BUILD_NUM"
    default_version_name: str = "0.0.42"
    artifacts_env: str = "CIRCLE_ARTIFACTS"
    artifacts_dir: Path = Path("build/artifacts")
    dummy_keystore: Path = Path("../keystores/dummy-release.keystore")
    secret_paths: SecretPaths = Field(default_factory=SecretPaths)


def has_flag(config: ConfigProvider, key: str) -> bool:
    """Check whether a property flag such as ``IGNORE_VAULT`` is set.

    A flag counts as set when it is present and not a false-like value.
    """
    value = config.get(key)
    return value is not None and value.strip().lower() not in _FALSE_VALUES


def is_true(config: ConfigProvider, key: str) -> bool:
    """Check whether ``key`` holds an explicit true value."""
    value = config.get(key)
    return value is not None and value.strip().lower() in _TRUE_VALUES


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e


def find_config_table(path: Path | None = None) -> dict[str, Any]:
    """Locate the apkversion configuration table.

    Args:
        path: A config file, or a directory to search. Defaults to the current
            working directory.

    Returns:
        The configuration table, empty if none was found.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    if path is not None and not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    if path is not None and path.is_file():
        data = _read_toml(path)
        if path.name == PYPROJECT_FILE:
            return data.get("tool", {}).get("apkversion", {})
        return data.get("apkversion", data)

    directory = path or Path.cwd()

    config_file = directory / CONFIG_FILE
    if config_file.exists():
        logger.debug("Reading settings from %s", config_file)
        return _read_toml(config_file).get("apkversion", {})

    pyproject = directory / PYPROJECT_FILE
    if pyproject.exists():
        table = _read_toml(pyproject).get("tool", {}).get("apkversion", {})
        if table:
            logger.debug("Reading settings from %s", pyproject)
        return table

    return {}


def load_settings(path: Path | None = None) -> BuildSettings:
    """Load build settings, falling back to defaults.

    Args:
        path: A config file or a directory to search.

    Returns:
        The build settings.

    Raises:
        ConfigError: If the configuration cannot be read or is invalid.
    """
    table = find_config_table(path)
    try:
        return BuildSettings.model_validate(table)
    except ValidationError as e:
        raise ConfigError(f"Invalid apkversion configuration: {e}") from e


def build_version_name(
    config: ConfigProvider, settings: BuildSettings | None = None
) -> VersionName:
    """Resolve the version name of the current build.

    ``${<build_number_env>}`` placeholders in the configured version name are
    replaced with the build number.

    Args:
        config: Configuration provider.
        settings: Build settings. Defaults to ``BuildSettings()``.

    Returns:
        The version name, or the default version name if none is configured.
    """
    settings = settings or BuildSettings()
    version_name = config.get(settings.version_name_env)
    if not version_name:
        return settings.default_version_name

    placeholder = f"${{{settings.build_number_env}}}"
    build_number = config.get(settings.build_number_env) or ""
    return version_name.replace(placeholder, build_number)


def build_version_code(
    config: ConfigProvider, settings: BuildSettings | None = None
) -> VersionCode:
    """Compute the version code of the current build."""
    return compute_version_code(build_version_name(config, settings))


def build_artifacts_dir(
    config: ConfigProvider,
    settings: BuildSettings | None = None,
    root: Path | None = None,
) -> Path:
    """Resolve the directory build artifacts are delivered to.

    Args:
        config: Configuration provider.
        settings: Build settings. Defaults to ``BuildSettings()``.
        root: Project root. Defaults to the current working directory.

    Returns:
        The artifacts directory.
    """
    settings = settings or BuildSettings()
    artifacts = config.get(settings.artifacts_env)
    if artifacts:
        return Path(artifacts)
    return (root or Path.cwd()) / settings.artifacts_dir
