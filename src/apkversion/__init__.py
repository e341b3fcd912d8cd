"""apkversion - Android build versioning and release signing helpers.

Turns free-form version names into integer version codes and handles the
release signing secrets of a build.
"""

from ._version import __version__
from .config import (
    BuildSettings,
    EnvironConfig,
    MappingConfig,
    SecretPaths,
    build_artifacts_dir,
    build_version_code,
    build_version_name,
    load_settings,
)
from .exceptions import (
    ApkVersionError,
    ConfigError,
    DirtyRepositoryError,
    InvalidVersionError,
    SecretError,
)
from .repo_state import check_clean_repo
from .signing import (
    SigningCredentials,
    VaultSecretProvider,
    check_vault_environment,
    release_signing,
)
from .types import ConfigProvider, SecretProvider, VersionCode, VersionName
from .version_code import (
    FALLBACK_VERSION_CODE,
    NormalizedVersion,
    compute_version_code,
    encode_version,
    normalize_version_string,
)

__all__ = [
    "FALLBACK_VERSION_CODE",
    "ApkVersionError",
    "BuildSettings",
    "ConfigError",
    "ConfigProvider",
    "DirtyRepositoryError",
    "EnvironConfig",
    "InvalidVersionError",
    "MappingConfig",
    "NormalizedVersion",
    "SecretError",
    "SecretPaths",
    "SecretProvider",
    "SigningCredentials",
    "VaultSecretProvider",
    "VersionCode",
    "VersionName",
    "__version__",
    "build_artifacts_dir",
    "build_version_code",
    "build_version_name",
    "check_clean_repo",
    "check_vault_environment",
    "compute_version_code",
    "encode_version",
    "load_settings",
    "normalize_version_string",
    "release_signing",
]
