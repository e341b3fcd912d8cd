"""Exceptions raised by apkversion."""

from typing import Self


class ApkVersionError(Exception):
    """Base exception for all apkversion errors."""


class InvalidVersionError(ApkVersionError, ValueError):
    """Raised when a version string cannot be turned into a version code."""

    def __init__(self: Self, version: str, message: str | None = None) -> None:
        """Initialize the error.

        Args:
            version: The offending version string.
            message: Optional explanation of what is wrong with it.
        """
        self.version = version
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"Invalid version format: {version!r}{detail}")


class ConfigError(ApkVersionError):
    """Raised when configuration is missing or malformed."""


class SecretError(ApkVersionError):
    """Raised when a signing secret cannot be read from the vault."""

    def __init__(self: Self, path: str, description: str) -> None:
        """Initialize the error.

        Args:
            path: Vault path of the secret that failed.
            description: Human readable name of the secret.
        """
        self.path = path
        self.description = description
        super().__init__(
            f"There was an error while reading the {description} from vault.\n"
            f"Make sure to have {path} in the vault.\n"
            "Run with IGNORE_VAULT set to skip secrets and sign the release "
            "using a dummy signature"
        )


class DirtyRepositoryError(ApkVersionError):
    """Raised when the working copy has uncommitted changes."""

    def __init__(self: Self) -> None:
        """Initialize the error."""
        super().__init__(
            "There are some uncommitted changes in your local git copy. "
            "Please clean your repo and try again!\n\n"
            "To ignore this message, set IGNORE_REPOSITORY_STATE=true"
        )
