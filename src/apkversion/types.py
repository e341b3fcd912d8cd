"""Type aliases needed in the package."""

from collections.abc import Callable, Sequence
from subprocess import CompletedProcess
from typing import Any, Protocol, TypeAlias

VersionName: TypeAlias = str
VersionCode: TypeAlias = int
SecretPath: TypeAlias = str

CommandRunner: TypeAlias = Callable[..., CompletedProcess[Any]]
Command: TypeAlias = Sequence[str]


class ConfigProvider(Protocol):
    """Read-only key/value configuration source."""

    def get(self, key: str) -> str | None:
        """Return the value stored under ``key`` or None if it is unset."""
        ...


class SecretProvider(Protocol):
    """Source of signing secrets addressed by path."""

    def get(self, path: SecretPath) -> str:
        """Return the ``value`` field of the secret stored at ``path``."""
        ...
