"""Release signing credentials.

Signing material is read from a Vault KV store. The keystore is stored base64
encoded; it is decoded into a temporary file which is overwritten with random
bytes and deleted when the signing scope ends.
"""

import base64
import binascii
import logging
import os
import secrets
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Self

import httpx
from pydantic import SecretStr

from .config import IGNORE_VAULT, VAULT_ADDR, VAULT_TOKEN, BuildSettings, has_flag
from .exceptions import ConfigError, SecretError
from .types import ConfigProvider, SecretPath, SecretProvider

logger = logging.getLogger(__name__)

DUMMY_PASSWORD: Final = "dummypassword"
DUMMY_KEY_ALIAS: Final = "dummy-alias"
KEYSTORE_PREFIX: Final = "apk-ks"
KEYSTORE_SUFFIX: Final = ".jksdump"


@dataclass(frozen=True)
class SigningCredentials:
    """Material needed to sign a release.

    Attributes:
        keystore: Path to the keystore file.
        store_password: Password of the keystore.
        key_alias: Alias of the signing key.
        key_password: Password of the signing key.
        dummy: True if these are the dummy credentials.
    """

    keystore: Path
    store_password: SecretStr
    key_alias: str
    key_password: SecretStr
    dummy: bool = False


class VaultSecretProvider:
    """Reads secrets over the Vault HTTP API.

    Both KV version 1 (``data.value``) and version 2 (``data.data.value``)
    response layouts are supported.
    """

    def __init__(
        self: Self,
        address: str,
        token: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            address: Vault address, e.g. ``https://vault.example.com:8200``.
            token: Vault token.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport.
        """
        self.address = address.rstrip("/")
        self._token = token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config: ConfigProvider) -> Self:
        """Create a provider from ``VAULT_ADDR`` and ``VAULT_TOKEN``.

        Raises:
            ConfigError: If either variable is unset.
        """
        address = config.get(VAULT_ADDR)
        token = config.get(VAULT_TOKEN)
        if not address or not token:
            raise ConfigError(_missing_coordinates_message())
        return cls(address, token)

    def get(self: Self, path: SecretPath) -> str:
        """Return the ``value`` field of the secret at ``path``.

        Raises:
            SecretError: If the request fails or the secret has no value.
        """
        url = f"{self.address}/v1/{path.lstrip('/')}"
        logger.debug("Reading secret %s", path)
        try:
            with httpx.Client(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = client.get(url, headers={"X-Vault-Token": self._token})
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SecretError(path, "secret") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict) or not isinstance(data.get("value"), str):
            raise SecretError(path, "secret")
        return data["value"]


def _missing_coordinates_message() -> str:
    return (
        "Vault coordinates are not configured.\n"
        f"{VAULT_ADDR} and {VAULT_TOKEN} need to be set as environment variables.\n"
        f"Set {IGNORE_VAULT} to skip secrets and sign the release "
        "using a dummy signature"
    )


def check_vault_environment(config: ConfigProvider) -> None:
    """Check that the vault can be reached unless the vault is ignored.

    Raises:
        ConfigError: If ``VAULT_ADDR`` or ``VAULT_TOKEN`` is unset.
    """
    if has_flag(config, IGNORE_VAULT):
        logger.info("%s is set, releases use the dummy signature", IGNORE_VAULT)
        return

    if config.get(VAULT_ADDR) is None or config.get(VAULT_TOKEN) is None:
        raise ConfigError(_missing_coordinates_message())


def wipe_file(path: Path | None) -> None:
    """Overwrite a file with random bytes, then delete it.

    Failures are logged and never raised. A missing file is ignored.
    """
    if path is None or not path.exists():
        return

    try:
        size = path.stat().st_size
        with open(path, "r+b") as f:
            f.seek(0)
            f.write(secrets.token_bytes(size))
            f.flush()
            os.fsync(f.fileno())
    except OSError:
        logger.warning("Could not overwrite %s", path, exc_info=True)

    try:
        path.unlink()
    except OSError:
        logger.warning("Could not delete %s", path, exc_info=True)


def _fetch(provider: SecretProvider, path: SecretPath, description: str) -> str:
    try:
        return provider.get(path)
    except Exception as e:
        raise SecretError(path, description) from e


def _write_keystore(data: str, path: SecretPath, directory: Path | None) -> Path:
    try:
        keystore_bytes = base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise SecretError(path, "keystore data") from e

    with tempfile.NamedTemporaryFile(
        prefix=KEYSTORE_PREFIX, suffix=KEYSTORE_SUFFIX, dir=directory, delete=False
    ) as f:
        f.write(keystore_bytes)
    return Path(f.name)


@contextmanager
def release_signing(
    provider: SecretProvider | None,
    settings: BuildSettings | None = None,
    ignore_vault: bool = False,
    temp_dir: Path | None = None,
) -> Iterator[SigningCredentials]:
    """Acquire release signing credentials for the duration of a block.

    With ``ignore_vault`` the dummy keystore and passwords are returned.
    Otherwise the secrets are read from ``provider``; the decoded keystore is
    wiped on exit, including when an error is raised.

    Args:
        provider: Secret provider. Unused when ``ignore_vault`` is True.
        settings: Build settings. Defaults to ``BuildSettings()``.
        ignore_vault: Use the dummy signature.
        temp_dir: Directory for the decoded keystore.

    Yields:
        The signing credentials.

    Raises:
        SecretError: If a secret cannot be read.

    Example:
        >>> with release_signing(VaultSecretProvider.from_config(config)) as creds:
        ...     sign(apk, creds.keystore, creds.store_password.get_secret_value())
    """
    settings = settings or BuildSettings()

    if ignore_vault:
        logger.info("Signing with dummy keystore %s", settings.dummy_keystore)
        yield SigningCredentials(
            keystore=settings.dummy_keystore,
            store_password=SecretStr(DUMMY_PASSWORD),
            key_alias=DUMMY_KEY_ALIAS,
            key_password=SecretStr(DUMMY_PASSWORD),
            dummy=True,
        )
        return

    if provider is None:
        raise ValueError("A secret provider is required unless the vault is ignored")

    paths = settings.secret_paths
    keystore: Path | None = None
    try:
        data = _fetch(provider, paths.keystore_file_data, "keystore data")
        keystore = _write_keystore(data, paths.keystore_file_data, temp_dir)
        del data
        logger.debug("Keystore written to %s", keystore)

        credentials = SigningCredentials(
            keystore=keystore,
            store_password=SecretStr(
                _fetch(provider, paths.keystore_password, "keystore password")
            ),
            key_alias=_fetch(provider, paths.key_alias, "key alias"),
            key_password=SecretStr(
                _fetch(provider, paths.key_password, "key password")
            ),
        )
        yield credentials
    finally:
        wipe_file(keystore)
        logger.debug("Signing secrets cleared")
