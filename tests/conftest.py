"""Shared fixtures."""

import base64
import json
from pathlib import Path

import httpx
import pytest

from apkversion import MappingConfig, VaultSecretProvider


@pytest.fixture
def keystore_bytes() -> bytes:
    """Raw keystore stored in the fake vault."""
    return b"\xfe\xed\xfe\xed fake keystore contents"


@pytest.fixture
def vault_secrets(keystore_bytes: bytes) -> dict[str, str]:
    """Secrets stored in the fake vault, keyed by path."""
    return {
        "secret/keystore_file_data": base64.b64encode(keystore_bytes).decode(),
        "secret/keystore_password": "store-pass",
        "secret/key_alias": "release",
        "secret/key_password": "key-pass",
    }


@pytest.fixture
def vault_requests() -> list[httpx.Request]:
    """Requests received by the fake vault."""
    return []


@pytest.fixture
def vault_transport(
    vault_secrets: dict[str, str], vault_requests: list[httpx.Request]
) -> httpx.MockTransport:
    """Transport answering like a KV version 2 vault."""

    def handler(request: httpx.Request) -> httpx.Response:
        vault_requests.append(request)
        if request.headers.get("X-Vault-Token") != "s.token":
            return httpx.Response(403, json={"errors": ["permission denied"]})
        path = request.url.path.removeprefix("/v1/")
        if path not in vault_secrets:
            return httpx.Response(404, json={"errors": []})
        body = {"data": {"data": {"value": vault_secrets[path]}, "metadata": {}}}
        return httpx.Response(200, content=json.dumps(body))

    return httpx.MockTransport(handler)


@pytest.fixture
def vault(vault_transport: httpx.MockTransport) -> VaultSecretProvider:
    """Vault provider talking to the fake vault."""
    return VaultSecretProvider(
        "https://vault.example.com/", "s.token", transport=vault_transport
    )


@pytest.fixture
def ci_config() -> MappingConfig:
    """Configuration as found on a CI build."""
    return MappingConfig(
        {
            "CIRCLE_VERSION_NAME": "2.65.${CIRCLE_BUILD_NUM}-SNAPSHOT",
            "CIRCLE_BUILD_NUM": "97",
            "CIRCLE_ARTIFACTS": "/tmp/artifacts",
        }
    )


@pytest.fixture
def keystore_dir(tmp_path: Path) -> Path:
    """Directory the decoded keystore is written to."""
    directory = tmp_path / "keystores"
    directory.mkdir()
    return directory
