# tests/infrastructure/test_key_vault.py

"""
python -m pytest tests/infrastructure/test_key_vault.py -v
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from infrastructure.secrets.key_vault import KeyVaultSecretSource, key_vault_url, secret_name_to_key


class FakeSecretClient:
    def __init__(self, secrets):
        self._secrets = secrets
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def list_properties_of_secrets(self):
        for name, (enabled, _) in self._secrets.items():
            yield SimpleNamespace(name=name, enabled=enabled)

    async def get_secret(self, name):
        return SimpleNamespace(name=name, value=self._secrets[name][1])


def test_vault_url_and_key_mapping():
    assert key_vault_url("myvault") == "https://myvault.vault.azure.net/"
    assert secret_name_to_key("ConnectionStrings--Main") == "ConnectionStrings:Main"


@pytest.mark.asyncio
async def test_load_reads_enabled_secrets():
    fake = FakeSecretClient({
        "AppSetting-ApiKey": (True, "k1"),
        "ConnectionStrings--Main": (True, "Server=db"),
        "Disabled": (False, "nope"),
        "Empty": (True, None),
    })
    seen = {}

    def factory(url, credential):
        seen["url"] = url
        seen["credential"] = credential
        return fake

    credential = MagicMock()
    source = KeyVaultSecretSource("myvault", credential=credential, client_factory=factory)

    secrets = await source.load()

    assert secrets == {"AppSetting-ApiKey": "k1", "ConnectionStrings:Main": "Server=db"}
    assert seen == {"url": "https://myvault.vault.azure.net/", "credential": credential}
    assert fake.closed
