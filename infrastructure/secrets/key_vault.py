from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from azure.identity.aio import DefaultAzureCredential
from azure.keyvault.secrets.aio import SecretClient

from configs.config_utils import KEY_DELIMITER

logger = logging.getLogger(__name__)

# Key Vault names cannot contain ":", so "--" stands in for the section separator.
VAULT_KEY_DELIMITER = "--"


def key_vault_url(vault_name: str) -> str:
    return f"https://{vault_name}.vault.azure.net/"


def secret_name_to_key(name: str) -> str:
    return name.replace(VAULT_KEY_DELIMITER, KEY_DELIMITER)


class KeyVaultSecretSource:
    """Reads every enabled secret of one vault into a flat settings layer."""

    def __init__(
        self,
        vault_name: str,
        credential: Optional[Any] = None,
        client_factory: Optional[Callable[[str, Any], SecretClient]] = None,
    ) -> None:
        self.vault_name = vault_name
        self.vault_url = key_vault_url(vault_name)
        self._credential = credential
        self._client_factory = client_factory or (lambda url, cred: SecretClient(vault_url=url, credential=cred))

    async def load(self) -> Dict[str, str]:
        logger.info("Loading secrets from key vault '%s'", self.vault_name)
        owns_credential = self._credential is None
        credential = self._credential or DefaultAzureCredential()
        try:
            async with self._client_factory(self.vault_url, credential) as client:
                return await self._read_all(client)
        finally:
            if owns_credential:
                await credential.close()

    async def _read_all(self, client: SecretClient) -> Dict[str, str]:
        secrets: Dict[str, str] = {}
        async for props in client.list_properties_of_secrets():
            if not props.enabled:
                continue
            secret = await client.get_secret(props.name)
            if secret.value is None:
                continue
            key = secret_name_to_key(props.name)
            secrets.setdefault(key, secret.value)
        logger.info("Loaded %d secrets from key vault '%s'", len(secrets), self.vault_name)
        return secrets
