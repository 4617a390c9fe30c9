from .secret_store_client import SecretStoreClient
from .key_vault import KeyVaultSecretSource, key_vault_url

__all__ = ['SecretStoreClient', 'KeyVaultSecretSource', 'key_vault_url']
