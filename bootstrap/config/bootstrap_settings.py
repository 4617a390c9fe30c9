from __future__ import annotations
import os
from typing import Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from infrastructure.secrets.key_vault import key_vault_url
from infrastructure.secrets.secret_store_client import DEFAULT_SIDECAR_HOST, DEFAULT_SIDECAR_PORT

__all__: Sequence[str] = ('BootstrapSettings',)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


class BootstrapSettings(BaseModel):
    """Process environment consumed while assembling the configuration."""

    model_config = ConfigDict(frozen=True)

    environment_name: str = Field('', description='ASPNETCORE_ENVIRONMENT; selects appsettings.{env}.json.')
    is_local: bool = Field(False, description='IsLocal == "true" disables secret store and key vault.')
    secret_store: Optional[str] = Field(None, description='DAPR_SECRET_STORE; id of the sidecar secret store.')
    key_vault_name: Optional[str] = Field(None, description='KV_NAME; used only when no secret store id is set.')
    sidecar_host: str = Field(DEFAULT_SIDECAR_HOST, description='AppSettings__BaseUrl; scheme and host of the sidecar.')
    sidecar_port: str = Field(DEFAULT_SIDECAR_PORT, description='DAPR_HTTP_PORT; port of the sidecar.')

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> 'BootstrapSettings':
        env = os.environ if environ is None else environ
        return cls(
            environment_name=env.get('ASPNETCORE_ENVIRONMENT') or '',
            is_local=env.get('IsLocal') == 'true',
            secret_store=_blank_to_none(env.get('DAPR_SECRET_STORE')),
            key_vault_name=_blank_to_none(env.get('KV_NAME')),
            sidecar_host=env.get('AppSettings__BaseUrl') or DEFAULT_SIDECAR_HOST,
            sidecar_port=env.get('DAPR_HTTP_PORT') or DEFAULT_SIDECAR_PORT,
        )

    @property
    def sidecar_base_url(self) -> str:
        return f'{self.sidecar_host}:{self.sidecar_port}'

    @property
    def use_key_vault(self) -> bool:
        return not self.is_local and self.secret_store is None and self.key_vault_name is not None

    @property
    def use_secret_store(self) -> bool:
        return not self.is_local and self.secret_store is not None

    @property
    def key_vault_url(self) -> Optional[str]:
        return key_vault_url(self.key_vault_name) if self.key_vault_name else None
