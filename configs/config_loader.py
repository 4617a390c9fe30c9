from __future__ import annotations
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Final, Mapping, Optional, Sequence

import yaml

from bootstrap.config.bootstrap_settings import BootstrapSettings
from bootstrap.exceptions import ConfigurationError
from configs.config_tree import ConfigLayer, ConfigurationTree, LayerKind
from configs.config_utils import ConfigFlattener, normalize_environment_key
from configs.expander import expand_environment_variables
from infrastructure.secrets.key_vault import KeyVaultSecretSource
from infrastructure.secrets.secret_store_client import SecretStoreClient

__all__: Sequence[str] = ('ConfigLoader', 'TreeSettingsSource', 'BASE_SETTINGS_FILE')
logger = logging.getLogger(__name__)

BASE_SETTINGS_FILE: Final[str] = 'appsettings.json'

SecretStoreFactory = Callable[[str], SecretStoreClient]
KeyVaultFactory = Callable[[str], KeyVaultSecretSource]


def _load_settings_file(path: Path) -> Optional[Dict[str, Any]]:
    """Parse a settings file by suffix; ``None`` when the file does not exist."""
    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError:
        logger.debug('Settings file not found: %s', path)
        return None

    try:
        if path.suffix.lower() in {'.yaml', '.yml'}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text) if text.strip() else {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f'Settings file is malformed: {exc}', source=str(path)) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f'Settings file must contain a top-level object, got {type(data).__name__}', source=str(path)
        )
    return data


def _environment_file_name(base_name: str, environment_name: str) -> str:
    stem, dot, suffix = base_name.rpartition('.')
    if not dot:
        return f'{base_name}.{environment_name}'
    return f'{stem}.{environment_name}.{suffix}'


class TreeSettingsSource:
    """Adapts a bare tree to the settings port used by the expander."""

    def __init__(self, tree: ConfigurationTree) -> None:
        self._tree = tree

    @property
    def configuration(self) -> ConfigurationTree:
        return self._tree

    def get_setting(self, key: str) -> Optional[str]:
        return self._tree.get(key)


class ConfigLoader:

    def __init__(
        self,
        base_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        base_file_name: str = BASE_SETTINGS_FILE,
        secret_store_factory: Optional[SecretStoreFactory] = None,
        key_vault_factory: Optional[KeyVaultFactory] = None,
        secret_fetch_timeout: Optional[float] = None,
    ) -> None:
        self._base_path: Path = Path(base_path) if base_path is not None else Path.cwd()
        self._environ = environ
        self._base_file_name = base_file_name
        self._secret_store_factory: SecretStoreFactory = secret_store_factory or SecretStoreClient
        self._key_vault_factory: KeyVaultFactory = key_vault_factory or KeyVaultSecretSource
        self._secret_fetch_timeout = secret_fetch_timeout

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    async def load_configuration(self, environment_name: Optional[str] = None, is_local: Optional[bool] = None) -> ConfigurationTree:
        settings = BootstrapSettings.from_environ(self.environ)
        if not environment_name:
            environment_name = settings.environment_name
        if is_local is None:
            is_local = settings.is_local
        else:
            settings = settings.model_copy(update={'is_local': is_local})

        logger.info("Loading configuration for environment='%s' local=%s", environment_name, is_local)
        tree = ConfigurationTree()

        self._add_file_layers(tree, environment_name)
        if is_local:
            logger.info('Local mode: secret store and key vault skipped')
        else:
            await self._add_secret_layer(tree, settings)
        tree.add_layer(self._environment_layer())

        expand_environment_variables(tree, TreeSettingsSource(tree), self.environ)
        logger.info('✓ Configuration assembled with %d layers', len(tree))
        return tree

    def _add_file_layers(self, tree: ConfigurationTree, environment_name: str) -> None:
        candidates = [('base', self._base_path / self._base_file_name)]
        if environment_name and environment_name.strip():
            candidates.append(
                (f'environment ({environment_name})', self._base_path / _environment_file_name(self._base_file_name, environment_name))
            )

        for label, path in candidates:
            data = _load_settings_file(path)
            if data is None:
                continue
            flat = ConfigFlattener.flatten(data, context_description=label)
            tree.add_layer(ConfigLayer(name=label, kind=LayerKind.FILE, data=flat, source=str(path)))
            logger.info('Loaded %s settings: %s', label, path)

    async def _add_secret_layer(self, tree: ConfigurationTree, settings: BootstrapSettings) -> None:
        if settings.use_key_vault:
            source = self._key_vault_factory(settings.key_vault_name)
            secrets = await self._await_fetch(source.load())
            tree.add_layer(ConfigLayer(name='key_vault', kind=LayerKind.KEY_VAULT, data=dict(secrets), source=settings.key_vault_url))
        elif settings.use_secret_store:
            client = self._secret_store_factory(settings.sidecar_base_url)
            secrets = await self._await_fetch(client.fetch_bulk_secrets(settings.secret_store))
            tree.add_layer(ConfigLayer(name='secret_store', kind=LayerKind.SECRETS, data=dict(secrets), source=settings.secret_store))
        else:
            logger.warning('No secret store or key vault configured – continuing without secrets')

    async def _await_fetch(self, fetch: Awaitable[Dict[str, str]]) -> Dict[str, str]:
        if self._secret_fetch_timeout is None:
            return await fetch
        return await asyncio.wait_for(fetch, timeout=self._secret_fetch_timeout)

    def _environment_layer(self) -> ConfigLayer:
        layer = ConfigLayer(name='environment', kind=LayerKind.ENVIRONMENT)
        for name, value in self.environ.items():
            layer.set(normalize_environment_key(name), value)
        return layer
