from __future__ import annotations
import asyncio
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from configs.config_loader import ConfigLoader
from configs.config_tree import ConfigurationTree
from configs.connection_strings import get_connection_string, get_database_name
from configs.resolver import DEFAULT_SETTING_NAME, ConfigValueResolver, ResolutionCache

__all__: Sequence[str] = ('ConfigurationService', 'assemble_configuration', 'assemble_configuration_sync')
logger = logging.getLogger(__name__)


class ConfigurationService:
    """
    Assembled configuration plus the lookup cache shared by request handlers.

    Build one per process with ``assemble_configuration`` and hand the same
    instance to every consumer; the cache it owns is never invalidated.
    """

    def __init__(
        self,
        tree: ConfigurationTree,
        environ: Optional[Mapping[str, str]] = None,
        cache: Optional[ResolutionCache] = None,
        include_plural_sections: bool = False,
    ) -> None:
        self._tree = tree
        self._cache = cache if cache is not None else ResolutionCache()
        self._resolver = ConfigValueResolver(
            tree, cache=self._cache, environ=environ, include_plural_sections=include_plural_sections
        )

    @property
    def configuration(self) -> ConfigurationTree:
        return self._tree

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def get_setting(self, key: str) -> Optional[str]:
        return self._tree.get(key)

    def get_config_value(self, key: str, default_value: str = '', setting_name: str = DEFAULT_SETTING_NAME) -> str:
        return self._resolver.get_config_value(key, default_value, setting_name)

    def get_connection_string(self, name: str) -> Optional[str]:
        return get_connection_string(self._resolver, name)

    def get_database_name(self, name: str) -> Optional[str]:
        return get_database_name(self.get_connection_string(name))


async def assemble_configuration(
    base_path: Optional[Path] = None,
    environment_name: Optional[str] = None,
    is_local: Optional[bool] = None,
    environ: Optional[Mapping[str, str]] = None,
    include_plural_sections: bool = False,
    **loader_kwargs: Any,
) -> ConfigurationService:
    """Load every configuration layer once and wrap it for lookups."""
    loader = ConfigLoader(base_path=base_path, environ=environ, **loader_kwargs)
    try:
        tree = await loader.load_configuration(environment_name=environment_name, is_local=is_local)
    except Exception as e:
        logger.error('Configuration assembly failed: %s', e)
        raise
    return ConfigurationService(tree, environ=environ, include_plural_sections=include_plural_sections)


def assemble_configuration_sync(**kwargs: Any) -> ConfigurationService:
    return asyncio.run(assemble_configuration(**kwargs))
