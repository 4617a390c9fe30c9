from __future__ import annotations
import logging
import os
import threading
from typing import Callable, Dict, Final, List, Mapping, Optional, Sequence, Tuple

from configs.config_tree import ConfigurationTree
from configs.expander import expand_placeholders

__all__: Sequence[str] = ('DEFAULT_SETTING_NAME', 'ResolutionCache', 'ConfigValueResolver')
logger = logging.getLogger(__name__)

DEFAULT_SETTING_NAME: Final[str] = 'AppSettings'


class ResolutionCache:
    """Resolved values keyed by the spelling that matched.

    Entries are never invalidated; ``get_or_add`` keeps the first value
    written for a key.
    """

    def __init__(self) -> None:
        self._values: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def get_or_add(self, key: str, value: str) -> str:
        with self._lock:
            return self._values.setdefault(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._values)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ConfigValueResolver:
    """Answers setting lookups against an assembled tree.

    Spellings are tried in this order, first non-blank wins:

    * ``{setting}-{key}`` in the tree (``AppSettings`` becomes ``AppSetting``)
    * ``{setting}__{key}`` in the process environment
    * ``{setting}:{key}`` in the tree
    * ``{setting}s:{key}`` in the tree, only with ``include_plural_sections``
    * ``{key}`` in the tree, unless the caller asks for section spellings only
    """

    def __init__(
        self,
        tree: ConfigurationTree,
        cache: Optional[ResolutionCache] = None,
        environ: Optional[Mapping[str, str]] = None,
        include_plural_sections: bool = False,
    ) -> None:
        self._tree = tree
        self._cache = cache if cache is not None else ResolutionCache()
        self._environ = environ
        self._include_plural_sections = include_plural_sections

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    @property
    def _env(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def _spellings(self, key: str, setting_name: str, include_bare_key: bool = True) -> List[Tuple[str, Callable[[str], Optional[str]]]]:
        secret_prefix = setting_name
        if setting_name.casefold() == DEFAULT_SETTING_NAME.casefold():
            secret_prefix = setting_name[:-1]

        spellings: List[Tuple[str, Callable[[str], Optional[str]]]] = [
            (f'{secret_prefix}-{key}', self._tree.get),
            (f'{setting_name}__{key}', self._env.get),
            (f'{setting_name}:{key}', self._tree.get),
        ]
        if self._include_plural_sections:
            spellings.append((f'{setting_name}s:{key}', self._tree.get))
        if include_bare_key:
            spellings.append((key, self._tree.get))
        return spellings

    def get_config_value(
        self,
        key: str,
        default_value: str = '',
        setting_name: str = DEFAULT_SETTING_NAME,
        include_bare_key: bool = True,
    ) -> str:
        try:
            return self._resolve(key, default_value, setting_name, include_bare_key)
        except Exception as exc:
            logger.error("Lookup of '%s' failed, using default: %s", key, exc, exc_info=True)
            return default_value

    def _resolve(self, key: str, default_value: str, setting_name: str, include_bare_key: bool) -> str:
        spellings = self._spellings(key, setting_name or DEFAULT_SETTING_NAME, include_bare_key)

        for spelling, _ in spellings:
            cached = self._cache.get(spelling)
            if cached is not None:
                return cached

        for spelling, lookup in spellings:
            value = lookup(spelling)
            if _is_blank(value):
                continue
            resolved = expand_placeholders(value, self._env)
            logger.debug("Resolved '%s' via '%s'", key, spelling)
            return self._cache.get_or_add(spelling, resolved)

        logger.debug("No value for '%s' under setting '%s', using default", key, setting_name)
        return default_value
