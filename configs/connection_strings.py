from __future__ import annotations
import logging
import re
from typing import Dict, Final, Optional, Sequence, Union
from urllib.parse import urlparse

from configs.config_tree import ConfigurationTree
from configs.resolver import ConfigValueResolver

__all__: Sequence[str] = ('CONNECTION_STRINGS_SECTION', 'get_connection_string', 'get_database_name')
logger = logging.getLogger(__name__)

CONNECTION_STRINGS_SECTION: Final[str] = 'ConnectionStrings'
_DATABASE_KEYS: Final[tuple] = ('database', 'initial catalog')
_RE_DATABASE: Final[re.Pattern[str]] = re.compile(r'(?:^|;)\s*(?:database|initial\s+catalog)\s*=\s*([^;]*)', re.IGNORECASE)


def get_connection_string(source: Union[ConfigValueResolver, ConfigurationTree], name: str) -> Optional[str]:
    if isinstance(source, ConfigValueResolver):
        value = source.get_config_value(
            name, default_value='', setting_name=CONNECTION_STRINGS_SECTION, include_bare_key=False
        )
        return value or None
    return source.get(f'{CONNECTION_STRINGS_SECTION}:{name}')


def _parse_pairs(connection_string: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    for part in connection_string.split(';'):
        if not part.strip():
            continue
        key, sep, value = part.partition('=')
        if not sep:
            raise ValueError(f"segment without '=': {part.strip()!r}")
        pairs[key.strip().casefold()] = value.strip()
    return pairs


def get_database_name(connection_string: Optional[str]) -> Optional[str]:
    """Database name from an ADO-style or URL-style connection string.

    Never raises; ``None`` when no database can be found.
    """
    if not connection_string or not connection_string.strip():
        return None

    try:
        if '://' in connection_string:
            path = urlparse(connection_string).path.lstrip('/')
            return path.split('/')[0] or None
        pairs = _parse_pairs(connection_string)
        for key in _DATABASE_KEYS:
            if pairs.get(key):
                return pairs[key]
        return None
    except ValueError as exc:
        logger.warning('Connection string parse failed, falling back to pattern match: %s', exc)

    match = _RE_DATABASE.search(connection_string)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None
