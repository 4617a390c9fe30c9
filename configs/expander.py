from __future__ import annotations
import logging
import os
import re
from typing import TYPE_CHECKING, Final, List, Mapping, Optional, Sequence

from configs.config_tree import ConfigurationTree

if TYPE_CHECKING:
    from domain.ports.settings_port import SettingsSourcePort

__all__: Sequence[str] = (
    'PLACEHOLDER_DELIMITER',
    'ALLOW_LIST_SETTING',
    'expand_placeholders',
    'parse_allow_list',
    'expand_environment_variables',
)
logger = logging.getLogger(__name__)

PLACEHOLDER_DELIMITER: Final[str] = '%'
ALLOW_LIST_SETTING: Final[str] = 'ENV_VARIABLES'

_RE_PLACEHOLDER: Final[re.Pattern[str]] = re.compile('%([^%]*)%')


def expand_placeholders(value: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Replace ``%NAME%`` tokens with environment values.

    Unknown names are left exactly as written, including both delimiters, and
    the closing ``%`` of an unknown token may open the next one.
    """
    if not isinstance(value, str) or PLACEHOLDER_DELIMITER not in value:
        return value
    env = os.environ if environ is None else environ

    def _repl(match: re.Match[str]) -> Optional[str]:
        name = match.group(1)
        return env.get(name) if name else None

    out: List[str] = []
    pos = 0
    while (match := _RE_PLACEHOLDER.search(value, pos)) is not None:
        out.append(value[pos:match.start()])
        replacement = _repl(match)
        if replacement is None:
            # Keep the closing '%' available as the next opener.
            out.append(match.group(0)[:-1])
            pos = match.end() - 1
        else:
            out.append(replacement)
            pos = match.end()
    out.append(value[pos:])

    expanded = ''.join(out)
    if expanded != value:
        logger.debug("Placeholder expansion changed a value (%d -> %d chars)", len(value), len(expanded))
    return expanded


def parse_allow_list(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    names = [name.strip() for name in raw.split(',')]
    # An empty entry is a substring of every value, so it restricts nothing.
    if any(not name for name in names):
        return None
    return names


def expand_environment_variables(
    tree: Optional[ConfigurationTree],
    settings_source: Optional['SettingsSourcePort'],
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[ConfigurationTree]:
    if tree is None or settings_source is None:
        logger.debug('Placeholder expansion skipped: no tree or settings source')
        return None

    allow_list = parse_allow_list(settings_source.get_setting(ALLOW_LIST_SETTING))
    if allow_list is not None:
        logger.info('Placeholder expansion restricted to %d allow-listed names', len(allow_list))

    expanded_count = 0
    for layer in tree.file_layers:
        for key, value in layer.items():
            if value is None or PLACEHOLDER_DELIMITER not in value:
                continue
            if allow_list is not None and not any(name in value for name in allow_list):
                continue
            new_value = expand_placeholders(value, environ)
            if new_value != value:
                layer.set(key, new_value)
                expanded_count += 1

    logger.info('Expanded placeholders in %d file-backed settings', expanded_count)
    return tree
