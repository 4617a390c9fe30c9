from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from configs.config_utils import merge_layers

__all__: Sequence[str] = ('LayerKind', 'ConfigLayer', 'ConfigurationTree')
logger = logging.getLogger(__name__)


class LayerKind(str, Enum):
    FILE = 'file'
    SECRETS = 'secrets'
    KEY_VAULT = 'key_vault'
    MEMORY = 'memory'
    ENVIRONMENT = 'environment'


@dataclass
class ConfigLayer:
    name: str
    kind: LayerKind
    data: Dict[str, Optional[str]] = field(default_factory=dict)
    source: Optional[str] = None

    def __post_init__(self) -> None:
        self._index: Dict[str, str] = {k.casefold(): k for k in self.data}

    @property
    def is_file_backed(self) -> bool:
        return self.kind is LayerKind.FILE

    def find(self, key: str) -> Tuple[bool, Optional[str]]:
        actual = self._index.get(key.casefold())
        if actual is None:
            return False, None
        return True, self.data[actual]

    def set(self, key: str, value: Optional[str]) -> None:
        folded = key.casefold()
        actual = self._index.get(folded)
        if actual is not None and actual != key:
            del self.data[actual]
        self._index[folded] = key
        self.data[key] = value

    def items(self) -> List[Tuple[str, Optional[str]]]:
        return list(self.data.items())

    def __len__(self) -> int:
        return len(self.data)


class ConfigurationTree:
    """
    Ordered stack of configuration layers.

    Reads walk the layers from last to first and return the first layer that
    contains the key, so layers added later take precedence. Keys compare
    case-insensitively.
    """

    def __init__(self, layers: Optional[List[ConfigLayer]] = None) -> None:
        self._layers: List[ConfigLayer] = list(layers or [])

    @property
    def layers(self) -> List[ConfigLayer]:
        return list(self._layers)

    @property
    def file_layers(self) -> List[ConfigLayer]:
        return [layer for layer in self._layers if layer.is_file_backed]

    def add_layer(self, layer: ConfigLayer) -> 'ConfigurationTree':
        self._layers.append(layer)
        logger.debug("Added %s layer '%s' with %d keys", layer.kind.value, layer.name, len(layer))
        return self

    def get(self, key: str) -> Optional[str]:
        for layer in reversed(self._layers):
            found, value = layer.find(key)
            if found:
                return value
        return None

    def __getitem__(self, key: str) -> Optional[str]:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return any(layer.find(key)[0] for layer in self._layers)

    def __iter__(self) -> Iterator[ConfigLayer]:
        return iter(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def as_dict(self) -> Dict[str, Optional[str]]:
        return merge_layers((layer.data for layer in self._layers), context='ConfigurationTree')

    def get_section(self, section: str) -> Dict[str, Optional[str]]:
        """Return the merged entries below *section* with the prefix stripped."""
        prefix = f'{section}:'.casefold()
        return {
            key[len(prefix):]: value
            for key, value in self.as_dict().items()
            if key.casefold().startswith(prefix)
        }
