import logging
from typing import Any, Dict, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

KEY_DELIMITER = ":"
ENV_KEY_DELIMITER = "__"


def combine_key(*segments: str) -> str:
    return KEY_DELIMITER.join(s for s in segments if s)


def _scalar_to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ConfigFlattener:
    @staticmethod
    def flatten(
        data: Mapping[str, Any],
        context_description: str = "ConfigFlatten",
        prefix: str = "",
    ) -> Dict[str, Optional[str]]:
        """
        Flattens a nested settings document into section keys.
        - Nested mappings become "Parent:Child".
        - List items become "Parent:0", "Parent:1", ...
        - Scalars are stored as strings; booleans as "true"/"false".
        - Empty containers still produce the section key with a None value.
        """
        flat: Dict[str, Optional[str]] = {}
        ConfigFlattener._visit(data, prefix, flat)
        logger.debug(f"[{context_description}] Flattened into {len(flat)} keys.")
        return flat

    @staticmethod
    def _visit(node: Any, path: str, out: Dict[str, Optional[str]]) -> None:
        if isinstance(node, Mapping):
            if not node and path:
                out[path] = None
            for key, value in node.items():
                ConfigFlattener._visit(value, combine_key(path, str(key)), out)
        elif isinstance(node, (list, tuple)):
            if not node and path:
                out[path] = None
            for index, value in enumerate(node):
                ConfigFlattener._visit(value, combine_key(path, str(index)), out)
        else:
            out[path] = _scalar_to_str(node)


def normalize_environment_key(name: str) -> str:
    """Environment variable names use "__" where settings files nest sections."""
    return name.replace(ENV_KEY_DELIMITER, KEY_DELIMITER)


def merge_layers(layers: Iterable[Mapping[str, Optional[str]]], context: str = "LayerChain") -> Dict[str, Optional[str]]:
    """
    Merges flat layers in order; later layers win on the keys they contain.
    Keys are compared case-insensitively and the spelling of the last
    writer is kept.
    """
    merged: Dict[str, Optional[str]] = {}
    spelling: Dict[str, str] = {}
    for i, layer in enumerate(layers):
        for key, value in layer.items():
            folded = key.casefold()
            previous = spelling.get(folded)
            if previous is not None and previous != key:
                del merged[previous]
            spelling[folded] = key
            merged[key] = value
        logger.debug(f"[{context}_Step{i + 1}] Merged layer with {len(layer)} keys, total {len(merged)}.")
    return merged
