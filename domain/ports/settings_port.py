"""Narrow contract the placeholder expander needs from its host."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from configs.config_tree import ConfigurationTree


@runtime_checkable
class SettingsSourcePort(Protocol):
    """Exposes the assembled tree and single-key reads.  Nothing else."""

    @property
    def configuration(self) -> "ConfigurationTree": ...

    def get_setting(self, key: str) -> Optional[str]: ...
