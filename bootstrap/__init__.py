# bootstrap/__init__.py
"""
Configuration bootstrap for the web service.

The assembly API lives in ``bootstrap.config.config_service``; this package
root only re-exports the exception hierarchy so that low-level modules can
raise bootstrap errors without importing the loader.
"""
from __future__ import annotations

from .exceptions import BootstrapError, ConfigurationError, SecretStoreError

__version__ = '1.0.0'

__all__ = ['BootstrapError', 'ConfigurationError', 'SecretStoreError', '__version__']
