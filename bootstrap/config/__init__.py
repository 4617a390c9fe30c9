# bootstrap/config/__init__.py
"""
Bootstrap Configuration Module

Process settings read at startup and the service that owns the assembled
configuration. Import the submodules directly:

    from bootstrap.config.config_service import assemble_configuration
"""
