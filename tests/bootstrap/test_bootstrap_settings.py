# tests/bootstrap/test_bootstrap_settings.py

from bootstrap.config.bootstrap_settings import BootstrapSettings


def test_defaults_from_empty_environment():
    settings = BootstrapSettings.from_environ({})

    assert settings.environment_name == ""
    assert settings.is_local is False
    assert settings.sidecar_base_url == "http://localhost:3500"
    assert not settings.use_secret_store
    assert not settings.use_key_vault
    assert settings.key_vault_url is None


def test_is_local_requires_exact_true():
    assert BootstrapSettings.from_environ({"IsLocal": "true"}).is_local
    assert not BootstrapSettings.from_environ({"IsLocal": "True"}).is_local
    assert not BootstrapSettings.from_environ({"IsLocal": "1"}).is_local


def test_secret_store_takes_priority_over_key_vault():
    settings = BootstrapSettings.from_environ({"DAPR_SECRET_STORE": "store", "KV_NAME": "vault"})

    assert settings.use_secret_store
    assert not settings.use_key_vault


def test_blank_secret_store_enables_key_vault():
    settings = BootstrapSettings.from_environ({"DAPR_SECRET_STORE": "  ", "KV_NAME": "vault"})

    assert settings.secret_store is None
    assert settings.use_key_vault
    assert settings.key_vault_url == "https://vault.vault.azure.net/"


def test_local_mode_disables_both_secret_sources():
    settings = BootstrapSettings.from_environ({"IsLocal": "true", "DAPR_SECRET_STORE": "store", "KV_NAME": "vault"})

    assert not settings.use_secret_store
    assert not settings.use_key_vault


def test_sidecar_url_is_host_plus_port():
    settings = BootstrapSettings.from_environ({"AppSettings__BaseUrl": "http://dapr", "DAPR_HTTP_PORT": "3601"})

    assert settings.sidecar_base_url == "http://dapr:3601"
