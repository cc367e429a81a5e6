import logging

import pytest

from chocolate import Environment, MemoryStorage, NotAuthorized, SqliteStorage, config


def test_default_storage_is_memory(monkeypatch):
    monkeypatch.setattr(config, "STORAGE_BACKEND", "memory")
    assert isinstance(config.get_storage(), MemoryStorage)


def test_sqlite_storage(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "STORAGE_BACKEND", "sqlite")
    monkeypatch.setattr(config, "DB_PATH", str(tmp_path / "db" / "chocolate.db"))
    storage = config.get_storage()
    assert isinstance(storage, SqliteStorage)
    storage.close()


def test_unknown_storage(monkeypatch):
    monkeypatch.setattr(config, "STORAGE_BACKEND", "redis")
    with pytest.raises(ValueError):
        config.get_storage()
    assert config.validate_config()["storage_backend"] is False


def test_admin_parsing(monkeypatch, accounts):
    monkeypatch.setattr(config, "ADMIN_ACCOUNT", "")
    assert config.get_admin() is None
    monkeypatch.setattr(config, "ADMIN_ACCOUNT", "0x" + accounts.alice.hex())
    assert config.get_admin() == accounts.alice
    monkeypatch.setattr(config, "ADMIN_ACCOUNT", "nothex")
    assert config.validate_config()["admin_account"] is False


def test_feature_flags(monkeypatch):
    monkeypatch.setattr(config, "ENV", "prod")
    assert config.is_production()
    monkeypatch.setenv("CHOCOLATE_DEBUG", "yes")
    assert config.is_debug()
    monkeypatch.delenv("CHOCOLATE_DEBUG")
    assert not config.is_debug()


def test_build_registry_uses_configured_storage_and_admin(monkeypatch, tmp_path, accounts):
    monkeypatch.setattr(config, "STORAGE_BACKEND", "sqlite")
    monkeypatch.setattr(config, "DB_PATH", str(tmp_path / "chocolate.db"))
    monkeypatch.setattr(config, "ADMIN_ACCOUNT", accounts.alice.hex())

    registry = config.build_registry(Environment(accounts.bob))
    assert isinstance(registry.storage, SqliteStorage)
    assert registry.admin == accounts.alice
    with pytest.raises(NotAuthorized):
        registry.add_authorizer(accounts.bob)
    registry.storage.close()


def test_build_registry_flags_open_production_setup(monkeypatch, caplog):
    monkeypatch.setattr(config, "ENV", "prod")
    monkeypatch.setattr(config, "STORAGE_BACKEND", "memory")
    monkeypatch.setattr(config, "ADMIN_ACCOUNT", "")
    caplog.set_level(logging.INFO, logger="chocolate.audit")

    registry = config.build_registry()
    assert registry.admin is None
    events = [r.extra_fields["security_event"] for r in caplog.records if hasattr(r, "extra_fields")]
    assert events == ["authorizer_appointment_open", "non_persistent_storage"]


def test_build_registry_quiet_in_dev(monkeypatch, caplog):
    monkeypatch.setattr(config, "ENV", "dev")
    monkeypatch.setattr(config, "STORAGE_BACKEND", "memory")
    caplog.set_level(logging.INFO, logger="chocolate.audit")
    config.build_registry()
    assert not [r for r in caplog.records if hasattr(r, "extra_fields")]
