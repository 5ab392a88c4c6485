"""
Tests for settings, backend selection and the storage factory.
"""

import pytest
from pydantic import ValidationError

from orderpad.core.config import EnvironmentMode, Settings, StorageBackend
from orderpad.storage import DatabaseStorage, MemoryStorage, create_storage


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestStorageBackend:

    def test_development_defaults_to_memory(self):
        settings = make_settings(env_mode="development")
        assert settings.active_storage_backend == StorageBackend.MEMORY

    @pytest.mark.parametrize("mode", ["staging", "production"])
    def test_other_modes_default_to_database(self, mode):
        settings = make_settings(env_mode=mode)
        assert settings.active_storage_backend == StorageBackend.DATABASE

    def test_explicit_backend_wins(self):
        settings = make_settings(env_mode="production", storage_backend="MEMORY")
        assert settings.active_storage_backend == StorageBackend.MEMORY

    def test_blank_backend_means_derived(self):
        settings = make_settings(env_mode="staging", storage_backend=" ")
        assert settings.storage_backend is None
        assert settings.active_storage_backend == StorageBackend.DATABASE

    def test_invalid_values_are_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(storage_backend="redis")
        with pytest.raises(ValidationError):
            make_settings(env_mode="qa")

    def test_env_mode_is_case_insensitive(self):
        assert make_settings(env_mode="PRODUCTION").env_mode == EnvironmentMode.PRODUCTION


class TestProductionConfig:

    def test_clean_production_config(self):
        settings = make_settings(env_mode="production")
        assert settings.validate_production_config() == []

    def test_memory_and_sqlite_are_flagged(self):
        settings = make_settings(
            env_mode="production",
            storage_backend="memory",
            database_url="sqlite+aiosqlite:///orders.db",
        )

        problems = settings.validate_production_config()
        assert len(problems) == 2
        assert any("STORAGE_BACKEND" in problem for problem in problems)

    def test_only_checked_in_production(self):
        settings = make_settings(env_mode="development", storage_backend="memory")
        assert settings.validate_production_config() == []


class TestCreateStorage:

    def test_memory_store(self):
        storage = create_storage(make_settings(storage_backend="memory", order_number_prefix="TB"))

        assert isinstance(storage, MemoryStorage)
        assert storage.order_number_prefix == "TB"

    def test_database_store(self):
        settings = make_settings(
            storage_backend="database",
            database_url="sqlite+aiosqlite:///:memory:",
            database_create_tables=False,
        )

        storage = create_storage(settings)

        assert isinstance(storage, DatabaseStorage)
        assert storage.provider_name == "database"
        assert storage.create_tables is False

    def test_each_call_builds_a_new_store(self, settings):
        assert create_storage(settings) is not create_storage(settings)
