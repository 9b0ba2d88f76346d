"""
Tests for settings and store wiring.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from storefront.config import Settings, build_store, load_settings
from storefront.persistence import LOCALE_KEY, MemoryBackend


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_defaults(self):
        settings = load_settings({})

        assert settings.api_url == "http://localhost:5000/api"
        assert settings.timeout == 8.0
        assert settings.notify_ttl == 5.0
        assert settings.oracle_url is None
        assert settings.data_dir == Path("~/.novamart").expanduser()

    def test_environment_overrides(self, tmp_path: Path):
        settings = load_settings({
            "NOVAMART_API_URL": "https://shop.example/api",
            "NOVAMART_DATA_DIR": str(tmp_path),
            "NOVAMART_TIMEOUT": "2.5",
            "NOVAMART_MOCK_LATENCY": "0.1",
            "NOVAMART_ORACLE_URL": "https://oracle.example",
            "NOVAMART_LOG_LEVEL": "DEBUG",
        })

        assert settings.api_url == "https://shop.example/api"
        assert settings.data_dir == tmp_path
        assert settings.timeout == 2.5
        assert settings.mock_latency == 0.1
        assert settings.oracle_url == "https://oracle.example"
        assert settings.log_level == "DEBUG"

    def test_empty_api_url_means_mock_only(self):
        assert load_settings({"NOVAMART_API_URL": ""}).api_url is None

    def test_invalid_timeout(self):
        with pytest.raises(ValidationError):
            load_settings({"NOVAMART_TIMEOUT": "0"})


class TestBuildStore:
    """Tests for build_store()."""

    async def test_wires_a_working_store(self):
        store = build_store(Settings(api_url=None, notify_ttl=1.0), backend=MemoryBackend())

        await store.initialize()

        assert len(store.products) == 50
        assert store.backend_mode == "mock"
        assert store.notification_queue.ttl == 1.0

    async def test_file_backend_under_data_dir(self, tmp_path: Path):
        store = build_store(Settings(api_url=None, data_dir=tmp_path))
        await store.initialize()

        store.set_locale("hi")

        assert (tmp_path / f"{LOCALE_KEY}.json").exists()
        assert (tmp_path / "novamart_db.json").exists()
