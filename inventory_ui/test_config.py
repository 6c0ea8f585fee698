# inventory_ui/test_config.py
# Unit tests for environment-aware API URL resolution

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from inventory_ui import config


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("BACKEND_URL", raising=False)
    monkeypatch.delenv("API_BASE_URL", raising=False)
    return monkeypatch


def test_backend_url_wins(clean_env):
    clean_env.setattr(config, "ENV", "production")
    clean_env.setenv("BACKEND_URL", "https://inventory.example.com/")
    clean_env.setenv("API_BASE_URL", "https://other.example.com")

    assert config.get_api_base_url() == "https://inventory.example.com"


def test_api_base_url_fallback(clean_env):
    clean_env.setattr(config, "ENV", "staging")
    clean_env.setenv("API_BASE_URL", "https://staging.example.com")

    assert config.get_api_base_url() == "https://staging.example.com"


def test_local_default(clean_env):
    clean_env.setattr(config, "ENV", "local")

    assert config.get_api_base_url() == "http://127.0.0.1:8000"


def test_production_requires_configured_url(clean_env):
    clean_env.setattr(config, "ENV", "production")

    with pytest.raises(RuntimeError):
        config.get_api_base_url()


@pytest.mark.parametrize(
    "url",
    ["http://inventory.example.com", "https://localhost:8000", "https://127.0.0.1"],
)
def test_production_rejects_insecure_urls(url):
    with pytest.raises(ValueError):
        config.validate_api_url(url, "production")


def test_local_accepts_http():
    config.validate_api_url("http://127.0.0.1:8000", "local")


def test_empty_url_rejected():
    with pytest.raises(ValueError):
        config.validate_api_url("", "local")


def test_int_setting_reads_environment(monkeypatch):
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", " 25 ")

    assert config._int_setting("DEFAULT_PAGE_SIZE", 10) == 25


@pytest.mark.parametrize("raw", ["", "ten", "0", "-3"])
def test_int_setting_falls_back_on_unusable_values(monkeypatch, raw):
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", raw)

    assert config._int_setting("DEFAULT_PAGE_SIZE", 10) == 10


def test_int_setting_respects_minimum(monkeypatch):
    monkeypatch.setenv("PENDING_APPROVALS_POLL_SECONDS", "2")

    assert config._int_setting("PENDING_APPROVALS_POLL_SECONDS", 120, minimum=5) == 120
