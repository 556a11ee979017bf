"""Tests for environment-based configuration."""

import pytest

from revision_commit import config as config_module
from revision_commit.config import ConfigError, load_config


ALL_VARS = {
    "REVCOMMIT_REVIEW_URL": "https://review.example.com/",
    "REVCOMMIT_API_TOKEN": "secret",
    "REVCOMMIT_OWNER_ID": "user-1",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate from the developer's environment and any .env file."""
    for name in (*ALL_VARS, "REVCOMMIT_SVN", "REVCOMMIT_LOCALE", "REVCOMMIT_TIMEOUT_S"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)


def test_load_config(monkeypatch):
    for name, value in ALL_VARS.items():
        monkeypatch.setenv(name, value)

    config = load_config()

    assert config.review_url == "https://review.example.com"
    assert config.owner_id == "user-1"
    assert config.svn_binary == "svn"
    assert config.commit_locale == "en_US.UTF-8"
    assert config.timeout == 30.0


def test_overrides(monkeypatch):
    for name, value in ALL_VARS.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("REVCOMMIT_SVN", "/opt/svn/bin/svn")
    monkeypatch.setenv("REVCOMMIT_LOCALE", "C.UTF-8")
    monkeypatch.setenv("REVCOMMIT_TIMEOUT_S", "5")

    config = load_config()

    assert config.svn_binary == "/opt/svn/bin/svn"
    assert config.commit_locale == "C.UTF-8"
    assert config.timeout == 5.0


def test_missing_vars_listed(monkeypatch):
    monkeypatch.setenv("REVCOMMIT_REVIEW_URL", "https://review.example.com")

    with pytest.raises(ConfigError) as exc_info:
        load_config()

    assert "REVCOMMIT_API_TOKEN" in str(exc_info.value)
    assert "REVCOMMIT_OWNER_ID" in str(exc_info.value)
    assert "REVCOMMIT_REVIEW_URL" not in str(exc_info.value)


def test_missing_vars_optional():
    assert load_config(require_all=False) is None


def test_bad_timeout(monkeypatch):
    for name, value in ALL_VARS.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("REVCOMMIT_TIMEOUT_S", "soon")

    with pytest.raises(ConfigError, match="REVCOMMIT_TIMEOUT_S"):
        load_config()
