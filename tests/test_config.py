"""Tests for config.Settings."""

import pytest

from app.config import Settings


class TestSettingsFromEnv:
    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("DRUPAL_BASE_URL", "https://cms.example.edu/")
        for name in (
            "CMS_FETCH_RETRIES",
            "CMS_FETCH_RETRY_DELAY",
            "CMS_PAGE_NODE_TYPES",
            "CMS_CONTENT_NODE_TYPES",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.cms_base_url == "https://cms.example.edu"
        assert settings.fetch_retries == 5
        assert settings.fetch_retry_delay == 2.5
        assert settings.page_node_types == ["building", "page"]

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("DRUPAL_BASE_URL", "http://localhost:8080")
        monkeypatch.setenv("CMS_FETCH_RETRIES", "1")
        monkeypatch.setenv("CMS_PAGE_NODE_TYPES", "building, event ,")

        settings = Settings.from_env()

        assert settings.fetch_retries == 1
        assert settings.page_node_types == ["building", "event"]

    def test_missing_base_url(self, monkeypatch):
        monkeypatch.delenv("DRUPAL_BASE_URL", raising=False)
        with pytest.raises(ValueError):
            Settings.from_env()

    def test_relative_base_url_rejected(self):
        with pytest.raises(ValueError):
            Settings(cms_base_url="cms.example.edu")
