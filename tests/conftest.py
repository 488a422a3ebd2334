"""
Global pytest fixtures and configuration for test suite.
"""

import os

import pytest

from text_annotator.annotation.ner.preferences import NerProviderMode, NerProviderPreferences
from text_annotator.annotation.regex_source import RegexEntitySource
from text_annotator.config import Settings


@pytest.fixture
def mock_settings() -> Settings:
    """Settings with safe defaults and no external endpoints."""
    return Settings(
        log_level="INFO",
        log_json=False,
        annotation_cache_size=128,
        ner_provider_mode="auto",
        ner_preferences_path="",
        cloud_ner_base_url="",
    )


@pytest.fixture
def regex_source() -> RegexEntitySource:
    return RegexEntitySource()


@pytest.fixture
def preferences() -> NerProviderPreferences:
    return NerProviderPreferences(NerProviderMode.AUTO)


@pytest.fixture(autouse=True)
def reset_env_vars():
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (API, end-to-end)")
