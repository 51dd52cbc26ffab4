"""Shared test fixtures for all test groups."""

import pytest
import structlog

from council_recovery.core.config import get_settings
from council_recovery.domain.sections import KnownFieldSet
from council_recovery.parsing.orchestrator import RecoveryParser


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are lru_cached; clear around every test so env overrides apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def known_fields():
    """The full chairman section set."""
    return KnownFieldSet.default()


@pytest.fixture
def spec_fields():
    """Small field set used by the scenario tests."""
    return KnownFieldSet.of("executive_summary", "architecture", "key_risks")


@pytest.fixture
def parser(spec_fields):
    return RecoveryParser(spec_fields)


@pytest.fixture
def captured_logs():
    with structlog.testing.capture_logs() as logs:
        yield logs
