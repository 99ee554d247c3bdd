"""
Pytest fixtures for the Ligmir test suite.

Provides URL patterns, decoded messages and in-memory stand-ins for the browser
extractor and the preference store, so no browser, Redis or network is needed.
"""

import random

import pytest

from ligmir.app.config import BotSettings
from ligmir.infrastructure.data_models import (
    CharacterReference,
    InboundMessage,
    RequestSource,
)
from ligmir.services.character_service import build_url_patterns
from ligmir.services.skill_check_service import RequestOrchestrator
from tests.helpers import FakeExtractor, FakeStore


# =============================================================================
# MESSAGE FIXTURES
# =============================================================================


@pytest.fixture
def patterns():
    return build_url_patterns()


@pytest.fixture
def telegram_source():
    return RequestSource(transport="telegram", chat_id="100", message_id="7", user_id="42")


@pytest.fixture
def make_message(telegram_source):
    """Build an InboundMessage in a group chat unless is_private is given."""

    def _make(text, is_private=False, source=None):
        return InboundMessage(source=source or telegram_source, text=text, is_private=is_private)

    return _make


# =============================================================================
# ORCHESTRATION FIXTURES
# =============================================================================


@pytest.fixture
def default_reference():
    return CharacterReference(27570282)


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def orchestrator(extractor, store, default_reference):
    return RequestOrchestrator(
        extractor=extractor,
        store=store,
        default_reference=default_reference,
        timeout=5.0,
        rng=random.Random(7),
    )


@pytest.fixture
def settings():
    return BotSettings(
        browser_url="http://browser:9222",
        browser_timeout=5.0,
        redis_url="redis://localhost:6379/0",
    )
