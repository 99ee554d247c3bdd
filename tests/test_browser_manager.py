"""
Tests for the skill extractor: blob parsing and the Playwright call sequence.

Playwright is replaced by MagicMock objects; no browser is started.
"""

from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ligmir.infrastructure.browser_manager import (
    EXTRACT_SKILLS_SCRIPT,
    SKILLS_CONTAINER_SELECTOR,
    SkillExtractor,
    parse_skill_blob,
)
from ligmir.infrastructure.errors import (
    BrowserConnectionError,
    ExtractionScriptError,
    SkillListTimeoutError,
    SkillParseError,
)

SHEET_URL = "https://www.dndbeyond.com/characters/123"


class TestParseSkillBlob:
    def test_parses_signed_modifiers(self):
        assert parse_skill_blob("Acrobatics,+2;Stealth,-1") == {"Acrobatics": 2, "Stealth": -1}

    def test_unsigned_and_zero_modifiers(self):
        assert parse_skill_blob("Arcana,0;History,5") == {"Arcana": 0, "History": 5}

    def test_row_with_one_field_fails_whole_blob(self):
        with pytest.raises(SkillParseError):
            parse_skill_blob("Acrobatics;Stealth,-1")

    def test_non_integer_modifier_fails(self):
        with pytest.raises(SkillParseError):
            parse_skill_blob("Acrobatics,+2;Stealth,minus one")

    def test_extra_fields_are_ignored(self):
        assert parse_skill_blob("Stealth,-1,DEX") == {"Stealth": -1}

    def test_names_are_kept_verbatim(self):
        assert parse_skill_blob("Sleight of Hand,+3") == {"Sleight of Hand": 3}

    def test_empty_blob_is_empty_sheet(self):
        assert parse_skill_blob("") == {}


@pytest.fixture
def playwright_mocks():
    """Wire a fake playwright -> browser -> page -> container chain."""
    playwright = MagicMock()
    browser = playwright.chromium.connect_over_cdp.return_value
    page = browser.new_page.return_value
    container = page.wait_for_selector.return_value
    container.evaluate.return_value = "Acrobatics,+2;Perception,+3"

    factory = MagicMock()
    factory.return_value.__enter__.return_value = playwright

    extractor = SkillExtractor("http://browser:9222", 5.0, playwright_factory=factory)
    return extractor, playwright, browser, page, container


class TestSkillExtractor:
    def test_extracts_sheet(self, playwright_mocks):
        extractor, playwright, browser, page, container = playwright_mocks

        sheet = extractor.extract(SHEET_URL)

        assert sheet.skills == {"Acrobatics": 2, "Perception": 3}
        assert playwright.chromium.connect_over_cdp.call_args.args[0] == "http://browser:9222"
        assert page.goto.call_args.args[0] == SHEET_URL
        assert page.wait_for_selector.call_args.args[0] == SKILLS_CONTAINER_SELECTOR
        container.evaluate.assert_called_once_with(EXTRACT_SKILLS_SCRIPT)
        page.close.assert_called_once()
        browser.close.assert_called_once()

    def test_timeouts_are_bounded_by_request_timeout(self, playwright_mocks):
        extractor, _, _, page, _ = playwright_mocks

        extractor.extract(SHEET_URL, timeout=2.0)

        wait_timeout = page.wait_for_selector.call_args.kwargs["timeout"]
        assert 0 < wait_timeout <= 2000

    def test_connection_failure(self, playwright_mocks):
        extractor, playwright, _, _, _ = playwright_mocks
        playwright.chromium.connect_over_cdp.side_effect = PlaywrightError("connect ECONNREFUSED")

        with pytest.raises(BrowserConnectionError):
            extractor.extract(SHEET_URL)

    def test_driver_start_failure(self):
        factory = MagicMock()
        factory.return_value.__enter__.side_effect = PlaywrightError(
            "It looks like you are using Playwright Sync API inside the asyncio loop."
        )
        extractor = SkillExtractor("http://browser:9222", 5.0, playwright_factory=factory)

        with pytest.raises(BrowserConnectionError, match="browser driver"):
            extractor.extract(SHEET_URL)

    def test_skills_panel_timeout(self, playwright_mocks):
        extractor, _, browser, page, _ = playwright_mocks
        page.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded")

        with pytest.raises(SkillListTimeoutError):
            extractor.extract(SHEET_URL)
        page.close.assert_called_once()
        browser.close.assert_called_once()

    def test_navigation_failure(self, playwright_mocks):
        extractor, _, _, page, _ = playwright_mocks
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(BrowserConnectionError):
            extractor.extract(SHEET_URL)

    def test_script_without_value(self, playwright_mocks):
        extractor, _, _, _, container = playwright_mocks
        container.evaluate.return_value = None

        with pytest.raises(ExtractionScriptError):
            extractor.extract(SHEET_URL)

    def test_script_error(self, playwright_mocks):
        extractor, _, _, _, container = playwright_mocks
        container.evaluate.side_effect = PlaywrightError("TypeError: skill is null")

        with pytest.raises(ExtractionScriptError):
            extractor.extract(SHEET_URL)

    def test_malformed_rows(self, playwright_mocks):
        extractor, _, _, _, container = playwright_mocks
        container.evaluate.return_value = "Acrobatics;Stealth,-1"

        with pytest.raises(SkillParseError):
            extractor.extract(SHEET_URL)
