from __future__ import annotations

import time
from collections.abc import Callable
from contextlib import ExitStack
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ligmir.infrastructure.data_models import CharacterSheet
from ligmir.infrastructure.errors import (
    BrowserConnectionError,
    ExtractionScriptError,
    SkillListTimeoutError,
    SkillParseError,
)
from ligmir.infrastructure.platform_manager import create_logger

SKILLS_CONTAINER_SELECTOR = "div.ct-skills"

# Serializes every skill row as "name,modifier;name,modifier;...". Returning one
# string keeps the automation-protocol boundary to a single primitive value.
ROW_SEPARATOR = ";"
FIELD_SEPARATOR = ","
EXTRACT_SKILLS_SCRIPT = """
(container) => {
    const items = container.querySelectorAll(".ct-skills__item");
    return [...items]
        .map(item => {
            const skill = item.querySelector(".ct-skills__col--skill");
            const modifier = item.querySelector(".ct-skills__col--modifier");
            return `${skill.innerText},${modifier.innerText.replace("\\n", "")}`;
        })
        .join(";");
}
"""

logger = create_logger(logger_name="ligmir-browser")


def parse_skill_blob(blob: str) -> dict[str, int]:
    """
    Parse the serialized skill list produced by the extraction script.

    Args:
        blob (str): Rows separated by ";", fields by ","; the first two fields of a
            row are the skill name and its signed modifier.

    Returns:
        dict[str, int]: Skill name to modifier. An empty blob yields an empty dict.

    Raises:
        SkillParseError: If any row has fewer than two fields or a non-integer
            modifier. No partial result is returned.
    """
    skills: dict[str, int] = {}
    if not blob:
        return skills

    for row in blob.split(ROW_SEPARATOR):
        fields = row.split(FIELD_SEPARATOR)
        if len(fields) < 2:
            raise SkillParseError(f'Cannot parse string "{row}" into skill name and modifier')
        name, modifier_text = fields[0], fields[1]
        try:
            skills[name] = int(modifier_text)
        except ValueError as e:
            raise SkillParseError(f'Cannot parse modifier "{modifier_text}" of "{name}"') from e
    return skills


class SkillExtractor:
    """
    Scrape the skill table of a character sheet through a remote browser.

    Each call starts its own Playwright driver in the calling thread, connects to
    the browser over the Chrome DevTools Protocol and opens a fresh page, so
    concurrent calls on different worker threads never share a page. The page and
    connection are closed before returning.

    Args:
        service_url (str): CDP endpoint of the remote browser
            (e.g., "http://browser:9222" or a "ws://" URL).
        timeout (float): Default seconds to wait for the skills panel.
        playwright_factory: Callable returning a Playwright context manager.
    """

    def __init__(
        self,
        service_url: str,
        timeout: float,
        *,
        playwright_factory: Callable[[], Any] = sync_playwright,
    ) -> None:
        self.service_url = service_url
        self.timeout = timeout
        self._playwright_factory = playwright_factory

    def extract(self, url: str, timeout: float | None = None) -> CharacterSheet:
        """
        Download the character sheet at `url` and return its skill modifiers.

        Args:
            url (str): Fully-qualified character-sheet URL.
            timeout (float | None): Seconds allowed for navigation and rendering;
                defaults to the extractor's timeout.

        Raises:
            BrowserConnectionError: The browser is unreachable or the page failed to open.
            SkillListTimeoutError: The skills panel did not appear in time.
            ExtractionScriptError: The script failed or returned no value.
            SkillParseError: A skill row was malformed.
        """
        timeout = self.timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        logger.info(f"Downloading character sheet {url} (timeout {timeout}s)")

        with ExitStack() as stack:
            try:
                playwright = stack.enter_context(self._playwright_factory())
            except (PlaywrightError, OSError) as e:
                raise BrowserConnectionError(f"Cannot start the browser driver: {e}") from e

            try:
                browser = playwright.chromium.connect_over_cdp(
                    self.service_url, timeout=_remaining_ms(deadline)
                )
            except PlaywrightError as e:
                raise BrowserConnectionError(
                    f"Cannot connect to browser at {self.service_url}: {e}"
                ) from e

            try:
                page = browser.new_page()
                try:
                    blob = self._read_skills(page, url, deadline)
                finally:
                    page.close()
            except PlaywrightTimeoutError as e:
                raise SkillListTimeoutError(
                    f"Skill list did not render within {timeout}s: {url}"
                ) from e
            except PlaywrightError as e:
                raise BrowserConnectionError(f"Cannot open {url}: {e}") from e
            finally:
                browser.close()

        skills = parse_skill_blob(blob)
        logger.info(f"Extracted {len(skills)} skills from {url}")
        return CharacterSheet(skills=skills)

    def _read_skills(self, page: Any, url: str, deadline: float) -> str:
        page.goto(url, wait_until="commit", timeout=_remaining_ms(deadline))
        container = page.wait_for_selector(
            SKILLS_CONTAINER_SELECTOR, state="attached", timeout=_remaining_ms(deadline)
        )
        if container is None:
            raise ExtractionScriptError(f"Skills container vanished: {url}")

        try:
            value = container.evaluate(EXTRACT_SKILLS_SCRIPT)
        except PlaywrightTimeoutError:
            raise
        except PlaywrightError as e:
            raise ExtractionScriptError(f"Extraction script failed: {e}") from e

        if value is None:
            raise ExtractionScriptError("Function did not return a value")
        return str(value)


def _remaining_ms(deadline: float) -> float:
    # Playwright treats 0 as "no timeout", so never hand it less than 1 ms
    return max((deadline - time.monotonic()) * 1000, 1.0)
