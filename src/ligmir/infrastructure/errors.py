"""
Error types raised along the skill-check pipeline.

Extraction errors share a base class so the orchestrator can report them as one
"failed to download" family, while still logging the concrete cause.
"""


class LigmirError(Exception):
    """Base class for all bot errors."""


class SkillExtractionError(LigmirError):
    """The character sheet could not be scraped."""


class BrowserConnectionError(SkillExtractionError):
    """The remote browser could not be reached or could not open the page."""


class SkillListTimeoutError(SkillExtractionError):
    """The skills panel did not render before the deadline."""


class ExtractionScriptError(SkillExtractionError):
    """The in-page extraction script failed or returned no value."""


class SkillParseError(SkillExtractionError):
    """A serialized skill row could not be parsed."""


class EmptySkillListError(LigmirError):
    """The sheet was scraped but contains no skills."""


class InvalidReferenceError(LigmirError):
    """A link does not match any known character-sheet URL pattern."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Not a character sheet URL: {url}")
        self.url = url


class StoreError(LigmirError):
    """Reading or writing a stored preference failed."""


class TransportError(LigmirError):
    """A reply could not be delivered to the chat transport."""
