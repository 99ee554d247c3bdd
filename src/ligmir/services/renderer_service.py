from ligmir.infrastructure.data_models import DNDBEYOND_HOST, SkillCheckResult
from ligmir.infrastructure.errors import (
    BrowserConnectionError,
    EmptySkillListError,
    ExtractionScriptError,
    InvalidReferenceError,
    SkillExtractionError,
    SkillListTimeoutError,
    SkillParseError,
    StoreError,
)

DEFAULT_CHARACTER_SAVED = "Default character saved."
SAVE_CHARACTER_FAILED = "Failed to save your default character."
MISSING_CHARACTER_URL = "Expected a character sheet URL."
UNEXPECTED_ERROR = "Something went wrong while rolling that check."

DOWNLOAD_FAILED = "Failed to download modifiers"
DOWNLOAD_FAILURE_REASONS: dict[type[SkillExtractionError], str] = {
    BrowserConnectionError: "could not reach the browser.",
    SkillListTimeoutError: "the character sheet did not load in time.",
    ExtractionScriptError: "the character sheet could not be read.",
    SkillParseError: "the skill list could not be parsed.",
}


def render_skill_check(result: SkillCheckResult) -> str:
    return f"{result.name} check: 🎲{result.die_roll} + {result.modifier} = {result.total}"


def render_invalid_reference(url: str) -> str:
    return (
        f'I can\'t open "{url}" as a charsheet link. '
        f'It must look like "{DNDBEYOND_HOST}characters/<id>".'
    )


def render_error(error: Exception) -> str:
    """Map a pipeline error to a message that is safe to show in chat."""
    if isinstance(error, SkillExtractionError):
        for error_type, reason in DOWNLOAD_FAILURE_REASONS.items():
            if isinstance(error, error_type):
                return f"{DOWNLOAD_FAILED}: {reason}"
        return f"{DOWNLOAD_FAILED}."
    if isinstance(error, EmptySkillListError):
        return "The character sheet has no skills."
    if isinstance(error, InvalidReferenceError):
        return render_invalid_reference(error.url)
    if isinstance(error, StoreError):
        return SAVE_CHARACTER_FAILED
    return UNEXPECTED_ERROR
