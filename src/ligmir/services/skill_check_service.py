import logging
import random
from typing import Protocol

from ligmir.infrastructure.data_models import (
    CharacterReference,
    CharacterSheet,
    Command,
    Malformed,
    RequestSource,
    SetDefaultCharacter,
    SkillCheck,
)
from ligmir.infrastructure.errors import EmptySkillListError, SkillExtractionError, StoreError
from ligmir.services.renderer_service import (
    DEFAULT_CHARACTER_SAVED,
    SAVE_CHARACTER_FAILED,
    render_error,
    render_skill_check,
)
from ligmir.services.skill_resolver import roll_skill_check


class Extractor(Protocol):
    def extract(self, url: str, timeout: float | None = None) -> CharacterSheet: ...


class PreferenceStore(Protocol):
    def get_character_id(self, user_id: str) -> int | None: ...
    def set_character_id(self, user_id: str, character_id: int) -> None: ...


class RequestOrchestrator:
    """
    Turn one interpreted command into the text of its reply.

    The orchestrator keeps no per-request state: every call to `handle` works on
    its own sheet and result, so one instance is shared by all worker threads.

    Args:
        extractor (Extractor): Scrapes a character sheet URL into a CharacterSheet.
        store (PreferenceStore): Per-user default character storage.
        default_reference (CharacterReference): Used when neither the command nor
            the store names a character.
        timeout (float): Seconds allowed for each sheet download.
        rng (random.Random | None): Source of die rolls; module random if None.
        logger (logging.Logger | None): Where failures are logged.
    """

    def __init__(
        self,
        extractor: Extractor,
        store: PreferenceStore,
        default_reference: CharacterReference,
        timeout: float,
        *,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._extractor = extractor
        self._store = store
        self._default_reference = default_reference
        self._timeout = timeout
        self._rng = rng
        self._logger = logger or logging.getLogger("ligmir")

    def handle(self, command: Command) -> str | None:
        """Return the reply for `command`, or None when no reply should be sent."""
        if isinstance(command, SkillCheck):
            return self._handle_skill_check(command)
        if isinstance(command, SetDefaultCharacter):
            return self._handle_set_default(command)
        if isinstance(command, Malformed):
            return command.error
        return None

    def effective_reference(self, command: SkillCheck) -> CharacterReference:
        """Explicit reference, else the user's stored default, else the fixed default."""
        if command.reference is not None:
            return command.reference
        stored = self._stored_reference(command.source)
        return stored or self._default_reference

    def _stored_reference(self, source: RequestSource) -> CharacterReference | None:
        if not source.user_id:
            return None
        try:
            character_id = self._store.get_character_id(source.user_id)
        except StoreError as e:
            # Read failures fall back to the default character
            self._logger.error(f"Preference lookup failed, using default character: {e}")
            return None
        return CharacterReference(character_id) if character_id is not None else None

    def _handle_skill_check(self, command: SkillCheck) -> str:
        reference = self.effective_reference(command)
        url = reference.url()
        try:
            sheet = self._extractor.extract(url, self._timeout)
            result = roll_skill_check(sheet, command.skill, self._rng)
        except SkillExtractionError as e:
            self._logger.error(f"Failed to download modifiers from {url}: {e!r}")
            return render_error(e)
        except EmptySkillListError as e:
            self._logger.error(f"Empty skill list on {url}: {e}")
            return render_error(e)
        except Exception as e:
            self._logger.exception(f"Unexpected error during skill check on {url}: {e}")
            return render_error(e)

        self._logger.info(
            f"Skill check '{command.skill}' on {url} -> {result.name} "
            f"{result.die_roll}{result.modifier:+d}={result.total}"
        )
        return render_skill_check(result)

    def _handle_set_default(self, command: SetDefaultCharacter) -> str:
        user_id = command.source.user_id
        if not user_id:
            self._logger.error("Cannot save a default character without a user id")
            return SAVE_CHARACTER_FAILED
        try:
            self._store.set_character_id(user_id, command.reference.character_id)
        except StoreError as e:
            self._logger.error(f"Preference write failed: {e}")
            return render_error(e)

        self._logger.info(
            f"Saved default character {command.reference.character_id} for user {user_id}"
        )
        return DEFAULT_CHARACTER_SAVED
