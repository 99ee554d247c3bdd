"""
Shared data models.
"""

from dataclasses import dataclass, field

DNDBEYOND_HOST = "https://www.dndbeyond.com/"


@dataclass(frozen=True)
class CharacterReference:
    character_id: int

    def url(self) -> str:
        """Render the reference back into a fetchable character-sheet URL."""
        return f"{DNDBEYOND_HOST}characters/{self.character_id}"


@dataclass(frozen=True)
class RequestSource:
    transport: str  # "telegram" | "slack"
    chat_id: str
    message_id: str
    user_id: str | None = None


@dataclass(frozen=True)
class InboundMessage:
    source: RequestSource
    text: str | None
    is_private: bool = False


@dataclass(frozen=True)
class CharacterSheet:
    skills: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class SkillCheckResult:
    name: str
    modifier: int
    die_roll: int

    @property
    def total(self) -> int:
        return self.die_roll + self.modifier


# Commands produced by the interpreter, one per inbound update


@dataclass(frozen=True)
class SkillCheck:
    skill: str
    source: RequestSource
    reference: CharacterReference | None = None


@dataclass(frozen=True)
class SetDefaultCharacter:
    reference: CharacterReference
    source: RequestSource


@dataclass(frozen=True)
class Malformed:
    source: RequestSource
    error: str


@dataclass(frozen=True)
class Unrecognized:
    pass


Command = SkillCheck | SetDefaultCharacter | Malformed | Unrecognized
