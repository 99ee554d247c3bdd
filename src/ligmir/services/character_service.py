import re
from dataclasses import dataclass

from ligmir.infrastructure.data_models import CharacterReference
from ligmir.infrastructure.errors import InvalidReferenceError

# Link shapes accepted for a character sheet. The first group named "id" is the
# numeric character identifier. D&D Beyond links may omit the scheme.
CHARACTER_URL_PATTERNS = (
    r"^(?:https?://)?(?:www\.)?dndbeyond\.com/(?:profile/[^/\s]+/)?characters/(?P<id>\d+)(?:[/?#]\S*)?$",
    r"^(?:https?://)?ddb\.ac/characters/(?P<id>\d+)(?:[/?#]\S*)?$",
    r"^https?://[^/\s]+/characters/(?P<id>\d+)(?:[/?#]\S*)?$",
)

LINK_PREFIXES = ("http://", "https://", "www.", "dndbeyond.com", "ddb.ac")


@dataclass(frozen=True)
class CharacterUrlPatterns:
    """Compiled character-sheet URL matchers, built once at startup."""

    patterns: tuple[re.Pattern[str], ...]

    def parse(self, url: str) -> CharacterReference:
        """
        Extract the character reference from a character-sheet link.

        Raises:
            InvalidReferenceError: If no pattern matches.
        """
        candidate = url.strip().strip("<>").split("|")[0]
        for pattern in self.patterns:
            match = pattern.match(candidate)
            if match:
                return CharacterReference(int(match.group("id")))
        raise InvalidReferenceError(url)


def looks_like_link(token: str) -> bool:
    """True if the token plausibly denotes a link (Slack wraps links as <url|label>)."""
    return token.strip("<>").lower().startswith(LINK_PREFIXES)


def build_url_patterns(
    patterns: tuple[str, ...] = CHARACTER_URL_PATTERNS,
) -> CharacterUrlPatterns:
    return CharacterUrlPatterns(tuple(re.compile(p, re.IGNORECASE) for p in patterns))
