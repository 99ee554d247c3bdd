import random

from ligmir.infrastructure.data_models import CharacterSheet, SkillCheckResult
from ligmir.infrastructure.errors import EmptySkillListError

DIE_SIDES = 20


def edit_distance(a: str, b: str) -> int:
    """
    Case-sensitive Damerau-Levenshtein distance between two strings.

    Insertions, deletions, substitutions and transpositions of adjacent characters
    each cost 1. Unlike the optimal-string-alignment variant, a transposed pair may
    be edited further (distance("ca", "abc") == 2).
    """
    len_a, len_b = len(a), len(b)
    if len_a == 0:
        return len_b
    if len_b == 0:
        return len_a

    max_dist = len_a + len_b
    last_row_of: dict[str, int] = {}

    # Matrix with an extra sentinel row/column holding max_dist
    d = [[0] * (len_b + 2) for _ in range(len_a + 2)]
    d[0][0] = max_dist
    for i in range(len_a + 1):
        d[i + 1][0] = max_dist
        d[i + 1][1] = i
    for j in range(len_b + 1):
        d[0][j + 1] = max_dist
        d[1][j + 1] = j

    for i in range(1, len_a + 1):
        last_match_col = 0
        for j in range(1, len_b + 1):
            k = last_row_of.get(b[j - 1], 0)
            m = last_match_col
            if a[i - 1] == b[j - 1]:
                cost = 0
                last_match_col = j
            else:
                cost = 1
            d[i + 1][j + 1] = min(
                d[i][j] + cost,  # substitution
                d[i + 1][j] + 1,  # insertion
                d[i][j + 1] + 1,  # deletion
                d[k][m] + (i - k - 1) + 1 + (j - m - 1),  # transposition
            )
        last_row_of[a[i - 1]] = i

    return d[len_a + 1][len_b + 1]


def resolve(sheet: CharacterSheet, typed_name: str) -> tuple[str, int]:
    """
    Find the skill whose name is closest to what the user typed.

    Ties are broken by lexicographic order of the skill names.

    Raises:
        EmptySkillListError: If the sheet has no skills.
    """
    if not sheet.skills:
        raise EmptySkillListError("Skill list is empty")

    best_name = min(sorted(sheet.skills), key=lambda name: edit_distance(name, typed_name))
    return best_name, sheet.skills[best_name]


def roll_d20(rng: random.Random | None = None) -> int:
    """Roll a fair d20."""
    return (rng or random).randint(1, DIE_SIDES)


def roll_skill_check(
    sheet: CharacterSheet, typed_name: str, rng: random.Random | None = None
) -> SkillCheckResult:
    """Resolve the typed skill against the sheet and add a d20 roll to its modifier."""
    name, modifier = resolve(sheet, typed_name)
    return SkillCheckResult(name=name, modifier=modifier, die_roll=roll_d20(rng))
