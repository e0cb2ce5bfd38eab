"""Case & token utilities shared by every replacement path."""

from __future__ import annotations

import re

PRONOUNS = ("he", "she", "him", "her", "his", "hers", "himself", "herself")
OBJECT_PRONOUNS = frozenset({"him", "her", "himself", "herself"})

PRONOUN_RE = re.compile(r"\b(?:" + "|".join(PRONOUNS) + r")\b", re.IGNORECASE)

# Non-breaking, thin and narrow no-break spaces.
_WEIRD_SPACES_RE = re.compile("[\u00a0\u2009\u202f]")

_SCENE_BREAK_RE = re.compile(r"^(?:\*{3,}|-{3,}|={3,}|_{3,})$")
_SCENE_BREAK_LITERALS = frozenset({"***", "— — —"})

_LEADING_PRONOUN_RE = re.compile(
    r"^[\"'“‘(\[]?\s*(?:" + "|".join(PRONOUNS) + r")\b",
    re.IGNORECASE,
)

EARLY_PRONOUN_WINDOW = 160


def case_like(src: str, target: str) -> str:
    """Reproduce the casing class of *src* (upper / title / lower) on *target*."""
    if not src or not target:
        return target
    if src.upper() == src:
        return target.upper()
    if src[0].isupper():
        return target[0].upper() + target[1:]
    return target.lower()


def normalize_weird_spaces(text: str) -> str:
    return _WEIRD_SPACES_RE.sub(" ", text or "")


def is_scene_break(text: str) -> bool:
    s = (text or "").strip()
    return s in _SCENE_BREAK_LITERALS or bool(_SCENE_BREAK_RE.match(s))


def starts_with_pronoun(text: str) -> bool:
    return bool(_LEADING_PRONOUN_RE.match((text or "").strip()))


def pronoun_appears_early(text: str, limit: int = EARLY_PRONOUN_WINDOW) -> bool:
    return bool(PRONOUN_RE.search((text or "").strip()[:limit]))


def count_gendered(text: str) -> tuple[int, int]:
    """Return ``(male_count, female_count)`` of pronoun tokens in *text*."""
    male = female = 0
    for m in PRONOUN_RE.finditer(text):
        if m.group(0).lower() in ("he", "him", "his", "himself"):
            male += 1
        else:
            female += 1
    return male, female
