"""Mixed-Gender Resolver.

Handles a sentence that mentions characters of both genders.  Each pronoun
takes the gender of the nearest preceding name if that name is within
``NEAR_NAME_WINDOW`` characters, regardless of the pronoun's grammatical
role.  Farther away, object pronouns are assumed to point at "the other
participant" and subject pronouns continue the established context.

This is a positional heuristic, not coreference resolution.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..models import CharacterEntry, Mention, PronounToken, opposite_gender
from .casing import OBJECT_PRONOUNS, PRONOUN_RE, case_like

log = logging.getLogger(__name__)

NEAR_NAME_WINDOW = 80

# (source word, target gender) → replacement.  "her" toward male and "his"
# toward female depend on what follows the token and are resolved separately.
_CANONICAL: dict[tuple[str, str], str] = {
    ("he", "male"): "he",
    ("she", "male"): "he",
    ("him", "male"): "him",
    ("himself", "male"): "himself",
    ("herself", "male"): "himself",
    ("hers", "male"): "his",
    ("she", "female"): "she",
    ("he", "female"): "she",
    ("her", "female"): "her",
    ("him", "female"): "her",
    ("herself", "female"): "herself",
    ("himself", "female"): "herself",
    ("hers", "female"): "hers",
}


def find_mentions(sentence: str, entries: list[CharacterEntry]) -> list[Mention]:
    """Index every name/alias occurrence of definite-gender entries,
    sorted by position."""
    lowered = sentence.lower()
    mentions: list[Mention] = []

    for entry in entries:
        gender = entry.definite_gender
        if gender is None:
            continue
        for name in entry.all_names:
            needle = name.lower()
            start = lowered.find(needle)
            while start != -1:
                end = start + len(needle)
                if _is_boundary(sentence, start - 1) and _is_boundary(sentence, end):
                    mentions.append(Mention(start, len(needle), gender))
                start = lowered.find(needle, start + 1)

    mentions.sort(key=lambda m: m.position)
    return mentions


def _is_boundary(text: str, idx: int) -> bool:
    return idx < 0 or idx >= len(text) or not text[idx].isalnum()


def is_mixed(sentence: str, entries: list[CharacterEntry]) -> bool:
    """True when *sentence* mentions characters of at least two genders."""
    return len({m.gender for m in find_mentions(sentence, entries)}) >= 2


def fix_mixed_gender_sentence(sentence: str, entries: list[CharacterEntry]) -> str:
    """Reassign pronouns in a sentence that mentions two genders.

    A no-op when fewer than two distinct genders are mentioned.
    """
    mentions = find_mentions(sentence, entries)
    genders = {m.gender for m in mentions}
    if len(genders) < 2:
        return sentence

    tokens = [PronounToken(m.start(), m.group(0)) for m in PRONOUN_RE.finditer(sentence)]
    if not tokens:
        return sentence

    pieces: list[str] = []
    cursor = 0
    mention_idx = 0
    prev_mention: Optional[Mention] = None
    last_mention_gender: Optional[str] = None
    last_target_gender: Optional[str] = None

    for token in tokens:
        p = token.position
        while mention_idx < len(mentions) and mentions[mention_idx].position < p:
            prev_mention = mentions[mention_idx]
            last_mention_gender = prev_mention.gender
            mention_idx += 1

        prior_context = last_target_gender or last_mention_gender

        target: Optional[str] = None
        if prev_mention is not None and p - prev_mention.position <= NEAR_NAME_WINDOW:
            target = prev_mention.gender
        elif token.lower in OBJECT_PRONOUNS and len(genders) == 2 and prior_context:
            target = opposite_gender(prior_context)
        elif prior_context:
            target = prior_context

        if target is None:
            continue
        last_target_gender = target

        end = p + len(token.text)
        replacement = _replacement_for(token.lower, target, sentence, end)
        pieces.append(sentence[cursor:p])
        pieces.append(case_like(token.text, replacement))
        cursor = end

    pieces.append(sentence[cursor:])
    result = "".join(pieces)
    if result != sentence:
        log.debug("Mixed-gender fix: %.60r → %.60r", sentence, result)
    return result


def _replacement_for(word: str, gender: str, sentence: str, end: int) -> str:
    if word == "her" and gender == "male":
        return "his" if _followed_by_letter(sentence, end) else "him"
    if word == "his" and gender == "female":
        return "her" if _followed_by_letter(sentence, end) else "hers"
    if word in ("her", "his"):
        return word
    return _CANONICAL[(word, gender)]


def _followed_by_letter(text: str, idx: int) -> bool:
    """Peek the next non-space character after *idx*."""
    rest = text[idx:].lstrip()
    return bool(rest) and rest[0].isalpha()
