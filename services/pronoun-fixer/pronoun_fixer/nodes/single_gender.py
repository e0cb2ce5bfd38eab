"""Single-Gender Replacer.

Rewrites every pronoun of the opposite gender toward one target gender.
The rules form an ordered cascade: each stage only sees what earlier
stages left untouched, so the order below must not change.

1. split / hyphenated reflexives ("him - self"), sentence-initial first
2. sentence-initial forms, forced to a capital first letter
3. possessive "her"/"his", disambiguated by a following letter
4. remaining subject / reflexive / possessive-pronoun forms
"""

from __future__ import annotations

import logging
import re

from .casing import case_like, normalize_weird_spaces

log = logging.getLogger(__name__)

# Start of text (after leading whitespace), a newline run, or terminal
# punctuation + whitespace, optionally followed by an opening quote or bracket.
_SENT_PREFIX = r"(^\s*|[\r\n]+|[.!?…]\s+)([\"'“‘(\[]\s*)?"
_LETTER = r"[^\W\d_]"
_SPLIT = r"[\s-]*"

_ADJECTIVAL = rf"(?=\s+{_LETTER})"
_PRONOMINAL = rf"(?!\s+{_LETTER})"


def _initial(word: str, lookahead: str = "") -> re.Pattern:
    return re.compile(_SENT_PREFIX + rf"({word})\b" + lookahead, re.IGNORECASE)


def _word(word: str, lookahead: str = "") -> re.Pattern:
    return re.compile(rf"\b{word}\b" + lookahead, re.IGNORECASE)


# (stage, pattern, replacement) in evaluation order.
_RULES: dict[str, list[tuple[str, re.Pattern, str]]] = {
    "toMale": [
        ("initial", _initial(rf"her{_SPLIT}self"), "himself"),
        ("reflexive", _word(rf"her{_SPLIT}self"), "himself"),
        ("initial", _initial("she"), "he"),
        ("initial", _initial("hers"), "his"),
        ("initial", _initial("her", _ADJECTIVAL), "his"),
        ("initial", _initial("her", _PRONOMINAL), "him"),
        ("general", _word("her", _ADJECTIVAL), "his"),
        ("general", _word("her"), "him"),
        ("general", _word("she"), "he"),
        ("general", _word("herself"), "himself"),
        ("general", _word("hers"), "his"),
    ],
    "toFemale": [
        ("initial", _initial(rf"him{_SPLIT}self"), "herself"),
        ("reflexive", _word(rf"him{_SPLIT}self"), "herself"),
        ("initial", _initial("he"), "she"),
        ("initial", _initial("him"), "her"),
        ("initial", _initial("his", _ADJECTIVAL), "her"),
        ("initial", _initial("his", _PRONOMINAL), "hers"),
        ("general", _word("his", _ADJECTIVAL), "her"),
        ("general", _word("his"), "hers"),
        ("general", _word("he"), "she"),
        ("general", _word("himself"), "herself"),
        ("general", _word("him"), "her"),
    ],
}


def _capitalized(src: str, target: str) -> str:
    cased = case_like(src, target)
    return cased[0].upper() + cased[1:]


def replace_pronouns(text: str, direction: str) -> str:
    """Return *text* with opposite-gender pronouns rewritten toward
    *direction* (``"toMale"`` or ``"toFemale"``), preserving casing."""
    if direction not in _RULES:
        raise ValueError(f"Unknown direction: {direction!r}")

    text = normalize_weird_spaces(text)

    for stage, pattern, target in _RULES[direction]:
        if stage == "initial":
            text = pattern.sub(
                lambda m, t=target: (m.group(1) + (m.group(2) or "")
                                     + _capitalized(m.group(3), t)),
                text,
            )
        else:
            text = pattern.sub(lambda m, t=target: case_like(m.group(0), t), text)

    return text
