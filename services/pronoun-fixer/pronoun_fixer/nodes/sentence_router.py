"""Sentence Router.

Splits a block into sentences and fixes each one independently: a sentence
with a direct attribution goes through the Single-Gender Replacer, anything
else through the Mixed-Gender Resolver (or, when the caller supplies a
block-level hint, toward the hinted gender).
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from ..models import GlossaryView, direction_for
from .attribution import attributed_gender
from .casing import count_gendered
from .mixed_gender import fix_mixed_gender_sentence, is_mixed
from .single_gender import replace_pronouns

log = logging.getLogger(__name__)

# Terminal punctuation (optionally closed by a quote/bracket) + whitespace.
_SENTENCE_BOUNDARY_RE = re.compile(
    r"(?<=[.!?…])\s+|(?<=[.!?…][\"'”’)\]])\s+"
)


def split_sentences(text: str) -> list[str]:
    """Split on terminal punctuation followed by whitespace, keeping the
    punctuation on the preceding sentence."""
    return [s for s in _SENTENCE_BOUNDARY_RE.split(text) if s]


def fix_block(
    text: str,
    view: GlossaryView,
    hint_gender: Optional[str] = None,
) -> str:
    """Fix every sentence of *text* and rejoin them with single spaces.

    *hint_gender* is applied to sentences that have no attribution of
    their own and do not mention two genders; those go to the
    mixed-gender resolver.  Returns *text* unchanged when no sentence changes.
    """
    entries = view.entries
    if view.only_change_if_wrong and hint_gender and not _looks_wrong(text, hint_gender):
        log.debug("Conservative mode: hint %s skipped for %.40r", hint_gender, text)
        hint_gender = None

    sentences = split_sentences(text)
    fixed: list[str] = []
    for sentence in sentences:
        if view.force_gender:
            gender = view.force_gender
        else:
            gender = attributed_gender(sentence, entries, view.primary_character)
        if gender:
            fixed.append(replace_pronouns(sentence, direction_for(gender)))
        elif hint_gender and not is_mixed(sentence, entries):
            fixed.append(replace_pronouns(sentence, direction_for(hint_gender)))
        else:
            fixed.append(fix_mixed_gender_sentence(sentence, entries))

    if fixed == sentences:
        return text
    return " ".join(fixed)


def _looks_wrong(text: str, gender: str) -> bool:
    """True when opposite-gender pronouns outnumber *gender*'s own."""
    male, female = count_gendered(text)
    return female > male if gender == "male" else male > female
