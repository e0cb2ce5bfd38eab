"""Attribution Scorer.

Scores how strongly a span of text belongs to each glossary character and
picks the dominant one.  Longer names score more per hit, so a short alias
that happens to be a substring of an ordinary word cannot outweigh a real
name.  The configured primary character gets a flat bonus that breaks ties
toward the protagonist.

Two opt-in detectors give a block-level gender from sentence shape alone:
the named speaker of quoted dialogue and the agent of a passive clause.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from ..models import CharacterEntry

log = logging.getLogger(__name__)

ACCEPT_THRESHOLD = 300
PRIMARY_BONUS = 250

_NAME_BASE = 1000
_NAME_PER_CHAR = 6
_NAME_CAP = 220
_ALIAS_BASE = 300
_ALIAS_PER_CHAR = 5
_ALIAS_CAP = 140


def score_entry(
    span: str,
    entry: CharacterEntry,
    primary_character: Optional[str] = None,
) -> int:
    """Return the attribution score of *entry* for *span*.

    Occurrences are literal, case-sensitive substring counts.
    """
    score = 0
    if entry.name:
        hits = span.count(entry.name)
        score += hits * (_NAME_BASE + min(_NAME_CAP, len(entry.name) * _NAME_PER_CHAR))
    for alias in entry.aliases:
        if not alias:
            continue
        hits = span.count(alias)
        score += hits * (_ALIAS_BASE + min(_ALIAS_CAP, len(alias) * _ALIAS_PER_CHAR))
    if primary_character and entry.name == primary_character:
        score += PRIMARY_BONUS
    return score


def best_match(
    span: str,
    entries: list[CharacterEntry],
    primary_character: Optional[str] = None,
) -> Optional[CharacterEntry]:
    """Return the highest-scoring entry for *span*, or None when no entry
    reaches ``ACCEPT_THRESHOLD``.  Ties keep the earlier entry."""
    best: Optional[CharacterEntry] = None
    best_score = 0
    for entry in entries:
        score = score_entry(span, entry, primary_character)
        if score > best_score:
            best, best_score = entry, score

    if best is None or best_score < ACCEPT_THRESHOLD:
        return None

    log.debug("Attributed %.40r → %s (score=%d)", span, best.name, best_score)
    return best


def attributed_gender(
    span: str,
    entries: list[CharacterEntry],
    primary_character: Optional[str] = None,
) -> Optional[str]:
    """Gender of the best match, or None if there is no match or the best
    match has no definite gender."""
    entry = best_match(span, entries, primary_character)
    return entry.definite_gender if entry else None


_SPEECH_VERBS = r"(?:said|asked|shouted|whispered|replied|muttered|yelled)"


def detect_dialogue_speaker_gender(text: str, entries: list[CharacterEntry]) -> Optional[str]:
    """Gender of the named speaker of quoted dialogue in *text*.

    Recognises ``"...", said NAME`` and ``NAME said, "..."``.  Returns None
    when no speaker is found or the speakers found disagree on gender.
    """
    found: list[str] = []
    for entry in entries:
        gender = entry.definite_gender
        if gender is None or not entry.name:
            continue
        name = re.escape(entry.name)
        after_quote = re.compile(
            rf"[\"“][^\"”]{{3,}}[\"”]\s*(?:,?\s*)?{_SPEECH_VERBS}\s+{name}\b",
            re.IGNORECASE,
        )
        before_quote = re.compile(
            rf"\b{name}\b\s*{_SPEECH_VERBS}\s*(?:,?\s*)?[\"“]",
            re.IGNORECASE,
        )
        if after_quote.search(text) or before_quote.search(text):
            found.append(gender)

    if not found or any(g != found[0] for g in found):
        return None
    log.debug("Dialogue speaker → %s", found[0])
    return found[0]


def detect_passive_agent_gender(text: str, entries: list[CharacterEntry]) -> Optional[str]:
    """Gender of the agent in a passive clause such as "was struck by NAME"."""
    for entry in entries:
        gender = entry.definite_gender
        if gender is None or not entry.name:
            continue
        pattern = re.compile(
            rf"\b(?:was|were|is|are|been)\b[^.?!\n]{{0,80}}\bby\s+{re.escape(entry.name)}\b",
            re.IGNORECASE,
        )
        if pattern.search(text):
            log.debug("Passive agent %s → %s", entry.name, gender)
            return gender
    return None
