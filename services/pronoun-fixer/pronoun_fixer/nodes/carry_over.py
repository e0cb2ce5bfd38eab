"""Carry-Over Controller.

Block-level state machine over one pass.  A block with a direct
attribution opens a carry window of ``carry_paragraphs`` blocks; a
following block with no attribution of its own that starts with (or
soon contains) a pronoun is fixed toward the carried gender and uses up
one block of the window.  Scene breaks close the window.

With the role heuristic enabled, an attributed block containing attack
cues also records its gender as the "actor" for ``ACTOR_TTL`` blocks, and
a later unattributed block with a pronoun and attack cues falls back to
that actor once the ordinary window is spent.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from ..models import GlossaryView, RunState
from ..timing import changed_blocks, timed_node
from .attribution import (
    attributed_gender,
    detect_dialogue_speaker_gender,
    detect_passive_agent_gender,
)
from .casing import is_scene_break, pronoun_appears_early, starts_with_pronoun
from .sentence_router import fix_block

log = logging.getLogger(__name__)

ACTOR_TTL = 2

_ATTACK_CUES_RE = re.compile(
    r"\b(?:knife|blade|sword|dagger|stab|stabs|stabbed|slash|slashed|strike|struck"
    r"|hit|hits|punched|kicked|cut|pierce|pierced|neck|chest)\b",
    re.IGNORECASE,
)


def block_gender(text: str, view: GlossaryView) -> Optional[str]:
    """Direct gender of a whole block.

    Sources in order: the forced gender, the passive-voice agent and the
    dialogue speaker (each when enabled), then the attribution scorer.
    """
    if view.force_gender:
        return view.force_gender
    entries = view.entries
    if view.passive_voice:
        gender = detect_passive_agent_gender(text, entries)
        if gender:
            return gender
    if view.dialogue_speaker:
        gender = detect_dialogue_speaker_gender(text, entries)
        if gender:
            return gender
    return attributed_gender(text, entries, view.primary_character)


def process_block(text: str, view: GlossaryView, state: RunState) -> str:
    """Fix one block and advance *state*.  Returns the new block text."""
    stripped = text.strip()
    if not stripped:
        return text

    if is_scene_break(stripped):
        log.debug("Scene break: carry reset")
        state.reset_context()
        return text

    gender = block_gender(stripped, view)
    if gender:
        result = fix_block(text, view, hint_gender=gender)
        state.last_gender = gender
        state.carry_left = view.carry_paragraphs
        if view.role_heuristic_carry and _ATTACK_CUES_RE.search(stripped):
            state.last_actor_gender = gender
            state.actor_ttl = ACTOR_TTL
        return result

    early = starts_with_pronoun(stripped) or pronoun_appears_early(stripped)

    if state.last_gender and state.carry_left > 0 and early:
        state.carry_left -= 1
        log.debug("Carrying %s (left=%d) into %.40r",
                  state.last_gender, state.carry_left, stripped)
        return fix_block(text, view, hint_gender=state.last_gender)

    if (view.role_heuristic_carry and state.last_actor_gender and state.actor_ttl > 0
            and early and _ATTACK_CUES_RE.search(stripped)):
        state.actor_ttl -= 1
        log.debug("Carrying actor %s (ttl=%d) into %.40r",
                  state.last_actor_gender, state.actor_ttl, stripped)
        return fix_block(text, view, hint_gender=state.last_actor_gender)

    return fix_block(text, view)


@timed_node("carry_over", affected=changed_blocks)
def process_blocks(texts: list[str], view: GlossaryView, state: RunState) -> list[str]:
    """Run every block through ``process_block`` in document order,
    counting changed blocks on *state*."""
    out: list[str] = []
    for text in texts:
        fixed = process_block(text, view, state)
        if fixed != text:
            state.changed_count += 1
        out.append(fixed)
    return out
