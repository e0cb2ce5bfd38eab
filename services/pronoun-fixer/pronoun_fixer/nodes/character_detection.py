"""Character detection for status reporting.

A character counts as present when its name or any alias appears anywhere
in the document, case-insensitively.  The status list falls back to the
whole glossary when nothing is detected (e.g. an unusual page).
"""

from __future__ import annotations

import logging

from ..models import CharacterEntry
from ..timing import timed_node

log = logging.getLogger(__name__)


@timed_node("character_detection")
def detect_characters(texts: list[str], entries: list[CharacterEntry]) -> list[CharacterEntry]:
    haystack = "\n".join(texts).lower()
    detected = [
        entry for entry in entries
        if any(name.lower() in haystack for name in entry.all_names)
    ]
    log.info("Detected %d/%d glossary characters: %s",
             len(detected), len(entries), [e.name for e in detected])
    return detected


def status_characters(texts: list[str], entries: list[CharacterEntry]) -> list[dict]:
    """Resolved character list for display: ``[{"name", "gender"}]``."""
    shown = detect_characters(texts, entries) or entries
    return [
        {"name": e.name, "gender": e.definite_gender or "unknown"}
        for e in shown
    ]
