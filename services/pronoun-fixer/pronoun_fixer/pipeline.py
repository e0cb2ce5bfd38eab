"""Pass driver.

One pass resolves the glossary for the document, runs every block through
the carry-over controller in document order with a fresh ``RunState``, and
collects the status that callers display (changed count, characters,
glossary health) plus a per-stage timing report.
"""

from __future__ import annotations

import logging
import time

from .glossary import GlossaryError, SiteConfig, build_view
from .models import GlossaryView, PassResult, RunState
from .nodes import carry_over, character_detection
from .timing import build_report, collect_metrics

log = logging.getLogger(__name__)

_SIGNATURE_EDGE = 240


def document_signature(texts: list[str]) -> str:
    """Cheap fingerprint of a document (length plus head and tail) that
    callers can compare to skip re-running on unchanged content."""
    joined = "\n".join(texts).strip()
    head = joined[:_SIGNATURE_EDGE]
    tail = joined[max(0, len(joined) - _SIGNATURE_EDGE):]
    return f"{len(joined)}|{head}|{tail}"


def run_pass(texts: list[str], view: GlossaryView) -> PassResult:
    """Fix all *texts* (blocks in document order) against *view*."""
    t0 = time.monotonic_ns()
    state = RunState()

    with collect_metrics() as metrics:
        characters = character_detection.status_characters(texts, view.entries)
        fixed = carry_over.process_blocks(texts, view, state)

    report = build_report(metrics)
    dt = (time.monotonic_ns() - t0) // 1_000_000
    log.info("Pass complete: %d blocks, %d changed, %d characters in %d ms",
             len(texts), state.changed_count, len(characters), dt)

    return PassResult(
        blocks=fixed,
        changed=state.changed_count,
        characters=characters,
        glossary_ok=True,
        signature=document_signature(fixed),
        report=report,
    )


def run_document(
    texts: list[str],
    glossary: dict[str, SiteConfig],
    url: str = "",
) -> PassResult:
    """Resolve *glossary* for *url* and run a pass.

    An unusable glossary is reported through ``glossary_ok=False`` with the
    blocks returned untouched; it is never raised to the caller.
    """
    try:
        view = build_view(glossary, url)
    except GlossaryError as e:
        log.warning("Glossary unusable for %r: %s", url, e)
        return unusable_result(texts)
    return run_pass(texts, view)


def unusable_result(texts: list[str]) -> PassResult:
    return PassResult(
        blocks=list(texts),
        changed=0,
        characters=[],
        glossary_ok=False,
        signature=document_signature(texts),
        report=build_report([]),
    )
