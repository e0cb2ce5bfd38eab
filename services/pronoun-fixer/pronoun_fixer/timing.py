"""Stage timing for a pronoun-fix pass.

Every stage takes the document's blocks as its first argument.  While a
``collect_metrics()`` block is active, ``@timed_node`` appends one
``NodeMetrics`` per stage call with its wall time, the number of blocks it
was given and, when the stage supplies an ``affected`` counter, how many
of them it changed.
"""

from __future__ import annotations

import contextlib
import contextvars
import functools
import logging
import time
from typing import Any, Callable, Iterator, Optional

from .models import NodeMetrics

log = logging.getLogger(__name__)

_current_metrics: contextvars.ContextVar[list[NodeMetrics] | None] = (
    contextvars.ContextVar("_current_metrics", default=None)
)

AffectedCounter = Callable[[list[str], Any], int]


def changed_blocks(texts: list[str], result: list[str]) -> int:
    """Counter for stages that return a rewritten copy of *texts*."""
    return sum(1 for before, after in zip(texts, result) if before != after)


@contextlib.contextmanager
def collect_metrics() -> Iterator[list[NodeMetrics]]:
    metrics: list[NodeMetrics] = []
    token = _current_metrics.set(metrics)
    try:
        yield metrics
    finally:
        _current_metrics.reset(token)


def timed_node(
    name: str,
    node_type: str = "programmatic",
    affected: Optional[AffectedCounter] = None,
):
    """Time a stage whose first argument is the list of block texts."""

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(texts: list[str], *args, **kwargs):
            metrics = _current_metrics.get()
            t0 = time.monotonic_ns()
            result = fn(texts, *args, **kwargs)
            if metrics is not None:
                duration_ms = (time.monotonic_ns() - t0) // 1_000_000
                metrics.append(NodeMetrics(
                    name, node_type, duration_ms,
                    blocks_processed=len(texts),
                    blocks_affected=affected(texts, result) if affected else 0,
                ))
                log.debug("%s: %d blocks in %d ms", name, len(texts), duration_ms)
            return result

        return wrapper

    return decorator


def build_report(metrics: list[NodeMetrics]) -> dict:
    return {
        "total_duration_ms": sum(m.duration_ms for m in metrics),
        "nodes": [
            {
                "node": m.node_name,
                "type": m.node_type,
                "duration_ms": m.duration_ms,
                "blocks_processed": m.blocks_processed,
                "blocks_affected": m.blocks_affected,
            }
            for m in metrics
        ],
    }
