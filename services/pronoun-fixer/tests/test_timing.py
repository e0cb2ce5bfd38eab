"""Tests for per-stage timing collection."""

from pronoun_fixer.timing import build_report, changed_blocks, collect_metrics, timed_node


@timed_node("shout", affected=changed_blocks)
def shout(texts):
    return [t.upper() for t in texts]


@timed_node("count", node_type="lookup")
def count(texts):
    return len(texts)


def test_records_blocks_processed_and_affected():
    with collect_metrics() as metrics:
        assert shout(["quiet", "LOUD", "mixed"]) == ["QUIET", "LOUD", "MIXED"]
    assert len(metrics) == 1
    m = metrics[0]
    assert m.node_name == "shout"
    assert m.node_type == "programmatic"
    assert m.blocks_processed == 3
    assert m.blocks_affected == 2


def test_stage_without_counter_reports_zero_affected():
    with collect_metrics() as metrics:
        assert count(["a", "b"]) == 2
    assert metrics[0].node_type == "lookup"
    assert metrics[0].blocks_processed == 2
    assert metrics[0].blocks_affected == 0


def test_nothing_recorded_outside_collection():
    assert shout(["x"]) == ["X"]
    with collect_metrics() as metrics:
        pass
    assert metrics == []


def test_changed_blocks():
    assert changed_blocks(["a", "b", "c"], ["a", "B", "C"]) == 2
    assert changed_blocks([], []) == 0


def test_report_lists_nodes_in_call_order():
    with collect_metrics() as metrics:
        shout(["a"])
        count(["a", "b"])
    report = build_report(metrics)
    assert [n["node"] for n in report["nodes"]] == ["shout", "count"]
    assert report["nodes"][0]["blocks_affected"] == 1
    assert report["total_duration_ms"] == sum(n["duration_ms"] for n in report["nodes"])
