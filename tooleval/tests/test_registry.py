# tooleval/tests/test_registry.py
import copy
import os
import sys
import threading

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tooleval.engine import SnapshotRegistry, evaluate, load_tool_snapshot
from tooleval.engine.tool_config import DEMO_TOOLS


def _snapshot(version, base=50):
    config = copy.deepcopy(DEMO_TOOLS["demo-readiness"])
    config["ruleSet"]["baseScore"] = base
    return load_tool_snapshot(config, "demo-readiness", version)


def test_publish_and_get():
    registry = SnapshotRegistry()
    assert registry.get("demo-readiness") is None

    assert registry.publish(_snapshot(1)) is True
    assert registry.get("demo-readiness").version == 1
    assert len(registry) == 1


def test_stale_versions_are_ignored():
    registry = SnapshotRegistry()
    registry.publish(_snapshot(2))

    assert registry.publish(_snapshot(1)) is False
    assert registry.publish(_snapshot(2)) is False
    assert registry.get("demo-readiness").version == 2

    assert registry.publish(_snapshot(3)) is True
    assert registry.get("demo-readiness").version == 3


def test_clear():
    registry = SnapshotRegistry()
    registry.publish(_snapshot(1))
    registry.clear()
    assert len(registry) == 0


def test_readers_see_one_whole_version_during_publishes():
    """
    Each version uses a different base score, so a result mixing two
    versions would show a score that belongs to neither.
    """
    registry = SnapshotRegistry()
    registry.publish(_snapshot(1, base=1))
    mismatches = []
    done = threading.Event()

    def reader():
        while not done.is_set():
            snap = registry.get("demo-readiness")
            result = evaluate({}, "free", snap)
            if result.version != snap.version or result.raw_score != float(snap.version):
                mismatches.append((snap.version, result.version, result.raw_score))

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for v in range(2, 60):
        registry.publish(_snapshot(v, base=v))
    done.set()
    for t in threads:
        t.join()

    assert mismatches == []
    assert registry.get("demo-readiness").version == 59
