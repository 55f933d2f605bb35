# tooleval/engine/registry.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .ruleset import Field, PermissionIndex, RuleSet, load_tool_config

logger = logging.getLogger("tooleval.engine")


@dataclass(frozen=True)
class ToolSnapshot:
    """
    One published project version. rule_set is None for tools published
    without calculation (the "not configured" case).
    """
    project_id: str
    version: int
    fields: Tuple[Field, ...]
    rule_set: Optional[RuleSet]
    permissions: PermissionIndex

    @property
    def calculation_enabled(self) -> bool:
        return self.rule_set is not None


def load_tool_snapshot(config: Any, project_id: str, version: int, range_adjacency: float = 1.0) -> ToolSnapshot:
    loaded = load_tool_config(
        config, project_id=project_id, version=version, range_adjacency=range_adjacency
    )
    return ToolSnapshot(project_id, version, loaded.fields, loaded.rule_set, loaded.permissions)


class SnapshotRegistry:
    """
    Latest published snapshot per project.

    Single writer (publish), many readers (evaluations). publish() replaces
    the dict entry under a lock; get() is a plain dict read, so a reader sees
    either the old snapshot or the new one, never a mix.
    """

    def __init__(self):
        self._snapshots: Dict[str, ToolSnapshot] = {}
        self._write_lock = threading.Lock()

    def get(self, project_id: str) -> Optional[ToolSnapshot]:
        return self._snapshots.get(project_id)

    def publish(self, snapshot: ToolSnapshot) -> bool:
        """
        Install snapshot if it is newer than the current one. Returns False
        (and keeps the current one) for stale versions.
        """
        with self._write_lock:
            current = self._snapshots.get(snapshot.project_id)
            if current is not None and current.version >= snapshot.version:
                logger.info(
                    "ignoring stale snapshot %s v%s (current v%s)",
                    snapshot.project_id, snapshot.version, current.version,
                )
                return False
            self._snapshots[snapshot.project_id] = snapshot
        logger.debug("published %s v%s", snapshot.project_id, snapshot.version)
        return True

    def clear(self) -> None:
        with self._write_lock:
            self._snapshots = {}

    def __len__(self) -> int:
        return len(self._snapshots)
