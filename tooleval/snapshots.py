# tooleval/snapshots.py
"""
Bridge between stored project versions and the in-memory snapshot registry.

Evaluation routes only ever read a ToolSnapshot; publishing validates the
configuration, stores a new immutable ProjectVersion row and then swaps the
registry entry.
"""
from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from . import models
from .engine import SnapshotRegistry, ToolSnapshot, load_tool_snapshot
from .engine.tool_config import DEMO_TOOLS
from .settings import get_settings

logger = logging.getLogger("tooleval")
settings = get_settings()

registry = SnapshotRegistry()


def latest_version(db: Session, project_id: str) -> models.ProjectVersion | None:
    return (
        db.query(models.ProjectVersion)
        .filter(models.ProjectVersion.project_id == project_id)
        .order_by(models.ProjectVersion.version.desc())
        .first()
    )


def get_snapshot(db: Session, project_id: str) -> ToolSnapshot | None:
    snap = registry.get(project_id)
    if snap is not None:
        return snap

    row = latest_version(db, project_id)
    if row is None:
        return None

    # stored configs were validated at publish time; load once per version
    registry.publish(load_tool_snapshot(row.config, row.project_id, row.version, settings.RANGE_ADJACENCY))
    return registry.get(project_id)


def publish_tool(db: Session, project_id: str, config: dict) -> ToolSnapshot:
    """
    Validate and store the next version. Raises RuleSetValidationError before
    anything is written; IntegrityError if another writer took the version.
    """
    current = (
        db.query(func.max(models.ProjectVersion.version))
        .filter(models.ProjectVersion.project_id == project_id)
        .scalar()
    ) or 0
    version = current + 1

    snapshot = load_tool_snapshot(config, project_id, version, settings.RANGE_ADJACENCY)

    db.add(models.ProjectVersion(
        project_id=project_id,
        version=version,
        config=config,
        calculation_enabled=snapshot.calculation_enabled,
        app_version=settings.APP_VERSION,
        engine_version=settings.ENGINE_VERSION,
        schema_version=settings.SCHEMA_VERSION,
    ))
    db.commit()

    registry.publish(snapshot)
    return snapshot


def seed_demo_tools(db: Session) -> int:
    """Publish DEMO_TOOLS that have no stored version yet (idempotent)."""
    seeded = 0
    for project_id, config in DEMO_TOOLS.items():
        if latest_version(db, project_id) is None:
            publish_tool(db, project_id, config)
            seeded += 1
    if seeded:
        logger.info("seeded %d demo tool(s)", seeded)
    return seeded
