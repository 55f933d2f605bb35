# tooleval/models.py
from __future__ import annotations

import enum
import json
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Enum as SAEnum,
    DateTime,
    Boolean,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator, TEXT

from .db import Base


# -------------------------
# SQLite-safe JSON object
# -------------------------
class JsonDict(TypeDecorator):
    impl = TEXT
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return "{}"
        if isinstance(value, dict):
            return json.dumps(value, ensure_ascii=False, sort_keys=True)
        if isinstance(value, str):
            s = value.strip()
            return s if s else "{}"
        return "{}"

    def process_result_value(self, value, dialect):
        if not value:
            return {}
        try:
            parsed = json.loads(value)
            return parsed if isinstance(parsed, dict) else {}
        except ValueError:
            return {}


class ActionEnum(str, enum.Enum):
    PUBLISH_VERSION = "PUBLISH_VERSION"
    REJECT_VERSION = "REJECT_VERSION"
    EVALUATE = "EVALUATE"
    FAILURE_LOG = "FAILURE_LOG"


class ProjectVersion(Base):
    """
    Immutable published tool configuration. A publish inserts a new row;
    rows are never updated.
    """
    __tablename__ = "project_versions"
    __table_args__ = (UniqueConstraint("project_id", "version", name="uq_project_version"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String, nullable=False, index=True)
    version = Column(Integer, nullable=False)

    config = Column(JsonDict, nullable=False, default=dict)
    calculation_enabled = Column(Boolean, nullable=False, default=False)

    # Provenance
    app_version = Column(String, nullable=True)
    engine_version = Column(String, nullable=True)
    schema_version = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)

    project_id = Column(String, nullable=True, index=True)
    version = Column(Integer, nullable=True)
    action = Column(SAEnum(ActionEnum), nullable=False)
    actor_type = Column(String, default="SYSTEM")
    payload = Column(Text, default="{}")

    app_version = Column(String, default="dev")
    schema_version = Column(String, default="dev")

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
