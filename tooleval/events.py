# tooleval/events.py
from __future__ import annotations

import json

from sqlalchemy.orm import Session

from . import models
from .settings import get_settings

settings = get_settings()


def record_event(
    db: Session,
    action: models.ActionEnum,
    project_id: str | None,
    version: int | None,
    payload: dict,
    actor_type: str = "SYSTEM",
) -> str:
    """
    Append-only. Rows are never updated or deleted by the service.
    """
    evt = models.Event(
        project_id=project_id,
        version=version,
        action=action,
        actor_type=actor_type,
        payload=json.dumps(payload, ensure_ascii=False, default=str),
        app_version=settings.APP_VERSION,
        schema_version=settings.SCHEMA_VERSION,
    )
    db.add(evt)
    db.commit()
    db.refresh(evt)
    return str(evt.id)


def record_failure(
    db: Session,
    stage: str,
    error: Exception | str,
    project_id: str | None = None,
    context: dict | None = None,
    error_code: str = "INTERNAL_FALLBACK",
) -> str:
    return record_event(db, models.ActionEnum.FAILURE_LOG, project_id, None, {
        "stage": stage,
        "error": str(error),
        "error_code": error_code,
        "context": context or {},
    })
