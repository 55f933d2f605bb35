# tooleval/routes/public.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..engine import evaluate
from ..events import record_event
from ..logging_config import log_evaluation, log_failure
from ..settings import get_settings
from .projects import ProjectId, request_responses, require_snapshot

router = APIRouter(prefix="/public/tools", tags=["public"])
settings = get_settings()


@router.post("/{project_id}/calculate", response_model=schemas.EvaluationOut)
def calculate(project_id: ProjectId, body: schemas.EvaluateRequest, response: Response, db: Session = Depends(get_db)):
    """
    Public runtime submission. Anonymous callers (no callerTier) are scored
    as the lowest tier.
    """
    response.headers["X-App-Version"] = settings.APP_VERSION
    snap = require_snapshot(db, project_id)

    result = evaluate(
        request_responses(body),
        body.caller_tier,
        snap,
        include_upgrade_prompts=body.include_upgrade_prompts,
        default_message=settings.DEFAULT_UPGRADE_MESSAGE,
    )

    event = result.analytics_event()
    try:
        record_event(db, models.ActionEnum.EVALUATE, project_id, snap.version, event, actor_type="PUBLIC")
    except SQLAlchemyError as e:
        # the result is still valid; only the analytics row is lost
        db.rollback()
        log_failure("ANALYTICS_WRITE_FAILED", {"project_id": project_id, "error": str(e)})
    log_evaluation(event)

    return result.to_dict()
