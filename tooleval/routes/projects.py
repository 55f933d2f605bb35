# tooleval/routes/projects.py
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..engine import HIGHEST_TIER, RuleSetValidationError, ToolSnapshot, draft_rule_set, evaluate
from ..events import record_event, record_failure
from ..logging_config import log_event, log_failure
from ..settings import get_settings
from ..snapshots import get_snapshot, publish_tool

router = APIRouter(prefix="/projects", tags=["projects"])
settings = get_settings()

ProjectId = Annotated[str, Path(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_\-]+$")]


def require_snapshot(db: Session, project_id: str) -> ToolSnapshot:
    snap = get_snapshot(db, project_id)
    if snap is None:
        raise HTTPException(404, "Project not found")
    return snap


def project_out(snap: ToolSnapshot) -> schemas.ProjectOut:
    return schemas.ProjectOut(
        project_id=snap.project_id,
        version=snap.version,
        calculation_enabled=snap.calculation_enabled,
        field_count=len(snap.fields),
    )


def request_responses(body: schemas.EvaluateRequest) -> list[dict]:
    return [r.model_dump(by_alias=True) for r in body.responses]


# -------------------------
# PUBLISH (new immutable version)
# -------------------------
@router.post("/{project_id}/versions", response_model=schemas.ProjectOut, status_code=201)
def publish_version(project_id: ProjectId, body: schemas.ToolConfigIn, db: Session = Depends(get_db)):
    config: dict = {"fields": body.fields}
    if body.rule_set is not None:
        config["ruleSet"] = body.rule_set
    elif body.generate_rules:
        config["ruleSet"] = draft_rule_set(body.fields)
    if body.permissions is not None:
        config["permissions"] = body.permissions

    try:
        snap = publish_tool(db, project_id, config)
    except RuleSetValidationError as e:
        db.rollback()
        record_event(db, models.ActionEnum.REJECT_VERSION, project_id, None, {"problems": e.problems})
        log_event("REJECT_VERSION", f"rejected configuration for {project_id}", {"problems": e.problems})
        raise
    except IntegrityError as e:
        db.rollback()
        record_failure(db, "publish", e, project_id, error_code="VERSION_CONFLICT")
        log_failure("VERSION_CONFLICT", {"project_id": project_id})
        raise HTTPException(409, "Version conflict")

    record_event(db, models.ActionEnum.PUBLISH_VERSION, project_id, snap.version, {
        "calculation_enabled": snap.calculation_enabled,
        "field_count": len(snap.fields),
        "engine_version": settings.ENGINE_VERSION,
    })
    log_event("PUBLISH_VERSION", f"published {project_id} v{snap.version}")
    return project_out(snap)


@router.get("/{project_id}", response_model=schemas.ProjectOut)
def get_project(project_id: ProjectId, db: Session = Depends(get_db)):
    return project_out(require_snapshot(db, project_id))


# -------------------------
# AUTHOR PREVIEW (no analytics)
# -------------------------
@router.post("/{project_id}/preview", response_model=schemas.EvaluationOut)
def preview(project_id: ProjectId, body: schemas.EvaluateRequest, response: Response, db: Session = Depends(get_db)):
    response.headers["X-App-Version"] = settings.APP_VERSION
    snap = require_snapshot(db, project_id)

    # authors preview with everything unlocked unless they pick a tier
    tier = body.caller_tier if body.caller_tier is not None else HIGHEST_TIER.value
    result = evaluate(
        request_responses(body),
        tier,
        snap,
        include_upgrade_prompts=body.include_upgrade_prompts,
        default_message=settings.DEFAULT_UPGRADE_MESSAGE,
    )
    return result.to_dict()
