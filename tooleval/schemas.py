# tooleval/schemas.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # JSON on the wire is camelCase; Python side stays snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------------------------
# PUBLISH
# -------------------------
class ToolConfigIn(CamelModel):
    """
    Structure contract produced by the authoring flow. Shapes inside fields /
    ruleSet / permissions are validated by the engine loader, which reports
    every problem at once.
    """
    fields: List[Dict[str, Any]] = Field(default_factory=list)
    rule_set: Optional[Dict[str, Any]] = None
    permissions: Optional[Dict[str, Dict[str, Any]]] = None
    # no ruleSet + generateRules: publish with the default draft rules
    generate_rules: bool = False


class ProjectOut(CamelModel):
    project_id: str
    version: int
    calculation_enabled: bool
    field_count: int


# -------------------------
# EVALUATE
# -------------------------
class ResponseIn(CamelModel):
    field_id: str = Field(..., min_length=1, max_length=128)
    value: Any = None


class EvaluateRequest(CamelModel):
    responses: List[ResponseIn] = Field(default_factory=list)
    caller_tier: Optional[str] = None
    include_upgrade_prompts: Optional[bool] = None


class OutcomeOut(CamelModel):
    label: str
    explanation: str = ""
    recommendations: List[str] = Field(default_factory=list)


class FieldContributionOut(CamelModel):
    field_id: str
    contribution: float
    explanation: Optional[str] = None


class UpgradePromptOut(CamelModel):
    field_id: str
    required_tier: str
    message: str


class FactorOut(CamelModel):
    field_id: str
    label: str
    impact: float
    text: str


class FactorsOut(CamelModel):
    increase: List[FactorOut] = Field(default_factory=list)
    decrease: List[FactorOut] = Field(default_factory=list)


class AnomalyOut(CamelModel):
    field_id: Optional[str] = None
    kind: Literal["unknown-field", "invalid-value", "unknown-tier"]
    detail: str = ""


class EvaluationOut(CamelModel):
    project_id: str
    version: int
    raw_score: float
    outcome: OutcomeOut
    per_field: List[FieldContributionOut] = Field(default_factory=list)
    upgrade_prompts: List[UpgradePromptOut] = Field(default_factory=list)
    is_partial: bool
    withheld_fields: List[str] = Field(default_factory=list)
    anomalies: List[AnomalyOut] = Field(default_factory=list)
    confidence: int = 100
    factors: FactorsOut = Field(default_factory=FactorsOut)
    recommendations: List[str] = Field(default_factory=list)
