# tooleval/engine/result.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from .permissions import PermissionResult
from .scoring import AggregateResult
from .tool_config import FACTOR_RECOMMENDATION_IMPACT
from .types import Anomaly, Factor, FieldContribution, Outcome, Response, UpgradePrompt


@dataclass(frozen=True)
class EvaluationResult:
    raw_score: float
    outcome: Outcome
    per_field: Tuple[FieldContribution, ...]
    upgrade_prompts: Tuple[UpgradePrompt, ...]
    is_partial: bool
    anomalies: Tuple[Anomaly, ...]
    withheld: Tuple[Response, ...] = ()
    confidence: int = 100
    project_id: str = ""
    version: int = 0
    increase: Tuple[Factor, ...] = ()
    decrease: Tuple[Factor, ...] = ()
    recommendations: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        # fresh containers on every call; callers may mutate what they get.
        # withheld values are never echoed, only their field ids
        return {
            "projectId": self.project_id,
            "version": self.version,
            "rawScore": self.raw_score,
            "outcome": self.outcome.to_dict(),
            "perField": [c.to_dict() for c in self.per_field],
            "upgradePrompts": [p.to_dict() for p in self.upgrade_prompts],
            "isPartial": self.is_partial,
            "withheldFields": [r.field_id for r in self.withheld],
            "anomalies": [a.to_dict() for a in self.anomalies],
            "confidence": self.confidence,
            "factors": {
                "increase": [f.to_dict() for f in self.increase],
                "decrease": [f.to_dict() for f in self.decrease],
            },
            "recommendations": list(self.recommendations),
        }

    def analytics_event(self) -> dict:
        """
        Payload for the append-only analytics log. No response values.
        """
        return {
            "projectId": self.project_id,
            "version": self.version,
            "rawScore": self.raw_score,
            "outcomeLabel": self.outcome.label,
            "upgradePromptCount": len(self.upgrade_prompts),
            "anomalyCount": len(self.anomalies),
            "isPartial": self.is_partial,
        }


def factor_recommendations(increase: Tuple[Factor, ...], decrease: Tuple[Factor, ...]) -> Tuple[str, ...]:
    recs = []
    if increase and increase[0].impact > FACTOR_RECOMMENDATION_IMPACT:
        recs.append(f'Leverage your strength in "{increase[0].label}"')
    if decrease and decrease[0].impact > FACTOR_RECOMMENDATION_IMPACT:
        recs.append(f'Prioritize improving "{decrease[0].label}"')
    return tuple(recs)


def assemble(
    aggregate_result: AggregateResult,
    outcome: Outcome,
    permission_result: PermissionResult,
    include_upgrade_prompts: bool,
    extra_anomalies: Iterable[Anomaly] = (),
    confidence: int = 100,
    project_id: str = "",
    version: int = 0,
    factors: Tuple[Tuple[Factor, ...], Tuple[Factor, ...]] = ((), ()),
) -> EvaluationResult:
    """
    Merge aggregator, resolver and filter output into one immutable result.

    - upgrade prompts only when include_upgrade_prompts is set (authoritative,
      even if something was withheld)
    - is_partial is true iff anything was withheld
    - anomaly order: request-level, permission filter, aggregator
    - recommendations: the outcome's own, then the top-factor ones
    """
    prompts = permission_result.upgrade_prompts if include_upgrade_prompts else ()
    anomalies = tuple(extra_anomalies) + permission_result.anomalies + aggregate_result.anomalies
    increase, decrease = factors

    return EvaluationResult(
        raw_score=aggregate_result.raw_score,
        outcome=outcome,
        per_field=aggregate_result.per_field,
        upgrade_prompts=tuple(prompts),
        is_partial=bool(permission_result.withheld),
        anomalies=anomalies,
        withheld=permission_result.withheld,
        confidence=confidence,
        project_id=project_id,
        version=version,
        increase=tuple(increase),
        decrease=tuple(decrease),
        recommendations=outcome.recommendations + factor_recommendations(increase, decrease),
    )
