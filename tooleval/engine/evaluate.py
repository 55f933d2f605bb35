# tooleval/engine/evaluate.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from .outcomes import resolve
from .permissions import filter_responses
from .registry import ToolSnapshot
from .result import EvaluationResult, assemble
from .scoring import aggregate, rank_factors
from .tiers import HIGHEST_TIER, normalize_tier
from .tool_config import DEFAULT_UPGRADE_MESSAGE
from .types import Anomaly, AnomalyKind, Response

logger = logging.getLogger("tooleval.engine")


class ToolNotConfigured(Exception):
    """The project has no rule set; calculation UI should be disabled."""

    def __init__(self, project_id: str, version: int):
        self.project_id = project_id
        self.version = version
        super().__init__(f"Tool '{project_id}' v{version} has no rule set")


RawResponses = Union[Mapping[str, Any], Iterable[Union[Response, Mapping[str, Any]]], None]


def normalize_responses(raw: RawResponses) -> Tuple[Response, ...]:
    """
    Accepts [{"fieldId", "value"}], Response objects, or a {fieldId: value}
    mapping. Duplicate field ids collapse to one entry (last value wins, first
    position kept).
    """
    if raw is None:
        return ()

    if isinstance(raw, Mapping):
        pairs = [(str(k), v) for k, v in raw.items()]
    else:
        pairs = []
        for item in raw:
            if isinstance(item, Response):
                pairs.append((item.field_id, item.value))
            else:
                pairs.append((str(item.get("fieldId")), item.get("value")))

    merged: Dict[str, Any] = {}
    for field_id, value in pairs:
        if field_id in merged:
            logger.debug("duplicate response for %s; keeping last value", field_id)
        merged[field_id] = value
    return tuple(Response(k, v) for k, v in merged.items())


def _confidence(snapshot: ToolSnapshot, answered: set) -> int:
    required = [f.field_id for f in snapshot.fields if f.required]
    if not required:
        return 100
    have = sum(1 for fid in required if fid in answered)
    return round(100 * have / len(required))


def evaluate(
    responses: RawResponses,
    caller_tier: Any,
    snapshot: ToolSnapshot,
    include_upgrade_prompts: Optional[bool] = None,
    default_message: str = DEFAULT_UPGRADE_MESSAGE,
) -> EvaluationResult:
    """
    Full evaluation pass: normalise tier -> filter -> aggregate -> resolve
    -> rank factors -> assemble. No I/O; safe to call concurrently on shared snapshots.
    """
    rule_set = snapshot.rule_set
    if rule_set is None:
        raise ToolNotConfigured(snapshot.project_id, snapshot.version)

    tier, recognised = normalize_tier(caller_tier)
    extra = []
    if not recognised:
        logger.warning("unknown caller tier %r for %s; using %s", caller_tier, snapshot.project_id, tier.value)
        extra.append(Anomaly(None, AnomalyKind.UNKNOWN_TIER, f"unknown tier {caller_tier!r}"))

    if include_upgrade_prompts is None:
        include_upgrade_prompts = tier is not HIGHEST_TIER

    normalized = normalize_responses(responses)
    perm = filter_responses(normalized, tier, snapshot.permissions, rule_set, default_message)
    agg = aggregate(perm.accessible, rule_set)
    outcome = resolve(agg.raw_score, rule_set.score_ranges)

    answered = {r.field_id for r in perm.accessible + perm.withheld}
    return assemble(
        agg,
        outcome,
        perm,
        include_upgrade_prompts,
        extra_anomalies=extra,
        confidence=_confidence(snapshot, answered),
        project_id=snapshot.project_id,
        version=snapshot.version,
        factors=rank_factors(agg.per_field, rule_set),
    )
