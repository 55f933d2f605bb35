# tooleval/engine/permissions.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from .ruleset import PermissionIndex, RuleSet
from .tiers import Tier, tier_allows
from .tool_config import DEFAULT_UPGRADE_MESSAGE
from .types import Anomaly, AnomalyKind, Response, UpgradePrompt


@dataclass(frozen=True)
class PermissionResult:
    accessible: Tuple[Response, ...]
    withheld: Tuple[Response, ...]
    upgrade_prompts: Tuple[UpgradePrompt, ...]
    anomalies: Tuple[Anomaly, ...]


def filter_responses(
    responses: Iterable[Response],
    caller_tier: Tier,
    permission_index: PermissionIndex,
    rule_set: RuleSet,
    default_message: str = DEFAULT_UPGRADE_MESSAGE,
) -> PermissionResult:
    """
    Split responses into accessible / withheld / unknown-field.

    Each response lands in exactly one bucket. Unknown fields are checked
    first, so a field that is not part of the rule set never produces an
    upgrade prompt. Fields missing from the permission index need the lowest
    tier. `caller_tier` must already be normalised (see tiers.normalize_tier).
    """
    accessible = []
    withheld = []
    prompts = []
    anomalies = []

    for resp in responses:
        if rule_set.get_field(resp.field_id) is None:
            anomalies.append(Anomaly(resp.field_id, AnomalyKind.UNKNOWN_FIELD, "field is not part of this tool"))
            continue

        perm = permission_index.lookup(resp.field_id)
        if tier_allows(caller_tier, perm.required_tier):
            accessible.append(resp)
            continue

        withheld.append(resp)
        prompts.append(UpgradePrompt(
            field_id=resp.field_id,
            required_tier=perm.required_tier,
            message=perm.upgrade_message or default_message,
        ))

    return PermissionResult(tuple(accessible), tuple(withheld), tuple(prompts), tuple(anomalies))
