# tooleval/engine/scoring.py
from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from .ruleset import ChoiceField, Field, RuleSet, ScaleField
from .types import Anomaly, AnomalyKind, Factor, FieldContribution, Response


@dataclass(frozen=True)
class AggregateResult:
    raw_score: float
    per_field: Tuple[FieldContribution, ...]
    anomalies: Tuple[Anomaly, ...]


def as_number(value: Any) -> Optional[float]:
    """
    Numbers and numeric strings are accepted; bools, NaN and infinities are not.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            n = float(value)
        except OverflowError:
            return None
        return n if math.isfinite(n) else None
    if isinstance(value, str):
        try:
            n = float(value.strip())
        except ValueError:
            return None
        return n if math.isfinite(n) else None
    return None


def _choice_contribution(f: ChoiceField, value: Any, rule_set: RuleSet):
    if isinstance(value, list) and not f.multiple:
        return 0.0, None, "single-choice field received a list"

    selected = value if isinstance(value, list) else [value]
    total = 0.0
    explanations: List[str] = []
    unknown: List[str] = []
    for v in selected:
        choice = f.find_choice(v)
        if choice is None:
            unknown.append(str(v))
            continue
        total += rule_set.choice_weight(choice)
        if choice.explanation:
            explanations.append(choice.explanation)

    problem = f"unknown choice: {', '.join(unknown)}" if unknown else None
    if not math.isfinite(total):
        return 0.0, None, "choice weights sum out of range"
    return total, (" ".join(explanations) or None), problem


def _numeric_contribution(f: Field, value: Any, rule_set: RuleSet):
    n = as_number(value)
    if n is None:
        return 0.0, None, f"not a number: {value!r}"
    if isinstance(f, ScaleField) and not (f.min_value <= n <= f.max_value):
        return 0.0, None, f"{n:g} outside scale {f.min_value:g}..{f.max_value:g}"
    amount = n * rule_set.field_weight(f)
    if not math.isfinite(amount):
        return 0.0, None, f"{n:g} x weight is out of range"
    return amount, None, None


def aggregate(accessible: Iterable[Response], rule_set: RuleSet) -> AggregateResult:
    """
    Reduce accessible responses to a raw score.

    - starts from rule_set.base_score
    - choice fields add the selected choice weight(s)
    - numeric / scale fields add value x weight
    - bad values add 0 and become `invalid-value` anomalies
    - no clamping; that belongs to outcome resolution

    Pure: the same inputs always give the same score. math.fsum keeps the
    sum exact-rounded regardless of float accumulation order.
    """
    contributions: List[float] = [rule_set.base_score]
    per_field: List[FieldContribution] = []
    anomalies: List[Anomaly] = []

    for resp in accessible:
        f = rule_set.get_field(resp.field_id)
        if f is None:
            # the permission filter drops these already; stay total anyway
            anomalies.append(Anomaly(resp.field_id, AnomalyKind.UNKNOWN_FIELD, "field is not part of this tool"))
            continue

        if isinstance(f, ChoiceField):
            amount, explanation, problem = _choice_contribution(f, resp.value, rule_set)
        else:
            amount, explanation, problem = _numeric_contribution(f, resp.value, rule_set)

        if problem:
            anomalies.append(Anomaly(f.field_id, AnomalyKind.INVALID_VALUE, problem))

        amount += 0.0  # no -0.0 in output
        contributions.append(amount)
        per_field.append(FieldContribution(f.field_id, amount, explanation))

    return AggregateResult(_total(contributions), tuple(per_field), tuple(anomalies))


def _total(contributions: List[float]) -> float:
    try:
        return math.fsum(contributions)
    except OverflowError:
        # finite parts, total beyond float range: pin to the largest finite
        # value of the same sign so outcome resolution clamps it
        return math.copysign(sys.float_info.max, sum(contributions))


def rank_factors(
    per_field: Iterable[FieldContribution], rule_set: RuleSet
) -> Tuple[Tuple[Factor, ...], Tuple[Factor, ...]]:
    """
    Split non-zero contributions into (increase, decrease), each ordered by
    impact, largest first; ties keep response order. Text is the choice
    explanation when there is one, else "<label>: <contribution>".
    """
    increase: List[Factor] = []
    decrease: List[Factor] = []
    for c in per_field:
        if c.contribution == 0:
            continue
        f = rule_set.get_field(c.field_id)
        label = f.label if f is not None and f.label else c.field_id
        factor = Factor(c.field_id, label, abs(c.contribution), c.explanation or f"{label}: {c.contribution:+g}")
        (increase if c.contribution > 0 else decrease).append(factor)

    increase.sort(key=lambda x: x.impact, reverse=True)
    decrease.sort(key=lambda x: x.impact, reverse=True)
    return tuple(increase), tuple(decrease)
