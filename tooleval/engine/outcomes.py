# tooleval/engine/outcomes.py
from __future__ import annotations

import bisect
import math
from typing import Sequence

from .ruleset import ScoreRange
from .types import Outcome


def resolve(raw_score: float, score_ranges: Sequence[ScoreRange]) -> Outcome:
    """
    Map a raw score onto validated, ascending score ranges.

    A score belongs to the first range whose maximum is >= score, so a shared
    boundary goes to the lower range and a value between two integer-authored
    ranges (40.5 between 0-40 and 41-70) goes to the upper one. Scores below
    the lowest minimum clamp to the lowest range, scores above the highest
    maximum clamp to the highest range. Every real score has exactly one
    outcome.
    """
    if not score_ranges:
        raise ValueError("no score ranges configured")
    if math.isnan(raw_score):
        raise ValueError("raw score is NaN")

    maxima = [r.maximum for r in score_ranges]
    idx = bisect.bisect_left(maxima, raw_score)
    rng = score_ranges[min(idx, len(score_ranges) - 1)]
    return Outcome(rng.label, rng.explanation, rng.recommendations)
