# tooleval/engine/types.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from .tiers import Tier

ResponseValue = Union[str, int, float, List[Union[str, int, float]]]


class AnomalyKind(str, enum.Enum):
    UNKNOWN_FIELD = "unknown-field"
    INVALID_VALUE = "invalid-value"
    UNKNOWN_TIER = "unknown-tier"


@dataclass(frozen=True)
class Response:
    field_id: str
    value: ResponseValue


@dataclass(frozen=True)
class Anomaly:
    """
    Non-fatal data issue found while evaluating. field_id is None for
    request-level issues (unknown caller tier).
    """
    field_id: Optional[str]
    kind: AnomalyKind
    detail: str = ""

    def to_dict(self) -> dict:
        return {"fieldId": self.field_id, "kind": self.kind.value, "detail": self.detail}


@dataclass(frozen=True)
class UpgradePrompt:
    field_id: str
    required_tier: Tier
    message: str

    def to_dict(self) -> dict:
        return {
            "fieldId": self.field_id,
            "requiredTier": self.required_tier.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class FieldContribution:
    field_id: str
    contribution: float
    explanation: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "fieldId": self.field_id,
            "contribution": self.contribution,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class Factor:
    """A field that moved the score, ranked by impact (absolute contribution)."""
    field_id: str
    label: str
    impact: float
    text: str

    def to_dict(self) -> dict:
        return {"fieldId": self.field_id, "label": self.label, "impact": self.impact, "text": self.text}


@dataclass(frozen=True)
class Outcome:
    label: str
    explanation: str = ""
    recommendations: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "explanation": self.explanation,
            "recommendations": list(self.recommendations),
        }
