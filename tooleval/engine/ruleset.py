# tooleval/engine/ruleset.py
"""
Immutable tool configuration: fields, rule set, permission index.

Everything here is validated once, when a project version is loaded, so the
evaluation functions never see a malformed configuration. Loaders collect
every problem they find and raise a single RuleSetValidationError.
"""
from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

from .tiers import LOWEST_TIER, Tier, parse_tier
from .tool_config import DEFAULT_BASE_SCORE, DEFAULT_SCORE_RANGES, FIELD_KINDS


class RuleSetValidationError(ValueError):
    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "Invalid tool configuration")


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints too large for a float
        return False


def _frozen_map(data: Mapping | None) -> Mapping:
    return MappingProxyType(dict(data or {}))


# -------------------------
# FIELD VARIANTS
# -------------------------
@dataclass(frozen=True)
class Choice:
    value: Union[str, int, float]
    weight: float = 0.0
    choice_id: str = ""
    label: str = ""
    explanation: str = ""


@dataclass(frozen=True)
class ChoiceField:
    KIND: ClassVar[str] = "choice"

    field_id: str
    choices: Tuple[Choice, ...]
    label: str = ""
    required: bool = False
    multiple: bool = False
    required_tier: Tier = LOWEST_TIER
    upgrade_message: Optional[str] = None

    def find_choice(self, value: Any) -> Optional[Choice]:
        if isinstance(value, bool):
            return None
        for choice in self.choices:
            if choice.value == value:
                return choice
        as_text = str(value)
        for choice in self.choices:
            if str(choice.value) == as_text:
                return choice
        return None


@dataclass(frozen=True)
class NumericField:
    KIND: ClassVar[str] = "numeric"

    field_id: str
    weight: Optional[float] = None
    label: str = ""
    required: bool = False
    required_tier: Tier = LOWEST_TIER
    upgrade_message: Optional[str] = None


@dataclass(frozen=True)
class ScaleField:
    KIND: ClassVar[str] = "scale"

    field_id: str
    weight: Optional[float] = None
    min_value: float = 0.0
    max_value: float = 10.0
    label: str = ""
    required: bool = False
    required_tier: Tier = LOWEST_TIER
    upgrade_message: Optional[str] = None


Field = Union[ChoiceField, NumericField, ScaleField]


# -------------------------
# RULE SET
# -------------------------
@dataclass(frozen=True)
class ScoreRange:
    minimum: float
    maximum: float
    label: str
    explanation: str = ""
    recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RuleSet:
    project_id: str
    version: int
    base_score: float
    fields: Tuple[Field, ...]
    score_ranges: Tuple[ScoreRange, ...]
    factor_weights: Mapping[str, float] = field(default_factory=dict, hash=False)
    _by_id: Mapping[str, Field] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "factor_weights", _frozen_map(self.factor_weights))
        object.__setattr__(self, "_by_id", MappingProxyType({f.field_id: f for f in self.fields}))

    def get_field(self, field_id: str) -> Optional[Field]:
        return self._by_id.get(field_id)

    def field_weight(self, f: Union[NumericField, ScaleField]) -> float:
        weight = self.factor_weights.get(f.field_id)
        if weight is None:
            weight = f.weight
        return float(weight) if weight is not None else 0.0

    def choice_weight(self, choice: Choice) -> float:
        weight = self.factor_weights.get(choice.choice_id)
        if weight is None:
            weight = choice.weight
        return float(weight) if weight is not None else 0.0


# -------------------------
# PERMISSION INDEX
# -------------------------
@dataclass(frozen=True)
class FieldPermission:
    required_tier: Tier = LOWEST_TIER
    upgrade_message: Optional[str] = None


_UNRESTRICTED = FieldPermission()


@dataclass(frozen=True)
class PermissionIndex:
    entries: Mapping[str, FieldPermission] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "entries", _frozen_map(self.entries))

    def lookup(self, field_id: str) -> FieldPermission:
        # untracked fields carry no restriction
        return self.entries.get(field_id, _UNRESTRICTED)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_fields(cls, fields: Tuple[Field, ...]) -> "PermissionIndex":
        return cls({
            f.field_id: FieldPermission(f.required_tier, f.upgrade_message)
            for f in fields
            if f.required_tier is not LOWEST_TIER or f.upgrade_message
        })


# -------------------------
# LOADING (config dict -> frozen objects)
# -------------------------
_KIND_ALIASES = {
    "choice": ("choice", False),
    "select": ("choice", False),
    "radio": ("choice", False),
    "multichoice": ("choice", True),
    "multiselect": ("choice", True),
    "numeric": ("numeric", False),
    "number": ("numeric", False),
    "scale": ("scale", False),
    "slider": ("scale", False),
    "rating": ("scale", False),
}


def _optional_weight(raw: Mapping, where: str, problems: List[str]) -> Optional[float]:
    w = raw.get("weight")
    if w is None:
        return None
    if not is_number(w):
        problems.append(f"{where}: weight must be a number")
        return None
    return float(w)


def _field_tier(raw: Mapping, where: str, problems: List[str]) -> Tier:
    if raw.get("requiredTier") is None:
        return Tier.PREMIUM if raw.get("isPremium") else LOWEST_TIER
    tier = parse_tier(raw["requiredTier"])
    if tier is None:
        problems.append(f"{where}: unknown tier '{raw['requiredTier']}'")
        return LOWEST_TIER
    return tier


def _parse_choices(field_id: str, raw_choices: Any, problems: List[str]) -> Tuple[Choice, ...]:
    where = f"field '{field_id}'"
    if not isinstance(raw_choices, list) or not raw_choices:
        problems.append(f"{where}: choice field needs at least one choice")
        return ()

    choices: List[Choice] = []
    seen = set()
    for i, rc in enumerate(raw_choices):
        if not isinstance(rc, Mapping) or "value" not in rc:
            problems.append(f"{where}: choice #{i} needs a value")
            continue
        value = rc["value"]
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            problems.append(f"{where}: choice #{i} value must be a string or number")
            continue
        if str(value) in seen:
            problems.append(f"{where}: duplicate choice value '{value}'")
            continue
        seen.add(str(value))

        weight = _optional_weight(rc, f"{where} choice '{value}'", problems)
        choices.append(Choice(
            value=value,
            weight=weight if weight is not None else 0.0,
            choice_id=str(rc.get("id") or f"{field_id}:{value}"),
            label=str(rc.get("label") or rc.get("text") or value),
            explanation=str(rc.get("explanation") or ""),
        ))
    return tuple(choices)


def _parse_field(raw: Any, index: int, problems: List[str]) -> Optional[Field]:
    if not isinstance(raw, Mapping):
        problems.append(f"field #{index}: must be an object")
        return None

    field_id = raw.get("id") or raw.get("fieldId")
    if not isinstance(field_id, str) or not field_id.strip():
        problems.append(f"field #{index}: missing id")
        return None
    where = f"field '{field_id}'"

    kind_raw = str(raw.get("kind") or raw.get("type") or "").strip().lower()
    if kind_raw not in _KIND_ALIASES:
        problems.append(f"{where}: unknown kind '{kind_raw}' (expected one of {', '.join(FIELD_KINDS)})")
        return None
    kind, multiple = _KIND_ALIASES[kind_raw]

    common = dict(
        field_id=field_id,
        label=str(raw.get("label") or field_id),
        required=bool(raw.get("required", False)),
        required_tier=_field_tier(raw, where, problems),
        upgrade_message=raw.get("upgradeMessage") or None,
    )

    if kind == "choice":
        return ChoiceField(
            choices=_parse_choices(field_id, raw.get("choices"), problems),
            multiple=bool(raw.get("multiple", multiple)),
            **common,
        )

    weight = _optional_weight(raw, where, problems)
    if kind == "numeric":
        return NumericField(weight=weight, **common)

    lo, hi = raw.get("min", 0), raw.get("max", 10)
    if not is_number(lo) or not is_number(hi):
        problems.append(f"{where}: scale bounds must be numbers")
        return None
    if lo >= hi:
        problems.append(f"{where}: scale min must be below max")
        return None
    return ScaleField(weight=weight, min_value=float(lo), max_value=float(hi), **common)


def _parse_fields(raw_fields: Any, problems: List[str]) -> Tuple[Field, ...]:
    if raw_fields is None:
        return ()
    if not isinstance(raw_fields, list):
        problems.append("fields must be a list")
        return ()

    fields: List[Field] = []
    seen = set()
    for i, raw in enumerate(raw_fields):
        f = _parse_field(raw, i, problems)
        if f is None:
            continue
        if f.field_id in seen:
            problems.append(f"duplicate field id '{f.field_id}'")
            continue
        seen.add(f.field_id)
        fields.append(f)
    return tuple(fields)


def _range_items(raw_ranges: Any) -> List[Any]:
    # legacy blobs stored ranges as {key: {min, max, label}}; keys carry no order
    if isinstance(raw_ranges, Mapping):
        items = list(raw_ranges.values())
        if all(isinstance(r, Mapping) and is_number(r.get("min", r.get("minimum"))) for r in items):
            items.sort(key=lambda r: r.get("min", r.get("minimum")))
        return items
    if isinstance(raw_ranges, list):
        return raw_ranges
    return []


def _parse_ranges(raw_ranges: Any, problems: List[str]) -> Tuple[ScoreRange, ...]:
    items = _range_items(raw_ranges)
    if not items:
        problems.append("scoreRanges must contain at least one range")
        return ()

    ranges: List[ScoreRange] = []
    for i, rr in enumerate(items):
        if not isinstance(rr, Mapping):
            problems.append(f"range #{i}: must be an object")
            continue
        lo = rr.get("min", rr.get("minimum"))
        hi = rr.get("max", rr.get("maximum"))
        label = rr.get("label")
        if not is_number(lo) or not is_number(hi):
            problems.append(f"range #{i}: min and max must be numbers")
            continue
        if not isinstance(label, str) or not label.strip():
            problems.append(f"range #{i}: missing label")
            continue
        if lo > hi:
            problems.append(f"range '{label}': min {lo} is above max {hi}")
            continue
        recs = rr.get("recommendations") or []
        if not isinstance(recs, list) or not all(isinstance(r, str) and r.strip() for r in recs):
            problems.append(f"range '{label}': recommendations must be a list of strings")
            continue
        ranges.append(ScoreRange(
            float(lo), float(hi), label, str(rr.get("explanation") or ""), tuple(recs),
        ))
    return tuple(ranges)


def validate_score_ranges(ranges: Tuple[ScoreRange, ...], adjacency: float = 1.0) -> List[str]:
    """
    Ordered ranges must tile the line: sorted by minimum, no overlap, no gap
    wider than `adjacency` (1 for integer-authored ranges like 0-40, 41-70).
    A shared boundary (prev.max == next.min) belongs to the lower range.
    """
    problems: List[str] = []
    for prev, nxt in zip(ranges, ranges[1:]):
        if nxt.minimum < prev.minimum:
            problems.append(f"ranges not sorted: '{nxt.label}' starts below '{prev.label}'")
        elif nxt.minimum < prev.maximum:
            problems.append(f"ranges overlap: '{prev.label}' and '{nxt.label}'")
        elif nxt.minimum > prev.maximum + adjacency:
            problems.append(f"gap between '{prev.label}' ({prev.maximum}) and '{nxt.label}' ({nxt.minimum})")
    return problems


def _parse_rule_set(
    raw: Any,
    fields: Tuple[Field, ...],
    problems: List[str],
    project_id: str,
    version: int,
    range_adjacency: float,
) -> Optional[RuleSet]:
    if not isinstance(raw, Mapping):
        problems.append("ruleSet must be an object")
        return None

    base = raw.get("baseScore", DEFAULT_BASE_SCORE)
    if not is_number(base):
        problems.append("baseScore must be a finite number")

    weights: Dict[str, float] = {}
    raw_weights = raw.get("factorWeights") or {}
    if not isinstance(raw_weights, Mapping):
        problems.append("factorWeights must be an object")
        raw_weights = {}
    for key, w in raw_weights.items():
        if not is_number(w):
            problems.append(f"factorWeights['{key}'] must be a number")
            continue
        weights[str(key)] = float(w)

    ranges = _parse_ranges(raw.get("scoreRanges"), problems)
    problems.extend(validate_score_ranges(ranges, range_adjacency))

    if problems:
        return None
    return RuleSet(
        project_id=project_id,
        version=version,
        base_score=float(base),
        fields=fields,
        score_ranges=ranges,
        factor_weights=weights,
    )


def _parse_permissions(fields: Tuple[Field, ...], overrides: Any, problems: List[str]) -> PermissionIndex:
    entries = dict(PermissionIndex.from_fields(fields).entries)
    if overrides is None:
        return PermissionIndex(entries)
    if not isinstance(overrides, Mapping):
        problems.append("permissions must be an object")
        return PermissionIndex(entries)

    for field_id, raw in overrides.items():
        if not isinstance(raw, Mapping):
            problems.append(f"permissions['{field_id}'] must be an object")
            continue
        tier = parse_tier(raw.get("requiredTier", LOWEST_TIER))
        if tier is None:
            problems.append(f"permissions['{field_id}']: unknown tier '{raw.get('requiredTier')}'")
            continue
        entries[str(field_id)] = FieldPermission(tier, raw.get("upgradeMessage") or None)
    return PermissionIndex(entries)


def _raise_if(problems: List[str]) -> None:
    if problems:
        raise RuleSetValidationError(problems)


def load_fields(raw_fields: Any) -> Tuple[Field, ...]:
    problems: List[str] = []
    fields = _parse_fields(raw_fields, problems)
    _raise_if(problems)
    return fields


def load_rule_set(
    raw: Any,
    fields: Tuple[Field, ...] = (),
    *,
    project_id: str = "",
    version: int = 0,
    range_adjacency: float = 1.0,
) -> RuleSet:
    problems: List[str] = []
    rule_set = _parse_rule_set(raw, fields, problems, project_id, version, range_adjacency)
    _raise_if(problems)
    return rule_set


def load_permission_index(fields: Tuple[Field, ...], overrides: Any = None) -> PermissionIndex:
    problems: List[str] = []
    index = _parse_permissions(fields, overrides, problems)
    _raise_if(problems)
    return index


class LoadedTool(NamedTuple):
    fields: Tuple[Field, ...]
    rule_set: Optional[RuleSet]
    permissions: PermissionIndex


def load_tool_config(
    config: Any,
    *,
    project_id: str = "",
    version: int = 0,
    range_adjacency: float = 1.0,
) -> LoadedTool:
    """
    Load a whole published tool configuration:
      {"fields": [...], "ruleSet": {...} | null, "permissions": {...}}
    Every problem across fields, rule set and permissions is reported at once.
    A null ruleSet is valid: the tool is published but not configured for
    calculation.
    """
    if not isinstance(config, Mapping):
        raise RuleSetValidationError(["tool configuration must be an object"])

    problems: List[str] = []
    fields = _parse_fields(config.get("fields"), problems)
    permissions = _parse_permissions(fields, config.get("permissions"), problems)

    rule_set = None
    if config.get("ruleSet") is not None:
        rule_set = _parse_rule_set(
            config["ruleSet"], fields, problems, project_id, version, range_adjacency
        )

    _raise_if(problems)
    return LoadedTool(fields, rule_set, permissions)


def draft_rule_set(raw_fields: List[Mapping]) -> dict:
    """
    Default rule configuration for a freshly generated tool: base score 50,
    the five default interpretation bands, and weights copied from fields
    that declare a positive weight.
    """
    weights = {}
    for raw in raw_fields or []:
        field_id = raw.get("id") or raw.get("fieldId")
        weight = raw.get("weight")
        if field_id and is_number(weight) and weight > 0:
            weights[str(field_id)] = weight

    return {
        "baseScore": DEFAULT_BASE_SCORE,
        "factorWeights": weights,
        "scoreRanges": copy.deepcopy(DEFAULT_SCORE_RANGES),
    }
