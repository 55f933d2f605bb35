# tooleval/engine/__init__.py
from .tiers import Tier, TIER_ORDER, LOWEST_TIER, HIGHEST_TIER, tier_allows, normalize_tier
from .types import Anomaly, AnomalyKind, Response, UpgradePrompt, FieldContribution, Factor, Outcome
from .ruleset import RuleSet, PermissionIndex, RuleSetValidationError, load_tool_config, draft_rule_set
from .permissions import filter_responses
from .scoring import aggregate, rank_factors
from .outcomes import resolve
from .result import EvaluationResult, assemble
from .registry import ToolSnapshot, SnapshotRegistry, load_tool_snapshot
from .evaluate import evaluate, normalize_responses, ToolNotConfigured
