# tooleval/engine/tiers.py
from __future__ import annotations

import enum
from typing import Any, Tuple


class Tier(str, enum.Enum):
    # declaration order IS the access order (lowest first)
    FREE = "free"
    REGISTERED = "registered"
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


TIER_ORDER: Tuple[Tier, ...] = tuple(Tier)
LOWEST_TIER = TIER_ORDER[0]
HIGHEST_TIER = TIER_ORDER[-1]

_RANK = {t: i for i, t in enumerate(TIER_ORDER)}

# Values older endpoints sent for "no subscription". They all mean the lowest
# tier and are not reported as anomalies.
UNSET_TIER_VALUES = frozenset({"", "anonymous", "none", "null", "unset"})


def tier_rank(tier: Tier) -> int:
    return _RANK[tier]


def tier_allows(caller: Tier, required: Tier) -> bool:
    """
    The one access comparison used everywhere: caller >= required.
    """
    return tier_rank(caller) >= tier_rank(required)


def parse_tier(value: Any) -> Tier | None:
    """
    Strict lookup for configuration: returns None for anything that is not a
    tier name (case-insensitive).
    """
    if isinstance(value, Tier):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Tier(value.strip().lower())
    except ValueError:
        return None


def normalize_tier(value: Any) -> Tuple[Tier, bool]:
    """
    Canonical caller-tier normalisation at the request boundary.

    Returns (tier, recognised):
    - absent / anonymous-like values -> (lowest, True)
    - known tier names               -> (tier, True)
    - anything else                  -> (lowest, False)  fail-closed
    """
    if value is None:
        return LOWEST_TIER, True
    if isinstance(value, str) and value.strip().lower() in UNSET_TIER_VALUES:
        return LOWEST_TIER, True

    tier = parse_tier(value)
    if tier is None:
        return LOWEST_TIER, False
    return tier, True
