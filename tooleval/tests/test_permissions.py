# tooleval/tests/test_permissions.py
import copy
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tooleval.engine.permissions import filter_responses
from tooleval.engine.ruleset import PermissionIndex, load_tool_config
from tooleval.engine.tiers import TIER_ORDER, Tier
from tooleval.engine.tool_config import DEFAULT_UPGRADE_MESSAGE, DEMO_TOOLS
from tooleval.engine.types import AnomalyKind, Response


def _loaded():
    return load_tool_config(copy.deepcopy(DEMO_TOOLS["demo-readiness"]), project_id="demo", version=1)


def _responses():
    return [Response("Q1", "yes"), Response("Q2", "no"), Response("Q3", 4), Response("Q4", 3)]


def test_free_caller_loses_basic_and_premium_fields():
    loaded = _loaded()
    res = filter_responses(_responses(), Tier.FREE, loaded.permissions, loaded.rule_set)

    assert [r.field_id for r in res.accessible] == ["Q1", "Q3"]
    assert [r.field_id for r in res.withheld] == ["Q2", "Q4"]
    assert [(p.field_id, p.required_tier) for p in res.upgrade_prompts] == [
        ("Q2", Tier.PREMIUM),
        ("Q4", Tier.BASIC),
    ]
    assert res.upgrade_prompts[0].message == "Unlock pricing analysis with Premium."
    assert res.anomalies == ()


def test_missing_upgrade_message_falls_back_to_default():
    loaded = _loaded()
    res = filter_responses(_responses(), Tier.FREE, loaded.permissions, loaded.rule_set)
    assert res.upgrade_prompts[1].message == DEFAULT_UPGRADE_MESSAGE

    res = filter_responses(_responses(), Tier.FREE, loaded.permissions, loaded.rule_set, "Go pro.")
    assert res.upgrade_prompts[1].message == "Go pro."


def test_each_response_lands_in_exactly_one_bucket():
    loaded = _loaded()
    responses = _responses() + [Response("Q9", 1)]
    for tier in TIER_ORDER:
        res = filter_responses(responses, tier, loaded.permissions, loaded.rule_set)
        ids = [r.field_id for r in res.accessible] + [r.field_id for r in res.withheld]
        ids += [a.field_id for a in res.anomalies]
        assert sorted(ids) == sorted(r.field_id for r in responses)
        assert len(res.upgrade_prompts) == len(res.withheld)


def test_unknown_field_is_an_anomaly_not_a_prompt():
    loaded = _loaded()
    res = filter_responses([Response("nope", 1)], Tier.FREE, loaded.permissions, loaded.rule_set)

    assert res.accessible == ()
    assert res.withheld == ()
    assert res.upgrade_prompts == ()
    assert len(res.anomalies) == 1
    assert res.anomalies[0].field_id == "nope"
    assert res.anomalies[0].kind is AnomalyKind.UNKNOWN_FIELD


def test_fields_without_permission_entry_are_open():
    loaded = _loaded()
    res = filter_responses(_responses(), Tier.FREE, PermissionIndex(), loaded.rule_set)
    assert len(res.accessible) == 4
    assert res.withheld == ()


def test_top_tier_sees_everything():
    loaded = _loaded()
    res = filter_responses(_responses(), Tier.ENTERPRISE, loaded.permissions, loaded.rule_set)
    assert len(res.accessible) == 4
    assert res.upgrade_prompts == ()
