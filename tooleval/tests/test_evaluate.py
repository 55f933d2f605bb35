# tooleval/tests/test_evaluate.py
import copy
import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tooleval.engine import (
    AnomalyKind,
    Response,
    Tier,
    ToolNotConfigured,
    evaluate,
    load_tool_snapshot,
    normalize_responses,
)
from tooleval.engine.tool_config import DEMO_TOOLS


def _snapshot(mutate=None, version=1):
    config = copy.deepcopy(DEMO_TOOLS["demo-readiness"])
    if mutate:
        mutate(config)
    return load_tool_snapshot(config, "demo-readiness", version)


# -------------------------
# SCENARIOS
# -------------------------
def test_free_caller_gets_partial_medium_with_prompt():
    result = evaluate([{"fieldId": "Q1", "value": "yes"}, {"fieldId": "Q2", "value": "no"}], "free", _snapshot())

    assert result.raw_score == 70.0
    assert result.outcome.label == "Medium"
    assert result.is_partial is True
    assert [p.field_id for p in result.upgrade_prompts] == ["Q2"]
    assert result.upgrade_prompts[0].required_tier is Tier.PREMIUM
    assert [c.field_id for c in result.per_field] == ["Q1"]
    assert result.anomalies == ()


def test_premium_caller_gets_full_medium_without_prompts():
    result = evaluate([{"fieldId": "Q1", "value": "yes"}, {"fieldId": "Q2", "value": "no"}], "premium", _snapshot())

    assert result.raw_score == 70.0
    assert result.outcome.label == "Medium"
    assert result.is_partial is False
    assert result.upgrade_prompts == ()
    assert [c.field_id for c in result.per_field] == ["Q1", "Q2"]


def test_unknown_field_is_reported_and_ignored():
    result = evaluate({"Q1": "yes", "Q99": 5}, "premium", _snapshot())

    assert result.raw_score == 70.0
    assert "Q99" not in [c.field_id for c in result.per_field]
    assert [(a.field_id, a.kind) for a in result.anomalies] == [("Q99", AnomalyKind.UNKNOWN_FIELD)]


def test_non_numeric_value_still_completes():
    result = evaluate({"Q1": "no", "Q3": "abc"}, "free", _snapshot())

    assert result.raw_score == 50.0
    assert result.outcome.label == "Medium"
    assert {c.field_id: c.contribution for c in result.per_field} == {"Q1": 0.0, "Q3": 0.0}
    assert [(a.field_id, a.kind) for a in result.anomalies] == [("Q3", AnomalyKind.INVALID_VALUE)]


@pytest.mark.parametrize("runway,label", [(-100, "Low"), (500, "High")])
def test_scores_outside_all_ranges_clamp(runway, label):
    result = evaluate({"Q3": runway}, "free", _snapshot())
    assert result.outcome.label == label


# -------------------------
# TIERS
# -------------------------
@pytest.mark.parametrize("tier", [None, "", "anonymous", "FREE"])
def test_unset_tier_is_free_without_anomaly(tier):
    result = evaluate({"Q1": "yes", "Q2": "yes"}, tier, _snapshot())
    assert result.is_partial is True
    assert result.anomalies == ()


def test_unknown_tier_fails_closed_with_anomaly():
    result = evaluate({"Q1": "yes", "Q2": "yes", "Q4": 5}, "platinum", _snapshot())

    assert result.is_partial is True
    assert result.raw_score == 70.0
    assert result.anomalies[0].field_id is None
    assert result.anomalies[0].kind is AnomalyKind.UNKNOWN_TIER


def test_anomaly_order_is_request_then_filter_then_aggregate():
    result = evaluate({"Q99": 1, "Q3": "abc"}, "gold", _snapshot())
    assert [a.kind for a in result.anomalies] == [
        AnomalyKind.UNKNOWN_TIER,
        AnomalyKind.UNKNOWN_FIELD,
        AnomalyKind.INVALID_VALUE,
    ]


def test_prompts_can_be_suppressed_while_partial_stays_true():
    result = evaluate({"Q2": "yes"}, "free", _snapshot(), include_upgrade_prompts=False)
    assert result.upgrade_prompts == ()
    assert result.is_partial is True


def test_top_tier_defaults_to_no_prompts():
    result = evaluate({"Q2": "yes"}, Tier.ENTERPRISE, _snapshot())
    assert result.upgrade_prompts == ()
    assert result.raw_score == 40.0
    assert result.outcome.label == "Low"


# -------------------------
# INPUT SHAPES / RESULT SHAPE
# -------------------------
def test_duplicate_responses_keep_last_value():
    responses = normalize_responses([
        {"fieldId": "Q1", "value": "no"},
        {"fieldId": "Q3", "value": 1},
        {"fieldId": "Q1", "value": "yes"},
    ])
    assert responses == (Response("Q1", "yes"), Response("Q3", 1))

    result = evaluate(responses, "free", _snapshot())
    assert result.raw_score == 71.0
    assert result.outcome.label == "High"


def test_normalize_accepts_response_objects_and_none():
    assert normalize_responses(None) == ()
    assert normalize_responses([Response("Q1", "yes")]) == (Response("Q1", "yes"),)


def test_not_configured_tool_raises():
    snap = _snapshot(lambda c: c.update(ruleSet=None))
    assert snap.calculation_enabled is False
    with pytest.raises(ToolNotConfigured):
        evaluate({"Q1": "yes"}, "free", snap)


def test_confidence_counts_required_fields():
    assert evaluate({}, "free", _snapshot()).confidence == 0
    assert evaluate({"Q1": "yes"}, "free", _snapshot()).confidence == 100

    def no_required(config):
        config["fields"][0]["required"] = False
    assert evaluate({}, "free", _snapshot(no_required)).confidence == 100


def test_to_dict_is_camel_case_and_fresh():
    result = evaluate({"Q1": "yes", "Q2": "no"}, "free", _snapshot(version=4))
    first = result.to_dict()

    assert first["projectId"] == "demo-readiness"
    assert first["version"] == 4
    assert first["rawScore"] == 70.0
    assert first["outcome"]["label"] == "Medium"
    assert first["upgradePrompts"][0] == {
        "fieldId": "Q2",
        "requiredTier": "premium",
        "message": "Unlock pricing analysis with Premium.",
    }

    first["perField"].clear()
    first["outcome"]["label"] = "tampered"
    second = result.to_dict()
    assert len(second["perField"]) == 1
    assert second["outcome"]["label"] == "Medium"


def test_analytics_event_has_no_response_values():
    result = evaluate({"Q1": "yes", "Q2": "no", "Q3": "abc"}, "free", _snapshot())
    event = result.analytics_event()

    assert event == {
        "projectId": "demo-readiness",
        "version": 1,
        "rawScore": 70.0,
        "outcomeLabel": "Medium",
        "upgradePromptCount": 1,
        "anomalyCount": 1,
        "isPartial": True,
    }


# -------------------------
# FACTORS / RECOMMENDATIONS
# -------------------------
def test_result_explains_what_moved_the_score():
    result = evaluate({"Q1": "yes", "Q2": "yes", "Q3": 4}, "premium", _snapshot())
    data = result.to_dict()

    assert [f["fieldId"] for f in data["factors"]["increase"]] == ["Q1", "Q3"]
    assert data["factors"]["increase"][0]["text"] == "A written plan raises readiness."
    assert [(f["fieldId"], f["impact"]) for f in data["factors"]["decrease"]] == [("Q2", 10.0)]
    assert data["recommendations"] == ['Leverage your strength in "Do you have a written plan?"']


def test_outcome_recommendations_come_first():
    result = evaluate({"Q1": "yes", "Q3": 6}, "free", _snapshot())

    assert result.outcome.label == "High"
    assert result.outcome.recommendations == ("Set a launch date", "Share the plan with your team")
    assert result.recommendations == (
        "Set a launch date",
        "Share the plan with your team",
        'Leverage your strength in "Do you have a written plan?"',
    )


def test_withheld_fields_are_listed_without_values():
    data = evaluate({"Q1": "yes", "Q2": "yes", "Q4": 5}, "free", _snapshot()).to_dict()
    assert data["withheldFields"] == ["Q2", "Q4"]
    assert "yes" not in str(data["withheldFields"])
