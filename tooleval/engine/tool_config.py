# tooleval/engine/tool_config.py

DEFAULT_UPGRADE_MESSAGE = "Upgrade your plan to unlock this question."

DEFAULT_BASE_SCORE = 50

# Default interpretation bands for new tools. Integer-authored, so adjacent
# ranges differ by one unit at the boundary.
DEFAULT_SCORE_RANGES = [
    {
        "min": 0, "max": 19, "label": "Very Low",
        "explanation": "Needs improvement. Prioritize immediate changes.",
        "recommendations": ["Prioritize immediate changes", "Consult with experts", "Consider alternative approaches"],
    },
    {
        "min": 20, "max": 39, "label": "Low",
        "explanation": "Below average result. Focus on fundamental improvements.",
        "recommendations": ["Focus on fundamental improvements", "Seek immediate support", "Create an action plan"],
    },
    {
        "min": 40, "max": 59, "label": "Moderate",
        "explanation": "Average result. Identify areas for improvement.",
        "recommendations": ["Identify areas for improvement", "Seek additional resources", "Consider professional guidance"],
    },
    {
        "min": 60, "max": 79, "label": "High",
        "explanation": "Good result. Build on your strengths.",
        "recommendations": ["Build on your strengths", "Focus on consistency", "Explore optimization opportunities"],
    },
    {
        "min": 80, "max": 100, "label": "Very High",
        "explanation": "Excellent result. Continue with your current approach.",
        "recommendations": ["Continue with current approach", "Share your success with others", "Consider advanced strategies"],
    },
]

# A top factor above this impact gets its own recommendation line
FACTOR_RECOMMENDATION_IMPACT = 10

FIELD_KINDS = ("choice", "numeric", "scale")


DEMO_TOOLS = {
    "demo-readiness": {
        "fields": [
            {
                "id": "Q1",
                "kind": "choice",
                "label": "Do you have a written plan?",
                "required": True,
                "choices": [
                    {"value": "yes", "weight": 20, "explanation": "A written plan raises readiness."},
                    {"value": "no", "weight": 0, "explanation": "No written plan yet."},
                ],
            },
            {
                "id": "Q2",
                "kind": "choice",
                "label": "Have you validated pricing with customers?",
                "requiredTier": "premium",
                "upgradeMessage": "Unlock pricing analysis with Premium.",
                "choices": [
                    {"value": "yes", "weight": -10, "explanation": "Validated pricing lowers risk."},
                    {"value": "no", "weight": 0},
                ],
            },
            {
                "id": "Q3",
                "kind": "numeric",
                "label": "Months of runway",
                "weight": 1,
            },
            {
                "id": "Q4",
                "kind": "scale",
                "label": "Team confidence (1-5)",
                "weight": 2,
                "min": 1,
                "max": 5,
                "requiredTier": "basic",
            },
        ],
        "ruleSet": {
            "baseScore": 50,
            "factorWeights": {"Q1": 20, "Q2": -10},
            "scoreRanges": [
                {
                    "min": 0, "max": 40, "label": "Low", "explanation": "Significant gaps remain.",
                    "recommendations": ["Write down a plan before anything else"],
                },
                {"min": 41, "max": 70, "label": "Medium", "explanation": "Solid foundation with room to grow."},
                {
                    "min": 71, "max": 100, "label": "High", "explanation": "Ready to launch.",
                    "recommendations": ["Set a launch date", "Share the plan with your team"],
                },
            ],
        },
    },
}
