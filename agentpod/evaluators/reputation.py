"""
Reputation-signal scorer.

Derives a signed reputation delta and a confidence from feedback language,
plus a five-point trust checklist.
"""

from typing import Any, Dict, List

from .rules import (
    ComboRule,
    EvaluationResult,
    KeywordRule,
    PatternRule,
    PredicateRule,
    check_text,
    clamp,
    evaluate_rules,
    failed_result,
)

BASE_CONFIDENCE = 0.1

REPUTATION_RULES = [
    KeywordRule("positive", (
        "thank you", "thanks", "excellent", "great job", "well done", "perfect",
        "amazing", "helpful", "professional", "reliable", "trustworthy",
        "satisfied", "completed", "delivered", "success", "good work",
        "appreciate", "impressed", "recommend",
    ), 2),
    KeywordRule("negative", (
        "disappointed", "failed", "error", "problem", "issue", "bug",
        "unreliable", "late", "delayed", "incomplete", "unsatisfied", "poor",
        "bad", "terrible", "waste", "scam", "fraud", "cheat", "untrustworthy",
        "dishonest", "complaint",
    ), -3),
    KeywordRule("neutral", (
        "question", "inquiry", "information", "help", "assistance",
        "clarification", "explanation", "status", "update", "progress",
    ), 0),
    KeywordRule("completion", (
        "finished", "done", "completed", "delivered", "ready", "successful",
        "achieved", "accomplished", "resolved",
    ), 0),
    KeywordRule("transaction", ("escrow", "payment", "transaction", "paid"), 0),
    KeywordRule("collaboration", ("collaborate", "work together", "partnership", "team"), 0),
]

REPUTATION_COMBOS = [
    ComboRule("positive_completion", ("completion", "positive"), 3),
    ComboRule("completed_transaction", ("transaction", "completion"), 1),
    ComboRule("positive_collaboration", ("collaboration", "positive"), 1),
]

# Confidence gained per matched signal
CONFIDENCE_WEIGHTS = {
    "positive": 0.3,
    "negative": 0.4,
    "positive_completion": 0.2,
    "completed_transaction": 0.2,
    "positive_collaboration": 0.1,
}

TRUST_RULES = [
    PatternRule("professional_language", r"\b(please|thank\s+you|regards|sincerely|best)\b"),
    PredicateRule("specific_details", lambda text: len(text) > 50),
    PredicateRule("timely_response", lambda text: True),
]


def interaction_type(signals: Dict[str, bool]) -> str:
    positive, negative = signals["positive"], signals["negative"]
    if positive and negative:
        return "mixed"
    if positive:
        return "positive"
    if negative:
        return "negative"
    return "neutral"


def _recommendations(delta: float, trust_score: float, signals: Dict[str, bool]) -> List[str]:
    recommendations = []
    if delta > 0:
        recommendations.append("Positive interaction detected - reputation should increase")
    elif delta < 0:
        recommendations.append("Negative feedback detected - investigate and address issues")
    if signals["completed_transaction"]:
        recommendations.append("Successful transaction completion - builds trust")
    if trust_score > 0.7:
        recommendations.append("High trust indicators - reliable interaction partner")
    elif trust_score < 0.3:
        recommendations.append("Low trust indicators - proceed with caution")
    if signals["positive_collaboration"]:
        recommendations.append("Successful collaboration - good candidate for future partnerships")
    return recommendations


def score_reputation(text: Any) -> EvaluationResult:
    """
    Score a message for reputation impact.

    Returns a result whose score is ``(delta + 5) / 10`` clamped to [0, 1].
    Empty text scores 0 with a neutral interaction type.
    """
    error = check_text(text)
    if error:
        return failed_result(error, reputation_delta=0, interaction_type="unknown")
    if not text.strip():
        return EvaluationResult(score=0.0, evaluation={
            "reputation_delta": 0,
            "confidence": 0.0,
            "interaction_type": "neutral",
            "trust_score": 0.0,
            "recommendations": [],
        })

    lowered = text.lower()
    delta, signals = evaluate_rules(REPUTATION_RULES, lowered, REPUTATION_COMBOS)
    confidence = BASE_CONFIDENCE + sum(
        weight for name, weight in CONFIDENCE_WEIGHTS.items() if signals[name]
    )

    trust_indicators = {rule.category: rule.matches(lowered) for rule in TRUST_RULES}
    trust_indicators["follows_protocol"] = signals["transaction"] or signals["collaboration"]
    trust_indicators["completion_mentioned"] = signals["completion"]
    trust_score = sum(1 for v in trust_indicators.values() if v) / len(trust_indicators)

    evaluation = {
        "reputation_delta": int(delta),
        "confidence": min(round(confidence, 10), 1.0),
        "interaction_type": interaction_type(signals),
        "trust_score": trust_score,
        "trust_indicators": trust_indicators,
        "has_positive": signals["positive"],
        "has_negative": signals["negative"],
        "has_completion": signals["completion"],
        "has_transaction": signals["transaction"],
        "has_collaboration": signals["collaboration"],
        "recommendations": _recommendations(delta, trust_score, signals),
    }
    return EvaluationResult(score=clamp((delta + 5) / 10), evaluation=evaluation)
