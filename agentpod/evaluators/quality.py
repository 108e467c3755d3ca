"""
Interaction-quality scorer.

Four sub-scores, each a rule table capped at a fixed maximum:

    clarity          detail, questions, actionable and specific wording, structure
    engagement       enthusiasm, responsiveness, interest, questions, collaboration
    professionalism  politeness, greeting, closing, technical terms, no profanity
    context          network, capability, collaboration, transaction, understanding

Overall quality is 0.3 clarity + 0.3 engagement + 0.2 professionalism +
0.2 context.
"""

import re
from typing import Any, Dict, List

from .rules import (
    EvaluationResult,
    PatternRule,
    PredicateRule,
    check_text,
    detect,
    evaluate_rules,
    failed_result,
)

STRENGTH_THRESHOLD = 0.8
IMPROVEMENT_THRESHOLD = 0.4

QUALITY_LEVELS = [
    (0.8, "excellent"),
    (0.6, "good"),
    (0.4, "fair"),
    (0.2, "poor"),
]

CLARITY_RULES = [
    PredicateRule("has_detail", lambda text: len(text) > 100, 2),
    PredicateRule("has_questions", lambda text: "?" in text, 1),
    PatternRule("has_actionable_items", r"\b(need|should|can|will|please|let's|would you)\b", 2),
    PatternRule("has_specifics", r"\b(when|where|how|what|why|which)\b", 1),
    PredicateRule("has_structure", lambda text: any(m in text for m in ("\n", "\u2022", "-", "1.", "*")), 1),
    PredicateRule("enough_words", lambda text: len(text.split()) >= 20, 1),
]

ENGAGEMENT_RULES = [
    PatternRule("is_engaging", r"\b(interesting|exciting|amazing|great|excellent|wonderful)\b", 2),
    PatternRule("is_responsive", r"\b(yes|no|sure|absolutely|definitely|of course|I understand|got it)\b", 1),
    PatternRule("shows_interest", r"\b(tell me|show me|explain|how does|what about|interested in)\b", 2),
    PredicateRule("asks_question", lambda text: "?" in text, 1),
    PatternRule("is_collaborative", r"\b(let's|we should|together|collaborate|work with)\b", 2),
]

PROFANITY = r"\b(damn|hell|shit|fuck|stupid|idiot)\b"

PROFESSIONALISM_RULES = [
    PatternRule("is_professional", r"\b(please|thank you|regards|sincerely|appreciate)\b", 2),
    PatternRule("has_greeting", r"\b(hello|hi|good|greetings)\b", 1),
    PatternRule("has_closing", r"\b(thanks|regards|best|sincerely)\b", 1),
    PatternRule(
        "has_technical_terms",
        r"\b(blockchain|solana|agent|protocol|api|sdk|smart contract|transaction|escrow)\b",
        1,
    ),
    PredicateRule("no_profanity", lambda text: re.search(PROFANITY, text, re.IGNORECASE) is None, 1),
]

CONTEXT_RULES = [
    PatternRule("mentions_network", r"\b(agentpod|pod network|blockchain agent|agent network)\b", 2),
    PatternRule("mentions_capabilities", r"\b(can you|able to|capable of|features|functions|capabilities)\b", 1),
    PatternRule("mentions_collaboration", r"\b(collaborate|work together|partnership|team up|join forces)\b", 2),
    PatternRule("mentions_transaction", r"\b(pay|payment|transaction|escrow|money|sol|token)\b", 1),
    PatternRule("shows_understanding", r"\b(I see|understand|makes sense|got it|clear|I know)\b", 1),
]

PATTERN_RULES = [
    PredicateRule("is_command", lambda text: re.match(
        r"(register|discover|send|create|find|search|help|status)", text.strip(), re.IGNORECASE
    ) is not None),
    PredicateRule("is_question", lambda text: "?" in text),
    PatternRule("is_request", r"\b(can you|could you|please|would you|help me)\b"),
    PatternRule("is_informational", r"\b(here is|this is|FYI|information|update|status)\b"),
    PatternRule("is_collaborative", r"\b(let's|we should|together|collaborate|work with)\b"),
    PatternRule("is_feedback", r"\b(good|bad|excellent|poor|satisfied|disappointed|works|doesn't work)\b"),
]

# name -> (rules, cap, strength, generic improvement)
DIMENSIONS = {
    "clarity": (
        CLARITY_RULES, 8,
        "Clear and detailed communication",
        "Add more detail and specific information",
    ),
    "engagement": (
        ENGAGEMENT_RULES, 8,
        "High engagement and interaction quality",
        "Increase engagement with questions and collaborative language",
    ),
    "professionalism": (
        PROFESSIONALISM_RULES, 6,
        "Professional and courteous communication",
        "Use more professional language and proper greetings/closings",
    ),
    "context_awareness": (
        CONTEXT_RULES, 7,
        "Strong awareness of AgentPod context",
        "Show more understanding of AgentPod capabilities and context",
    ),
}

WEIGHTS = {
    "clarity": 0.3,
    "engagement": 0.3,
    "professionalism": 0.2,
    "context_awareness": 0.2,
}


def quality_level(overall: float) -> str:
    for threshold, level in QUALITY_LEVELS:
        if overall >= threshold:
            return level
    return "low"


def _recommendation(overall: float) -> str:
    if overall >= 0.8:
        return "Excellent interaction quality - maintain this standard"
    if overall >= 0.6:
        return "Good interaction quality - minor improvements possible"
    if overall >= 0.4:
        return "Fair interaction quality - focus on clarity and engagement"
    return "Low interaction quality - significant improvements needed"


def _missing(signals: Dict[str, bool]) -> List[str]:
    return [name.replace("_", " ") for name, present in signals.items() if not present]


def score_interaction_quality(text: Any) -> EvaluationResult:
    """
    Score how well a message communicates.

    Every sub-score >= 0.8 is reported as a strength; every sub-score < 0.4
    is reported as an improvement naming the signals it lacked.
    """
    error = check_text(text)
    if error:
        return failed_result(error, quality_level="unknown", overall_quality=0.0)
    if not text.strip():
        return EvaluationResult(score=0.0, evaluation={
            "overall_quality": 0.0,
            "quality_level": "low",
            "scores": {name: 0.0 for name in DIMENSIONS},
            "recommendations": [_recommendation(0.0)],
            "strengths": [],
            "improvements": [],
        })

    scores: Dict[str, float] = {}
    raw_scores: Dict[str, float] = {}
    signals: Dict[str, Dict[str, bool]] = {}
    strengths: List[str] = []
    improvements: List[str] = []

    for name, (rules, cap, strength, improvement) in DIMENSIONS.items():
        raw, found = evaluate_rules(rules, text)
        raw_scores[name] = raw
        signals[name] = found
        scores[name] = min(raw / cap, 1.0)
        if scores[name] >= STRENGTH_THRESHOLD:
            strengths.append(strength)
        elif scores[name] < IMPROVEMENT_THRESHOLD:
            improvements.append(f"{improvement} (missing: {', '.join(_missing(found))})")

    overall = sum(scores[name] * weight for name, weight in WEIGHTS.items())

    evaluation = {
        "overall_quality": overall,
        "quality_level": quality_level(overall),
        "scores": scores,
        "raw_scores": raw_scores,
        "signals": signals,
        "patterns": detect(PATTERN_RULES, text),
        "metrics": {
            "message_length": len(text),
            "word_count": len(text.split()),
        },
        "recommendations": [_recommendation(overall)],
        "strengths": strengths,
        "improvements": improvements,
    }
    return EvaluationResult(score=overall, evaluation=evaluation)
