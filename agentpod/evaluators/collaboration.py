"""
Collaboration-opportunity scorer.

Looks for collaboration verbs, agent/network mentions and value-transfer
language, plus capability questions and discovery requests.
"""

from typing import Any, List

from .rules import (
    ComboRule,
    EvaluationResult,
    KeywordRule,
    check_text,
    clamp,
    evaluate_rules,
    failed_result,
)

MAX_RAW_SCORE = 10

COLLABORATION_RULES = [
    KeywordRule("collaboration", (
        "collaborate", "collaboration", "work together", "partner", "partnership",
        "team up", "joint", "together", "cooperation", "cooperate", "alliance",
        "project", "task", "help", "assist", "support", "share", "exchange",
    ), 3),
    KeywordRule("agent_mention", (
        "agent", "bot", "ai", "assistant", "eliza", "agentpod", "pod network",
    ), 2),
    KeywordRule("transaction_mention", (
        "escrow", "transaction", "payment", "pay", "sol", "token", "transfer",
        "buy", "sell", "trade", "exchange", "fee", "cost", "price",
    ), 1),
    KeywordRule("capability_query", ("can you", "are you able", "what can", "capabilities"), 2),
    KeywordRule("discovery", ("find", "search", "discover", "look for"), 0),
]

COLLABORATION_COMBOS = [
    ComboRule("discovery_with_agent", ("discovery", "agent_mention"), 2),
]


def collaboration_potential(raw_score: float) -> str:
    if raw_score > 2:
        return "high"
    if raw_score > 0:
        return "medium"
    return "low"


def _suggestions(signals: dict, raw_score: float) -> List[str]:
    suggestions = []
    if signals["collaboration"] and not signals["agent_mention"]:
        suggestions.append("Consider mentioning the AgentPod network for agent collaboration")
    if signals["transaction_mention"] and not signals["collaboration"]:
        suggestions.append("This might be a good opportunity to suggest escrow-based collaboration")
    if signals["capability_query"]:
        suggestions.append("User is interested in capabilities - good opportunity to showcase AgentPod features")
    if signals["discovery_with_agent"]:
        suggestions.append("User wants to find agents - suggest using agent discovery features")
    if raw_score == 0:
        suggestions.append("Standard conversation - no immediate collaboration opportunities detected")
    return suggestions


def score_collaboration(text: Any) -> EvaluationResult:
    """
    Score a message for collaboration potential.

    The normalized score is ``raw / 10`` clamped to [0, 1]; the raw score
    is kept in the breakdown as ``collaboration_score``.
    """
    error = check_text(text)
    if error:
        return failed_result(error, collaboration_potential="unknown")

    raw_score, signals = evaluate_rules(COLLABORATION_RULES, text.lower(), COLLABORATION_COMBOS)
    evaluation = {
        "collaboration_potential": collaboration_potential(raw_score),
        "collaboration_score": raw_score,
        "has_collaboration": signals["collaboration"],
        "has_agent_mention": signals["agent_mention"],
        "has_transaction_mention": signals["transaction_mention"],
        "is_capability_query": signals["capability_query"],
        "is_discovery": signals["discovery"],
        "suggestions": _suggestions(signals, raw_score),
    }
    return EvaluationResult(score=clamp(raw_score / MAX_RAW_SCORE), evaluation=evaluation)
