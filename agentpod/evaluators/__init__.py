"""
AgentPod Evaluators

Stateless scorers over message text. They never raise and never touch
protocol state.
"""

from .collaboration import score_collaboration
from .quality import score_interaction_quality
from .reputation import score_reputation
from .rules import ComboRule, EvaluationResult, KeywordRule, PatternRule, PredicateRule, evaluate_rules

__all__ = [
    "ComboRule",
    "EvaluationResult",
    "KeywordRule",
    "PatternRule",
    "PredicateRule",
    "evaluate_rules",
    "score_collaboration",
    "score_interaction_quality",
    "score_reputation",
]
