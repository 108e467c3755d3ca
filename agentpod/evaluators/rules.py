"""
Rule tables for the text classifiers.

A classifier is a list of rules, each naming a signal category and the
weight it contributes when the signal is present. Combination rules fire
when several categories matched together. ``evaluate_rules`` folds a table
into a score plus the signals that produced it.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple, Union


@dataclass(frozen=True)
class KeywordRule:
    """Matches when any keyword occurs as a substring of the text."""
    category: str
    keywords: Tuple[str, ...]
    weight: float = 0.0

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


@dataclass(frozen=True)
class PatternRule:
    """Matches a regular expression (case-insensitive by default)."""
    category: str
    pattern: str
    weight: float = 0.0
    flags: int = re.IGNORECASE

    def matches(self, text: str) -> bool:
        return re.search(self.pattern, text, self.flags) is not None


@dataclass(frozen=True)
class PredicateRule:
    """Matches when ``check(text)`` is true."""
    category: str
    check: Callable[[str], bool]
    weight: float = 0.0

    def matches(self, text: str) -> bool:
        return bool(self.check(text))


@dataclass(frozen=True)
class ComboRule:
    """Fires when every required category matched."""
    category: str
    requires: Tuple[str, ...]
    weight: float = 0.0

    def holds(self, signals: Dict[str, bool]) -> bool:
        return all(signals.get(name, False) for name in self.requires)


Rule = Union[KeywordRule, PatternRule, PredicateRule]


def detect(rules: Iterable[Rule], text: str) -> Dict[str, bool]:
    """Which categories are present in ``text``."""
    return {rule.category: rule.matches(text) for rule in rules}


def evaluate_rules(
    rules: Sequence[Rule],
    text: str,
    combos: Sequence[ComboRule] = (),
) -> Tuple[float, Dict[str, bool]]:
    """
    Fold a rule table over ``text``.

    Returns:
        (summed weight of every rule that fired, signal map including combos)
    """
    signals = detect(rules, text)
    score = sum(rule.weight for rule in rules if signals[rule.category])
    for combo in combos:
        fired = combo.holds(signals)
        signals[combo.category] = fired
        if fired:
            score += combo.weight
    return score, signals


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


@dataclass
class EvaluationResult:
    """Output of a classifier: bounded score, breakdown, and when it ran."""
    score: float
    evaluation: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.utcnow().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "evaluation": self.evaluation,
            "timestamp": self.timestamp,
        }


def failed_result(error: str, **fields) -> EvaluationResult:
    """Zero-score result for input a classifier cannot read."""
    evaluation = {"error": error}
    evaluation.update(fields)
    return EvaluationResult(score=0.0, evaluation=evaluation)


def check_text(text: Any) -> Optional[str]:
    """Return an error message when ``text`` is not a string."""
    if not isinstance(text, str):
        return f"Expected text, got {type(text).__name__}"
    return None
