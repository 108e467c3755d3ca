"""
Tests for the text scorers.
"""

import pytest

from agentpod.evaluators import (
    ComboRule,
    KeywordRule,
    PatternRule,
    PredicateRule,
    evaluate_rules,
    score_collaboration,
    score_interaction_quality,
    score_reputation,
)
from agentpod.evaluators.quality import quality_level

POLISHED = (
    "Hello! Thank you for the update, this is exciting. Let's collaborate on the AgentPod network: "
    "can you tell me how the escrow payment will work together with your agent capabilities?\n"
    "- I understand the timeline\n"
    "- Best regards"
)


class TestRules:
    """Test the rule table machinery."""

    def test_weights_and_combos(self):
        rules = [
            KeywordRule("greeting", ("hello", "hi there"), 1),
            PatternRule("number", r"\d+", 2),
            PredicateRule("long", lambda text: len(text) > 100, 5),
        ]
        combos = [ComboRule("greeting_with_number", ("greeting", "number"), 3)]

        score, signals = evaluate_rules(rules, "hello 42", combos)

        assert score == 6
        assert signals == {"greeting": True, "number": True, "long": False, "greeting_with_number": True}

    def test_no_match(self):
        score, signals = evaluate_rules([KeywordRule("x", ("zzz",), 4)], "abc")
        assert score == 0
        assert signals == {"x": False}


class TestCollaboration:
    """Test score_collaboration."""

    def test_high_potential(self):
        result = score_collaboration("Can you help me find an agent to collaborate on a token project?")
        evaluation = result.evaluation

        assert evaluation["collaboration_potential"] == "high"
        assert evaluation["collaboration_score"] == 10
        assert result.score == 1.0
        assert evaluation["is_capability_query"]
        assert "User wants to find agents - suggest using agent discovery features" in evaluation["suggestions"]

    def test_medium_potential(self):
        result = score_collaboration("What is the price?")
        assert result.evaluation["collaboration_potential"] == "medium"
        assert result.score == pytest.approx(0.1)
        assert any("escrow" in s for s in result.evaluation["suggestions"])

    def test_low_potential(self):
        result = score_collaboration("Good morning")
        assert result.score == 0.0
        assert result.evaluation["collaboration_potential"] == "low"

    def test_score_is_bounded(self):
        for text in ("", "help " * 50, "Can you find a bot to trade and collaborate?"):
            assert 0.0 <= score_collaboration(text).score <= 1.0

    def test_non_text_input(self):
        result = score_collaboration(None)
        assert result.score == 0.0
        assert result.evaluation["collaboration_potential"] == "unknown"
        assert "error" in result.evaluation


class TestReputation:
    """Test score_reputation."""

    def test_positive_completion(self):
        result = score_reputation("Thank you, the project was completed successfully")
        evaluation = result.evaluation

        assert evaluation["interaction_type"] == "positive"
        assert evaluation["reputation_delta"] >= 5
        assert 0.0 < evaluation["confidence"] <= 1.0
        assert evaluation["trust_indicators"]["completion_mentioned"]
        assert result.score == 1.0

    def test_mixed(self):
        result = score_reputation("Thanks for the help, but the delivery was late")
        evaluation = result.evaluation

        assert evaluation["interaction_type"] == "mixed"
        assert evaluation["has_negative"]

    def test_purely_negative(self):
        result = score_reputation("This was a scam and a waste of time")
        assert result.evaluation["interaction_type"] == "negative"
        assert result.evaluation["reputation_delta"] == -3
        assert result.score == pytest.approx(0.2)

    def test_neutral(self):
        result = score_reputation("Any update on the status?")
        assert result.evaluation["interaction_type"] == "neutral"
        assert result.evaluation["reputation_delta"] == 0
        assert result.score == 0.5

    def test_empty_text(self):
        result = score_reputation("   ")
        assert result.score == 0.0
        assert result.evaluation["interaction_type"] == "neutral"

    def test_non_text_input(self):
        result = score_reputation(42)
        assert result.score == 0.0
        assert result.evaluation["interaction_type"] == "unknown"

    def test_confidence_capped(self):
        text = "Thanks, escrow payment completed. Great to collaborate, excellent team, but one bug."
        assert score_reputation(text).evaluation["confidence"] <= 1.0


class TestInteractionQuality:
    """Test score_interaction_quality."""

    def test_polished_message(self):
        result = score_interaction_quality(POLISHED)
        evaluation = result.evaluation

        assert result.score == pytest.approx(1.0)
        assert evaluation["quality_level"] == "excellent"
        assert len(evaluation["strengths"]) == 4
        assert evaluation["improvements"] == []
        assert evaluation["patterns"]["is_collaborative"]

    def test_terse_message(self):
        result = score_interaction_quality("ok")
        evaluation = result.evaluation

        assert evaluation["quality_level"] == "low"
        assert result.score < 0.2
        assert any(i.startswith("Add more detail") for i in evaluation["improvements"])
        assert "missing:" in evaluation["improvements"][0]

    def test_profanity_detected(self):
        rude = score_interaction_quality("this is stupid")
        polite = score_interaction_quality("this is fine")
        assert not rude.evaluation["signals"]["professionalism"]["no_profanity"]
        assert rude.evaluation["scores"]["professionalism"] < polite.evaluation["scores"]["professionalism"]

    def test_empty_text(self):
        result = score_interaction_quality("")
        assert result.score == 0.0
        assert result.evaluation["quality_level"] == "low"

    def test_non_text_input(self):
        result = score_interaction_quality(["not", "text"])
        assert result.evaluation["quality_level"] == "unknown"

    @pytest.mark.parametrize("overall, level", [
        (0.85, "excellent"),
        (0.6, "good"),
        (0.45, "fair"),
        (0.2, "poor"),
        (0.1, "low"),
    ])
    def test_quality_levels(self, overall, level):
        assert quality_level(overall) == level
