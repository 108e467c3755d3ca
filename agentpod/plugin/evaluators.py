"""
Evaluator records wrapping the text scorers.
"""

from ..evaluators import score_collaboration, score_interaction_quality, score_reputation
from .contracts import Evaluator

EVALUATORS = [
    Evaluator(
        name="collaboration",
        description="Spots collaboration opportunities in a message",
        handler=score_collaboration,
    ),
    Evaluator(
        name="reputation",
        description="Derives reputation changes and trust indicators from a message",
        handler=score_reputation,
    ),
    Evaluator(
        name="interactionQuality",
        description="Rates the clarity, engagement, professionalism and context of a message",
        handler=score_interaction_quality,
    ),
]
