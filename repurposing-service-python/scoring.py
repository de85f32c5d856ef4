"""
Composite prioritization scoring.
Weighted mean over the component scores a record actually has; missing
components are left out of both numerator and denominator. Clinical risk is
inverted (10 - value) so that lower risk raises the composite score.
"""
from typing import List

from models import COMPONENT_FIELDS, INVERTED_COMPONENTS, ComponentWeights, DrugDiseasePair

SCORE_CEILING = 10.0

HIGH_PRIORITY_THRESHOLD = 8.0
MEDIUM_PRIORITY_THRESHOLD = 6.0


def component_contribution(name: str, value: float) -> float:
    """Value a component adds to the weighted sum, before weighting."""
    if name in INVERTED_COMPONENTS:
        return SCORE_CEILING - value
    return value


def calculate_weighted_priority(item: DrugDiseasePair, weights: ComponentWeights) -> float:
    """
    Composite score for one drug-disease pair.
    Weights are used as given, never clamped. Returns exactly 0 when no
    component is present or every present component has zero weight.
    """
    weighted_sum = 0.0
    total_weight = 0.0

    for name in COMPONENT_FIELDS:
        value = getattr(item, name)
        if value is None:
            continue
        weight = getattr(weights, name)
        weighted_sum += component_contribution(name, value) * weight
        total_weight += weight

    if total_weight > 0:
        return weighted_sum / total_weight
    return 0.0


def apply_weights_to_pairs(pairs: List[DrugDiseasePair], weights: ComponentWeights) -> List[DrugDiseasePair]:
    """Re-score every pair into a new list of copies; the inputs are left untouched."""
    return [
        item.model_copy(update={"composite_prioritization_score": calculate_weighted_priority(item, weights)})
        for item in pairs
    ]


def priority_band(score: float) -> str:
    """Display band: high (>= 8), medium (>= 6) or low."""
    if score >= HIGH_PRIORITY_THRESHOLD:
        return "high"
    if score >= MEDIUM_PRIORITY_THRESHOLD:
        return "medium"
    return "low"
