"""
Deterministic Scoring Engine

All scoring functions are deterministic - same inputs produce same outputs.
No AI/LLM is used in this module. Missing or malformed fields contribute
zero points plus an explanatory factor; nothing here raises for valid models.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from .config import (
    CAPS, CATEGORY_POINTS, CATEGORY_BUCKETS,
    BUDGET_BANDS, BUDGET_OVERSIZED_RATIO, BUDGET_OVERSIZED_POINTS,
    BUDGET_MINIMUM_RATIO, BUDGET_MINIMUM_POINTS, BUDGET_BONUS_BAND, BUDGET_BONUS_POINTS,
    GEOGRAPHIC_RULES, POPULATION_SCALE, MISSING_DATA_FACTOR_SUFFIX,
    EXPERIENCE_POINTS, MIN_OPERATING_YEARS, COMPARABLE_AWARD_TOLERANCE,
)
from .models import Client, Grant, GrantSource, MatchScore, ScoreBreakdown
from .parsing import calculate_overlap, extract_max_amount, infer_target_population

logger = logging.getLogger(__name__)


@dataclass
class SubScore:
    """Points awarded by one component plus the factors explaining them."""
    score: float = 0.0
    factors: List[str] = field(default_factory=list)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def category_bucket(category: Optional[str]) -> Optional[str]:
    """Coarse bucket (education, health, ...) a category label falls in."""
    if not category:
        return None
    lowered = category.lower()
    for bucket in CATEGORY_BUCKETS:
        if bucket in lowered:
            return bucket
    return None


def _same_text(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a and b and a.strip().lower() == b.strip().lower())


def calculate_category_score(client: Client, grant: Grant, source: GrantSource) -> SubScore:
    """
    Calculate category alignment (0-30).

    Formula:
    - +15 if client category equals the source category
    - +10 if client category equals the grant category,
      else +5 if both fall in the same coarse bucket
    - + focus-area overlap * 0.05, at most 5
    """
    result = SubScore()

    if not client.category:
        result.factors.append("Category information incomplete")
    else:
        if _same_text(client.category, source.category):
            result.score += CATEGORY_POINTS["source_match"]
            result.factors.append(f"Perfect category alignment with {source.name}")

        if _same_text(client.category, grant.category):
            result.score += CATEGORY_POINTS["grant_match"]
            result.factors.append(f"Grant category matches {client.category} focus")
        else:
            bucket = category_bucket(client.category)
            if bucket and bucket == category_bucket(grant.category):
                result.score += CATEGORY_POINTS["bucket_match"]
                result.factors.append(f"Related {bucket} funding area")

    overlap = calculate_overlap(client.focus_areas, grant.focus_areas)
    if overlap["common"]:
        result.score += min(
            overlap["score"] * CATEGORY_POINTS["focus_overlap_scale"],
            CATEGORY_POINTS["focus_overlap_max"],
        )
        result.factors.append(f"Shared focus on {', '.join(overlap['common'])}")

    result.score = min(result.score, CAPS["category"])
    logger.debug(f"Category score: {result.score:.2f} ({'; '.join(result.factors) or 'no alignment'})")
    return result


def calculate_budget_score(client: Client, grant: Grant) -> SubScore:
    """
    Calculate budget alignment (0-25) from budget / maximum grant amount.

    Formula:
    - ratio in [0.8, 1.5]: 20
    - ratio in [0.5, 2.0]: 15
    - ratio > 2.0: 5 (organization larger than the grant)
    - ratio >= 0.3: 8
    - otherwise: 0
    - +5 bonus when ratio is in [0.9, 1.1]
    """
    grant_amount = extract_max_amount(grant.amount)
    if not client.budget or client.budget <= 0 or not grant_amount:
        logger.debug("Budget score: 0 (missing budget or grant amount)")
        return SubScore(0.0, ["Budget information incomplete"])

    ratio = client.budget / grant_amount
    result = SubScore()

    excellent_low, excellent_high, excellent_points = BUDGET_BANDS["excellent"]
    good_low, good_high, good_points = BUDGET_BANDS["good"]
    if excellent_low <= ratio <= excellent_high:
        result.score = excellent_points
        result.factors.append("Ideal budget alignment")
    elif good_low <= ratio <= good_high:
        result.score = good_points
        result.factors.append("Reasonable budget range")
    elif ratio > BUDGET_OVERSIZED_RATIO:
        result.score = BUDGET_OVERSIZED_POINTS
        result.factors.append("Organization budget exceeds grant size; consider a partnership approach")
    elif ratio >= BUDGET_MINIMUM_RATIO:
        result.score = BUDGET_MINIMUM_POINTS
        result.factors.append("Budget below grant scale")
    else:
        result.factors.append("Insufficient organizational capacity for grant size")

    bonus_low, bonus_high = BUDGET_BONUS_BAND
    if bonus_low <= ratio <= bonus_high:
        result.score += BUDGET_BONUS_POINTS
        result.factors.append("Budget closely matches grant amount")

    result.score = min(result.score, CAPS["budget"])
    logger.debug(f"Budget score: ratio {ratio:.2f}, score = {result.score:.2f}")
    return result


def calculate_geographic_score(client: Client, source: GrantSource) -> SubScore:
    """
    Calculate geographic compatibility (0-20) from the client's service area
    and the source's type/scope.
    """
    if not client.service_area:
        logger.debug("Geographic score: 0 (no service area)")
        return SubScore(0.0, ["Service area information incomplete"])

    scope = client.service_area.strip().lower()
    rules = GEOGRAPHIC_RULES.get(scope)
    if rules is None:
        logger.debug(f"Geographic score: 0 (unknown service area '{client.service_area}')")
        return SubScore(0.0, [f"Service area '{client.service_area}' not recognized"])

    source_kind = " ".join(filter(None, [source.type, source.scope])).lower()
    for keywords, points in rules:
        if not keywords or any(keyword in source_kind for keyword in keywords):
            score = min(points, CAPS["geographic"])
            logger.debug(f"Geographic score: {scope} vs '{source_kind}', score = {score}")
            return SubScore(float(score), [f"Geographic compatibility ({scope} service area)"])

    logger.debug(f"Geographic score: {scope} vs '{source_kind}', score = 0")
    return SubScore(0.0, [f"Limited geographic fit for a {scope} organization"])


def calculate_population_score(client: Client, grant: Grant) -> SubScore:
    """
    Calculate target population alignment (0-15).

    Formula: min(overlap(client populations, inferred grant populations) * 0.15, 15)
    """
    if not client.target_population:
        return SubScore(0.0, ["Target population information incomplete"])

    grant_population = infer_target_population(grant.eligibility, grant.description)
    overlap = calculate_overlap(client.target_population, grant_population)
    score = min(overlap["score"] * POPULATION_SCALE, CAPS["population"])

    if overlap["common"]:
        factors = [f"Target population match: {', '.join(overlap['common'])}"]
    else:
        factors = ["Limited target population overlap"]

    logger.debug(f"Population score: {score:.2f} (grant serves {', '.join(grant_population)})")
    return SubScore(score, factors)


def calculate_experience_score(client: Client, grant: Grant, source: GrantSource) -> SubScore:
    """
    Calculate previous-experience bonus (0-10).

    Formula:
    - +6 if a previous grant mentions the source or grant category
    - +2 for 3+ operating years
    - +2 if a previous award is within +/-50% of this grant's amount
    """
    result = SubScore()

    history = [g.lower() for g in client.previous_grants if g]
    categories = [c.lower() for c in (source.category, grant.category) if c]
    if any(category in entry for entry in history for category in categories):
        result.score += EXPERIENCE_POINTS["category_history"]
        result.factors.append("Relevant previous grant experience")

    if client.operating_years is not None and client.operating_years >= MIN_OPERATING_YEARS:
        result.score += EXPERIENCE_POINTS["operating_years"]
        result.factors.append(f"Established organization ({client.operating_years} years operating)")

    grant_amount = extract_max_amount(grant.amount)
    if grant_amount:
        for entry in client.previous_grants:
            previous_amount = extract_max_amount(entry)
            if previous_amount and abs(previous_amount - grant_amount) <= grant_amount * COMPARABLE_AWARD_TOLERANCE:
                result.score += EXPERIENCE_POINTS["comparable_award"]
                result.factors.append("Prior award of comparable size")
                break

    if not client.previous_grants and client.operating_years is None:
        result.factors.append("No grant history provided")

    result.score = min(result.score, CAPS["experience"])
    logger.debug(f"Experience score: {result.score:.2f}")
    return result


def calculate_match_score(client: Client, grant: Grant, source: GrantSource) -> MatchScore:
    """
    Calculate the final 0-100 compatibility score using all components.

    Args:
        client: Grantee organization profile
        grant: Grant opportunity being evaluated
        source: Funder offering the grant

    Returns:
        MatchScore with total, per-component breakdown and factors
    """
    components = [
        ("category", calculate_category_score(client, grant, source)),
        ("budget", calculate_budget_score(client, grant)),
        ("geographic", calculate_geographic_score(client, source)),
        ("population", calculate_population_score(client, grant)),
        ("experience", calculate_experience_score(client, grant, source)),
    ]

    breakdown = ScoreBreakdown(**{name: round(sub.score, 2) for name, sub in components})
    total = max(0, min(round_half_up(sum(breakdown.values())), 100))

    factors = [factor for _, sub in components for factor in sub.factors]
    highlights = [
        factor for _, sub in components if sub.score > 0
        for factor in sub.factors
        if factor and not factor.endswith(MISSING_DATA_FACTOR_SUFFIX)
    ]

    logger.info(f"Match score for '{client.name}' <> '{grant.title}': {total}")
    return MatchScore(total=total, breakdown=breakdown, factors=factors, highlights=highlights)
