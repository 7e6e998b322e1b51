"""
Client-level analysis over a set of match results.

Rule-based text generation: counts of strong matches, grant history,
budget size and funder diversity decide which statements are emitted.
"""

import logging
from datetime import date
from typing import List, Optional

from .config import ANALYSIS_THRESHOLDS, NO_DATA_MESSAGE, QUALIFICATION_THRESHOLD, RECOMMENDATION_THRESHOLDS
from .models import AggregateAnalysis, Client, MatchResult, Recommendations, UpcomingDeadline
from .parsing import days_until_deadline, extract_max_amount

logger = logging.getLogger(__name__)


def empty_analysis() -> AggregateAnalysis:
    """Fallback analysis when there is no client or nothing to match against."""
    return AggregateAnalysis(
        client_strengths=[NO_DATA_MESSAGE],
        improvement_areas=[NO_DATA_MESSAGE],
        match_factors=[NO_DATA_MESSAGE],
        summary=NO_DATA_MESSAGE,
    )


def _count_at_least(matches: List[MatchResult], minimum: int) -> int:
    return sum(1 for m in matches if m.match_score.total >= minimum)


def analyze_client_strengths(client: Client, matches: List[MatchResult]) -> List[str]:
    strengths = []

    excellent = _count_at_least(matches, ANALYSIS_THRESHOLDS["excellent"])
    if excellent > 1:
        strengths.append("Excellent alignment with multiple high-value opportunities")
    elif excellent == 1:
        strengths.append("Excellent alignment with a high-value opportunity")

    if len(client.previous_grants) >= ANALYSIS_THRESHOLDS["track_record_grants"]:
        strengths.append("Strong track record of successful grant acquisition")

    if client.budget and client.budget >= ANALYSIS_THRESHOLDS["large_budget"]:
        strengths.append("Substantial organizational capacity for large grants")

    if not strengths:
        if matches:
            strengths.append(f"Eligible for {len(matches)} funding opportunit{'y' if len(matches) == 1 else 'ies'}")
        else:
            strengths.append("No opportunities met the qualification score yet; strengths will show as matches emerge")
    return strengths


def analyze_improvement_areas(client: Client, matches: List[MatchResult]) -> List[str]:
    areas = []

    if not _count_at_least(matches, ANALYSIS_THRESHOLDS["excellent"]):
        areas.append("Consider expanding program areas to access more funding opportunities")

    if not client.previous_grants:
        areas.append("Build grant writing capacity and track record")

    if client.budget is not None and client.budget < ANALYSIS_THRESHOLDS["small_budget"]:
        areas.append("Grow operating budget to compete for larger awards")

    if not client.target_population:
        areas.append("Document the populations served to strengthen population alignment")

    if not areas:
        if matches:
            areas.append("Maintain current positioning; no major gaps identified")
        else:
            areas.append("Broaden eligibility to reach the qualification score")
    return areas


def analyze_match_factors(client: Client, matches: List[MatchResult]) -> List[str]:
    factors = []

    category = (client.category or "").lower()
    if category and any((m.source.category or "").lower() == category for m in matches):
        factors.append(f"Strong presence in {client.category} funding space")

    if client.budget:
        major = [
            m for m in matches
            if (extract_max_amount(m.grant.amount) or 0) > 0
            and client.budget >= extract_max_amount(m.grant.amount) * ANALYSIS_THRESHOLDS["major_grant_ratio"]
        ]
        if major:
            factors.append("Well-positioned for major grants")

    source_types = sorted({m.source.type for m in matches if m.source.type})
    if len(source_types) > 1:
        factors.append(f"Diverse funding mix across {len(source_types)} source types")
    elif len(source_types) == 1:
        factors.append(f"Matches concentrated in {source_types[0].replace('_', ' ')} funders")

    if not factors:
        if matches:
            factors.append("Matches driven by general eligibility")
        else:
            factors.append("No grant opportunities met the qualification score")
    return factors


def upcoming_deadlines(matches: List[MatchResult], today: Optional[date] = None) -> List[UpcomingDeadline]:
    """The earliest deadlines among matches that are still open."""
    upcoming = []
    for match in matches:
        days = days_until_deadline(match.grant.deadline, today)
        if days is None or days < 0:
            continue
        upcoming.append(UpcomingDeadline(
            grant=match.grant.title,
            source=match.source.name,
            deadline=match.grant.deadline,
            days_remaining=days,
        ))
    upcoming.sort(key=lambda d: d.deadline)
    return upcoming[:ANALYSIS_THRESHOLDS["upcoming_deadlines"]]


def summarize(
    client: Client,
    matches: List[MatchResult],
    total_grants: int,
    qualification_threshold: int = QUALIFICATION_THRESHOLD,
) -> str:
    if not matches:
        return (
            f"None of the {total_grants} grant opportunities reviewed for {client.name} "
            f"met the qualification score of {qualification_threshold}."
        )
    strong = _count_at_least(matches, ANALYSIS_THRESHOLDS["strong"])
    best = matches[0]
    return (
        f"{client.name} qualifies for {len(matches)} of {total_grants} grant opportunities; "
        f"{strong} scored {ANALYSIS_THRESHOLDS['strong']} or higher. "
        f"Top match: {best.grant.title} ({best.source.name}) at {best.match_score.total}."
    )


def build_aggregate_analysis(
    client: Optional[Client],
    matches: List[MatchResult],
    total_grants: int,
    today: Optional[date] = None,
    qualification_threshold: int = QUALIFICATION_THRESHOLD,
) -> AggregateAnalysis:
    if client is None or total_grants == 0:
        return empty_analysis()

    analysis = AggregateAnalysis(
        client_strengths=analyze_client_strengths(client, matches),
        improvement_areas=analyze_improvement_areas(client, matches),
        match_factors=analyze_match_factors(client, matches),
        summary=summarize(client, matches, total_grants, qualification_threshold),
        upcoming_deadlines=upcoming_deadlines(matches, today),
    )
    logger.debug(f"Aggregate analysis for '{client.name}': {analysis.summary}")
    return analysis


def build_recommendations(matches: List[MatchResult], today: Optional[date] = None) -> Recommendations:
    """
    Group matches into a funding strategy:
    priority (score 80+), time-sensitive (deadline within 90 days)
    and strategic (awards of $1M or more).
    """
    priority = sorted(
        (m for m in matches if m.match_score.total >= RECOMMENDATION_THRESHOLDS["priority_score"]),
        key=lambda m: m.match_score.total,
        reverse=True,
    )[:RECOMMENDATION_THRESHOLDS["priority_limit"]]

    time_sensitive = []
    for match in matches:
        days = days_until_deadline(match.grant.deadline, today)
        if days is not None and 0 <= days <= RECOMMENDATION_THRESHOLDS["time_sensitive_days"]:
            time_sensitive.append(match)
    time_sensitive.sort(key=lambda m: m.grant.deadline)

    strategic = sorted(
        (
            m for m in matches
            if (extract_max_amount(m.grant.amount) or 0) >= RECOMMENDATION_THRESHOLDS["strategic_amount"]
        ),
        key=lambda m: extract_max_amount(m.grant.amount),
        reverse=True,
    )

    total = sum(extract_max_amount(m.grant.amount) or 0 for m in matches)
    return Recommendations(
        priority=priority,
        time_sensitive=time_sensitive,
        strategic=strategic,
        total_potential_funding=total,
    )
