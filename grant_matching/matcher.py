"""
Main Matcher Module

Orchestrates the complete matching process:
1. Score every grant of every source against the client
2. Keep grants at or above the qualification threshold, with reasons,
   fit analysis, timeline and action steps
3. Summarize the results at the client level
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from .analysis import build_aggregate_analysis
from .config import QUALIFICATION_THRESHOLD
from .insights import analyze_fit, generate_action_steps, generate_timeline, get_match_reasons, score_label
from .models import Client, ClientAnalysis, Grant, GrantSource, MatchAnalysis, MatchResult
from .scoring_engine import calculate_match_score

logger = logging.getLogger(__name__)


def build_match_result(
    client: Client,
    grant: Grant,
    source: GrantSource,
    today: Optional[date] = None,
) -> MatchResult:
    """Score one grant and attach all explanations."""
    match_score = calculate_match_score(client, grant, source)
    return MatchResult(
        grant=grant,
        source=source,
        match_score=match_score,
        match_label=score_label(match_score.total),
        match_reasons=get_match_reasons(client, grant, match_score),
        fit_analysis=analyze_fit(client, grant, source, match_score, today),
        timeline=generate_timeline(grant.deadline, today),
        action_steps=generate_action_steps(match_score, grant.deadline, today),
    )


def analyze(
    client: Optional[Client],
    sources: Optional[Iterable[GrantSource]],
    qualification_threshold: int = QUALIFICATION_THRESHOLD,
    today: Optional[date] = None,
) -> MatchAnalysis:
    """
    Find the grants a client qualifies for.

    This is the main entry point for the matching system. It never raises
    for absent input: with no client or no grants the result has no matches
    and a fallback analysis.

    Args:
        client: Grantee organization profile
        sources: Grant sources with their grant opportunities
        qualification_threshold: Minimum total score for a grant to be kept
        today: Reference date for deadline math (defaults to today)

    Returns:
        MatchAnalysis with matches sorted by score (highest first)

    Example:
        >>> result = analyze(client, sources)
        >>> for match in result.matches:
        >>>     print(f"{match.grant.title}: {match.match_score.total}")
    """
    sources = list(sources or [])
    total_grants = sum(len(source.grants) for source in sources)

    if client is None or total_grants == 0:
        logger.info("Nothing to match: missing client or no grant opportunities")
        return build_empty_result(client, total_grants, today, qualification_threshold)

    logger.info(f"Matching '{client.name}' against {total_grants} grants from {len(sources)} sources")

    matches: List[MatchResult] = []
    for source in sources:
        for grant in source.grants:
            result = build_match_result(client, grant, source, today)
            if result.match_score.total >= qualification_threshold:
                matches.append(result)

    # Sort by match score (highest first)
    matches.sort(key=lambda m: m.match_score.total, reverse=True)

    analysis = build_aggregate_analysis(
        client, matches, total_grants, today, qualification_threshold
    )

    logger.info(f"MATCHING COMPLETE - {len(matches)}/{total_grants} grants qualified for '{client.name}'")
    return MatchAnalysis(matches=matches, analysis=analysis)


def build_empty_result(
    client: Optional[Client],
    total_grants: int,
    today: Optional[date],
    qualification_threshold: int,
) -> MatchAnalysis:
    return MatchAnalysis(
        matches=[],
        analysis=build_aggregate_analysis(client, [], total_grants, today, qualification_threshold),
    )


def analyze_portfolio(
    clients: Iterable[Client],
    sources: Iterable[GrantSource],
    qualification_threshold: int = QUALIFICATION_THRESHOLD,
    today: Optional[date] = None,
) -> List[ClientAnalysis]:
    """
    Match every client against the same sources.

    Returns:
        One ClientAnalysis per client, sorted by best match score (highest first)
    """
    clients = list(clients or [])
    sources = list(sources or [])
    logger.info(f"Matching {len(clients)} clients against {len(sources)} sources")

    results = []
    for i, client in enumerate(clients, 1):
        logger.info(f"Processing client {i}/{len(clients)}: {client.name}")
        result = analyze(client, sources, qualification_threshold, today)
        best = result.matches[0].match_score.total if result.matches else 0
        results.append(ClientAnalysis(
            client_id=client.id,
            client_name=client.name,
            best_score=best,
            result=result,
        ))

    results.sort(key=lambda r: r.best_score, reverse=True)

    if results:
        logger.info(f"Top client match: {results[0].client_name} ({results[0].best_score})")
    return results
