"""
Deterministic Grant-Client Matching System

Scores grant opportunities against a grantee organization profile:
1. Five rule-based components (category, budget, geography, population, experience)
2. Reasons, fit analysis, application timeline and next steps per match
3. Client-level strengths, gaps and recommendations

Usage:
    from grant_matching import analyze

    result = analyze(client, sources)
    print(f"{len(result.matches)} matches")
"""

from .analysis import build_recommendations
from .config import CAPS, QUALIFICATION_THRESHOLD
from .matcher import analyze, analyze_portfolio
from .models import (
    AggregateAnalysis,
    Client,
    ClientAnalysis,
    Grant,
    GrantSource,
    MatchAnalysis,
    MatchResult,
    MatchScore,
    Recommendations,
)
from .scoring_engine import calculate_match_score

__all__ = [
    "analyze",
    "analyze_portfolio",
    "build_recommendations",
    "calculate_match_score",
    "CAPS",
    "QUALIFICATION_THRESHOLD",
    "AggregateAnalysis",
    "Client",
    "ClientAnalysis",
    "Grant",
    "GrantSource",
    "MatchAnalysis",
    "MatchResult",
    "MatchScore",
    "Recommendations",
]
__version__ = "1.0.0"
