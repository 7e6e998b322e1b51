"""
Human-readable insights attached to each match: reasons, fit analysis,
application timeline and recommended next steps.
"""

import logging
from datetime import date
from typing import List, Optional

from .config import (
    ACTION_THRESHOLDS, DEFAULT_DEADLINE_DAYS, DEFAULT_SCORE_LABEL, FIT_THRESHOLDS,
    MAX_FACTOR_REASONS, MISSION_SHARED_WORDS, SCORE_LABELS, TIMELINE_MILESTONES,
)
from .models import Client, FitAnalysis, Grant, GrantSource, MatchScore, TimelineStep
from .parsing import days_until_deadline, extract_max_amount, significant_words
from .scoring_engine import round_half_up

logger = logging.getLogger(__name__)

BASELINE_ACTION_STEPS = [
    "Review full RFP requirements",
    "Gather required documentation",
    "Schedule planning meeting with team",
]


def score_label(total: int) -> str:
    for minimum, label in SCORE_LABELS:
        if total >= minimum:
            return label
    return DEFAULT_SCORE_LABEL


def get_match_reasons(client: Client, grant: Grant, match_score: MatchScore) -> List[str]:
    """
    Up to four reasons: the first three factors of positively scored
    components in component order (missing-data notes skipped), plus a
    mission reason when the client's mission and the grant description
    share at least two significant words.
    """
    reasons = list(match_score.highlights[:MAX_FACTOR_REASONS])

    shared = sorted(significant_words(client.mission) & significant_words(grant.description))
    if len(shared) >= MISSION_SHARED_WORDS:
        reasons.append(f"Mission aligns with grant goals ({', '.join(shared[:3])})")

    return reasons


def _milestone_offsets(days: int) -> List[int]:
    offsets = [max(minimum, round_half_up(days * fraction)) for _, minimum, fraction in TIMELINE_MILESTONES]
    offsets[-1] = days
    count = len(offsets)

    if days < count:
        # Not enough days for distinct milestones; squeeze towards the deadline.
        return [max(0, min(offset, days - (count - 1 - i))) for i, offset in enumerate(offsets)]

    for i in range(1, count):
        offsets[i] = max(offsets[i], offsets[i - 1] + 1)
    for i in range(count):
        offsets[i] = min(offsets[i], days - (count - 1 - i))
    return offsets


def generate_timeline(deadline: Optional[date], today: Optional[date] = None) -> List[TimelineStep]:
    """
    Build application milestones counting back from the deadline.

    A missing deadline is planned as if it were a year out; a passed
    deadline yields a single closed entry.
    """
    days = days_until_deadline(deadline, today)
    if days is None:
        days = DEFAULT_DEADLINE_DAYS
    elif days < 0:
        return [TimelineStep(step="Deadline passed", due="0 days", status="closed")]

    return [
        TimelineStep(step=step, due=f"{offset} days")
        for (step, _, _), offset in zip(TIMELINE_MILESTONES, _milestone_offsets(days))
    ]


def generate_action_steps(
    match_score: MatchScore,
    deadline: Optional[date],
    today: Optional[date] = None,
) -> List[str]:
    steps = list(BASELINE_ACTION_STEPS)
    breakdown = match_score.breakdown

    if breakdown.experience < ACTION_THRESHOLDS["experience"]:
        steps.append("Develop case studies demonstrating relevant capacity")

    if breakdown.budget < ACTION_THRESHOLDS["budget"]:
        steps.append("Explore partnerships or fiscal sponsorship to match the grant scale")

    days = days_until_deadline(deadline, today)
    if days is None:
        days = DEFAULT_DEADLINE_DAYS
    if days < ACTION_THRESHOLDS["urgent_days"]:
        steps.append("Expedite proposal development process")
        steps.append("Assign a dedicated grant writer to meet the deadline")

    if breakdown.population < ACTION_THRESHOLDS["population"]:
        steps.append("Adapt program design to the funder's target population")

    return steps


def analyze_fit(
    client: Client,
    grant: Grant,
    source: GrantSource,
    match_score: MatchScore,
    today: Optional[date] = None,
) -> FitAnalysis:
    """Summarize the organization's strengths and open considerations for one grant."""
    fit = FitAnalysis()
    grant_amount = extract_max_amount(grant.amount)

    if client.category and source.category and client.category.lower() == source.category.lower():
        fit.strengths.append("Perfect mission alignment")
    if grant_amount and client.budget and client.budget >= grant_amount * FIT_THRESHOLDS["capacity_ratio"]:
        fit.strengths.append("Strong financial capacity")
    if match_score.breakdown.experience > 0:
        fit.strengths.append("Proven track record in this area")

    if grant_amount and client.budget and client.budget < grant_amount * FIT_THRESHOLDS["partner_ratio"]:
        fit.considerations.append("May need additional funding partners")
    days = days_until_deadline(grant.deadline, today)
    if days is not None and 0 <= days < FIT_THRESHOLDS["tight_timeline_days"]:
        fit.considerations.append("Tight application timeline")
    if days is not None and days < 0:
        fit.considerations.append("Deadline has passed; watch for the next funding cycle")

    return fit
