"""
Parsing helpers shared by the scorers.

Every function here is total: malformed input yields ``None`` or an empty
result instead of an exception.
"""

import logging
import math
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from .config import DEFAULT_POPULATION, MISSION_WORD_MIN_LENGTH, POPULATION_KEYWORDS

logger = logging.getLogger(__name__)

# "$50,000", "$1,500,000.00" and comma-less "$500000"
AMOUNT_PATTERN = re.compile(r"\$(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{2})?")

WORD_STRIP_CHARS = ",.;:!?()[]{}\"'"


def extract_max_amount(amount_text: Optional[str]) -> Optional[float]:
    """
    Return the largest dollar amount found in a free-text funding field.

    Examples:
        "$50,000 - $500,000" -> 500000.0
        "Up to $1,000,000"   -> 1000000.0
        "varies"             -> None
    """
    if not amount_text or not isinstance(amount_text, str):
        return None

    try:
        amounts = [
            float(match.replace("$", "").replace(",", ""))
            for match in AMOUNT_PATTERN.findall(amount_text)
        ]
    except ValueError as e:
        logger.debug(f"Could not parse amount '{amount_text}': {e}")
        return None

    if not amounts:
        return None
    return max(amounts)


def parse_amount(value: Any) -> Optional[float]:
    """Coerce a numeric or currency-like value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _finite(value)
    if not isinstance(value, str):
        return None

    cleaned = value.strip().replace("$", "").replace(",", "")
    if not cleaned:
        return None
    try:
        return _finite(float(cleaned))
    except ValueError:
        return _finite(extract_max_amount(value))


def _finite(value: Optional[float]) -> Optional[float]:
    # Infinity, NaN and integers too large for a float are treated as missing
    if value is None:
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    return value if math.isfinite(value) else None


def parse_deadline(value: Any) -> Optional[date]:
    """Coerce an ISO date/datetime string (or date object) to a date, or None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        logger.debug(f"Unparsable deadline '{value}'")
        return None


def clean_list(values: Optional[Iterable[str]]) -> List[str]:
    """Drop blank entries and surrounding whitespace."""
    if not values:
        return []
    return [v.strip() for v in values if isinstance(v, str) and v.strip()]


def calculate_overlap(
    items_a: Optional[Iterable[str]],
    items_b: Optional[Iterable[str]],
) -> Dict[str, Any]:
    """
    Score how much of list A is covered by list B (0-100).

    An item of A is "common" when it contains, or is contained in, any item
    of B (case-insensitive). The denominator is the longer list, so the
    result is not symmetric: only A is filtered.

    Returns:
        {"score": float, "common": List[str]}
    """
    list_a = clean_list(items_a)
    list_b = clean_list(items_b)
    if not list_a or not list_b:
        return {"score": 0.0, "common": []}

    lowered_b = [b.lower() for b in list_b]
    common = [
        a for a in list_a
        if any(a.lower() in b or b in a.lower() for b in lowered_b)
    ]
    score = len(common) / max(len(list_a), len(list_b)) * 100
    return {"score": score, "common": common}


def infer_target_population(*texts: Optional[str]) -> List[str]:
    """
    Infer population labels from grant eligibility/description text.

    Falls back to ["General Public"] when no keyword is found.
    """
    haystack = " ".join(t for t in texts if t).lower()
    labels: List[str] = []
    for keyword, label in POPULATION_KEYWORDS.items():
        if keyword in haystack and label not in labels:
            labels.append(label)
    return labels or [DEFAULT_POPULATION]


def significant_words(text: Optional[str]) -> Set[str]:
    """Lowercase words long enough to carry meaning."""
    if not text:
        return set()
    words = set()
    for token in text.lower().split():
        cleaned = token.strip(WORD_STRIP_CHARS)
        if len(cleaned) >= MISSION_WORD_MIN_LENGTH:
            words.add(cleaned)
    return words


def days_until_deadline(deadline: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Whole days from today to the deadline (negative once it has passed)."""
    if deadline is None:
        return None
    today = today or date.today()
    return (deadline - today).days
