"""
Configuration for the deterministic grant-client matching system.
Adjust caps, thresholds and keyword maps here.
"""

# Component caps (must sum to 100)
CAPS = {
    "category": 30,
    "budget": 25,
    "geographic": 20,
    "population": 15,
    "experience": 10,
}

# Minimum total score for a grant to be reported as a match
QUALIFICATION_THRESHOLD = 40

# Category scoring points
CATEGORY_POINTS = {
    "source_match": 15,
    "grant_match": 10,
    "bucket_match": 5,
    "focus_overlap_scale": 0.05,
    "focus_overlap_max": 5,
}

# Coarse category buckets, matched by substring
CATEGORY_BUCKETS = ["education", "health", "environment", "arts"]

# Budget ratio bands: (low, high, points), checked in order
BUDGET_BANDS = {
    "excellent": (0.8, 1.5, 20),
    "good": (0.5, 2.0, 15),
}
BUDGET_OVERSIZED_RATIO = 2.0  # Organization larger than the grant
BUDGET_OVERSIZED_POINTS = 5
BUDGET_MINIMUM_RATIO = 0.3
BUDGET_MINIMUM_POINTS = 8
BUDGET_BONUS_BAND = (0.9, 1.1)
BUDGET_BONUS_POINTS = 5

# Geographic scoring: client service area -> list of (source keywords, points)
# The first rule whose keyword appears in the source type/scope wins.
# A rule with an empty keyword list always matches.
GEOGRAPHIC_RULES = {
    "national": [([], 18)],
    "regional": [(["private", "regional", "community"], 16), (["government"], 12)],
    "local": [(["community", "local"], 18), (["private"], 10)],
    "statewide": [([], 15)],
}

# Population scoring
POPULATION_SCALE = 0.15

# Keyword (lowercase substring) -> population label
POPULATION_KEYWORDS = {
    "youth": "Youth",
    "senior": "Seniors",
    "low-income": "Low-income households",
    "low income": "Low-income households",
    "bipoc": "BIPOC communities",
    "rural": "Rural populations",
    "indigenous": "Indigenous communities",
    "disabilit": "People with disabilities",
    "veteran": "Veterans",
    "immigrant": "Immigrants",
    "refugee": "Refugees",
    "lgbtq": "LGBTQ+ communities",
    "homeless": "People experiencing homelessness",
}
DEFAULT_POPULATION = "General Public"

# Experience scoring points
EXPERIENCE_POINTS = {
    "category_history": 6,
    "operating_years": 2,
    "comparable_award": 2,
}
MIN_OPERATING_YEARS = 3
COMPARABLE_AWARD_TOLERANCE = 0.5  # +/- 50% of the grant amount

# Reasons
MAX_FACTOR_REASONS = 3
MISSING_DATA_FACTOR_SUFFIX = "information incomplete"  # Never used as a reason
MISSION_WORD_MIN_LENGTH = 5  # Words longer than 4 characters
MISSION_SHARED_WORDS = 2

# Timeline milestones: (step, minimum days, fraction of days until deadline)
TIMELINE_MILESTONES = [
    ("Research & Planning", 3, 0.10),
    ("Proposal Draft", 7, 0.40),
    ("Budget Preparation", 5, 0.60),
    ("Final Review", 3, 0.80),
    ("Submission", 0, 1.00),
]
DEFAULT_DEADLINE_DAYS = 365

# Action step triggers
ACTION_THRESHOLDS = {
    "experience": 5,
    "budget": 10,
    "population": 8,
    "urgent_days": 60,
}

# Score labels, highest first
SCORE_LABELS = [
    (80, "Excellent"),
    (60, "Good"),
    (40, "Fair"),
]
DEFAULT_SCORE_LABEL = "Poor"

# Aggregate analysis thresholds
ANALYSIS_THRESHOLDS = {
    "excellent": 80,
    "strong": 75,
    "track_record_grants": 2,
    "large_budget": 500_000,
    "small_budget": 100_000,
    "major_grant_ratio": 0.7,
    "upcoming_deadlines": 3,
}
NO_DATA_MESSAGE = "No data available"

# Recommendations
RECOMMENDATION_THRESHOLDS = {
    "priority_score": 80,
    "priority_limit": 5,
    "time_sensitive_days": 90,
    "strategic_amount": 1_000_000,
}

# Fit analysis
FIT_THRESHOLDS = {
    "capacity_ratio": 0.5,
    "partner_ratio": 0.3,
    "tight_timeline_days": 60,
}
