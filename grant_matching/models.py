from __future__ import annotations

from datetime import date
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .parsing import parse_amount, parse_deadline


class MatchingModel(BaseModel):
    """Accepts camelCase (dashboard wire format) or snake_case keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _as_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return value


class Client(MatchingModel):
    """A grantee organization profile."""
    id: Optional[str] = None
    name: str = "Unnamed organization"
    mission: Optional[str] = None
    category: Optional[str] = None
    budget: Optional[float] = None
    service_area: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("serviceArea", "service_area", "location"),
        serialization_alias="serviceArea",
    )
    target_population: List[str] = Field(default_factory=list)
    focus_areas: List[str] = Field(default_factory=list)
    previous_grants: List[str] = Field(default_factory=list)
    operating_years: Optional[int] = None

    @field_validator("budget", mode="before")
    @classmethod
    def coerce_budget(cls, v: Any) -> Optional[float]:
        return parse_amount(v)

    @field_validator("operating_years", mode="before")
    @classmethod
    def coerce_operating_years(cls, v: Any) -> Optional[int]:
        amount = parse_amount(v)
        return int(amount) if amount is not None else None

    @field_validator("target_population", "focus_areas", "previous_grants", mode="before")
    @classmethod
    def coerce_lists(cls, v: Any) -> Any:
        return _as_list(v)


class Grant(MatchingModel):
    """A single funding opportunity offered by a source."""
    id: Optional[str] = None
    title: str = "Untitled grant"
    category: Optional[str] = None
    amount: Optional[str] = None
    deadline: Optional[date] = None
    eligibility: Optional[str] = None
    description: Optional[str] = None
    focus_areas: List[str] = Field(default_factory=list)
    status: Optional[str] = None

    @field_validator("deadline", mode="before")
    @classmethod
    def coerce_deadline(cls, v: Any) -> Optional[date]:
        return parse_deadline(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Optional[str]:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            amount = parse_amount(v)
            return f"${amount:,.0f}" if amount is not None else None
        return v

    @field_validator("eligibility", mode="before")
    @classmethod
    def join_eligibility(cls, v: Any) -> Optional[str]:
        if isinstance(v, list):
            return ", ".join(str(item) for item in v)
        return v

    @field_validator("focus_areas", mode="before")
    @classmethod
    def coerce_lists(cls, v: Any) -> Any:
        return _as_list(v)


class GrantSource(MatchingModel):
    """A funder and the grant opportunities it currently offers."""
    id: Optional[str] = None
    name: str = "Unknown source"
    type: Optional[str] = None
    scope: Optional[str] = None
    category: Optional[str] = None
    grants: List[Grant] = Field(default_factory=list)

    @field_validator("grants", mode="before")
    @classmethod
    def coerce_grants(cls, v: Any) -> Any:
        return _as_list(v)


class ScoreBreakdown(MatchingModel):
    category: float = 0.0
    budget: float = 0.0
    geographic: float = 0.0
    population: float = 0.0
    experience: float = 0.0

    def values(self) -> List[float]:
        return [self.category, self.budget, self.geographic, self.population, self.experience]


class MatchScore(MatchingModel):
    total: int = Field(ge=0, le=100)
    breakdown: ScoreBreakdown
    factors: List[str] = Field(default_factory=list)
    # Factors of positively scored components, in component order
    highlights: List[str] = Field(default_factory=list, exclude=True)


class TimelineStep(MatchingModel):
    step: str
    due: str
    status: str = "pending"


class FitAnalysis(MatchingModel):
    strengths: List[str] = Field(default_factory=list)
    considerations: List[str] = Field(default_factory=list)


class MatchResult(MatchingModel):
    grant: Grant
    source: GrantSource
    match_score: MatchScore
    match_label: str
    match_reasons: List[str] = Field(default_factory=list)
    fit_analysis: FitAnalysis = Field(default_factory=FitAnalysis)
    timeline: List[TimelineStep] = Field(default_factory=list)
    action_steps: List[str] = Field(default_factory=list)


class UpcomingDeadline(MatchingModel):
    grant: str
    source: str
    deadline: date
    days_remaining: int


class AggregateAnalysis(MatchingModel):
    client_strengths: List[str] = Field(default_factory=list)
    improvement_areas: List[str] = Field(default_factory=list)
    match_factors: List[str] = Field(default_factory=list)
    summary: str = ""
    upcoming_deadlines: List[UpcomingDeadline] = Field(default_factory=list)


class MatchAnalysis(MatchingModel):
    matches: List[MatchResult] = Field(default_factory=list)
    analysis: AggregateAnalysis


class Recommendations(MatchingModel):
    priority: List[MatchResult] = Field(default_factory=list)
    time_sensitive: List[MatchResult] = Field(default_factory=list)
    strategic: List[MatchResult] = Field(default_factory=list)
    total_potential_funding: float = 0.0


class ClientAnalysis(MatchingModel):
    client_id: Optional[str] = None
    client_name: str
    best_score: int = 0
    result: MatchAnalysis
