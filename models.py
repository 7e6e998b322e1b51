from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from grant_matching.models import Client, ClientAnalysis, Grant, GrantSource, MatchingModel


class ScoreRequest(BaseModel):
    client: Client
    grant: Grant
    source: GrantSource


class AnalyzeRequest(BaseModel):
    client: Optional[Client] = None
    sources: List[GrantSource] = Field(default_factory=list)
    qualification_threshold: Optional[int] = Field(
        default=None,
        ge=0,
        le=100,
        description="Override the minimum score for a grant to count as a match",
    )


class PortfolioRequest(BaseModel):
    clients: List[Client] = Field(default_factory=list)
    sources: List[GrantSource] = Field(default_factory=list)
    qualification_threshold: Optional[int] = Field(default=None, ge=0, le=100)


class PortfolioResponse(MatchingModel):
    results: List[ClientAnalysis]
    clients_analyzed: int
    processing_time: str


class Settings(BaseModel):
    model_config = ConfigDict(protected_namespaces=())
    qualification_threshold: int = 40
    rate_limit_requests_per_minute: int = 60
    max_grants_per_request: int = 1000
    log_level: str = "INFO"
