from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from grant_matching import (
    MatchAnalysis,
    MatchScore,
    Recommendations,
    __version__,
    analyze,
    analyze_portfolio,
    build_recommendations,
    calculate_match_score,
)
from grant_matching.models import GrantSource
from models import AnalyzeRequest, PortfolioRequest, PortfolioResponse, ScoreRequest, Settings


# Load environment from the working directory .env and the project .env if present
load_dotenv()
load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env", override=False)

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("grant_funds.api")


app = FastAPI(title="Grant Funds Matching API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# In-memory stores
LAST_REQUESTS_BY_IP: Dict[str, List[float]] = {}


def get_settings() -> Settings:
    return Settings(
        qualification_threshold=int(os.getenv("QUALIFICATION_THRESHOLD", "40")),
        rate_limit_requests_per_minute=int(os.getenv("RATE_LIMIT_RPM", "60")),
        max_grants_per_request=int(os.getenv("MAX_GRANTS_PER_REQUEST", "1000")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


async def rate_limit(request: Request, settings: Settings = Depends(get_settings)):
    ip = request.client.host if request.client else "unknown"
    window = 60.0
    max_req = settings.rate_limit_requests_per_minute
    now = time.time()
    # drop clients idle for a full window
    for idle_ip in [k for k, stamps in LAST_REQUESTS_BY_IP.items() if not stamps or now - stamps[-1] > window]:
        del LAST_REQUESTS_BY_IP[idle_ip]
    bucket = LAST_REQUESTS_BY_IP.setdefault(ip, [])
    # prune
    while bucket and now - bucket[0] > window:
        bucket.pop(0)
    if len(bucket) >= max_req:
        raise HTTPException(status_code=429, detail="Rate limit exceeded")
    bucket.append(now)


def check_request_size(sources: List[GrantSource], settings: Settings) -> None:
    total_grants = sum(len(source.grants) for source in sources)
    if total_grants > settings.max_grants_per_request:
        raise HTTPException(
            status_code=413,
            detail=f"Too many grants in one request ({total_grants} > {settings.max_grants_per_request})",
        )


def resolve_threshold(override: Optional[int], settings: Settings) -> int:
    return override if override is not None else settings.qualification_threshold


@app.get("/")
async def root():
    return {"status": "ok", "version": __version__}


@app.post("/api/matching/score", response_model=MatchScore, dependencies=[Depends(rate_limit)])
async def score_grant(request: ScoreRequest):
    """Score a single grant opportunity against a client profile."""
    try:
        return calculate_match_score(request.client, request.grant, request.source)
    except Exception as e:
        logger.error(f"Scoring failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/api/matching/analyze", response_model=MatchAnalysis, dependencies=[Depends(rate_limit)])
async def analyze_client(request: AnalyzeRequest, settings: Settings = Depends(get_settings)):
    """
    Score every grant of every source against the client and return the
    qualifying matches with a client-level analysis.
    """
    check_request_size(request.sources, settings)
    try:
        return analyze(
            request.client,
            request.sources,
            qualification_threshold=resolve_threshold(request.qualification_threshold, settings),
        )
    except Exception as e:
        logger.error(f"Analysis failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/api/matching/recommendations", response_model=Recommendations, dependencies=[Depends(rate_limit)])
async def recommend_grants(request: AnalyzeRequest, settings: Settings = Depends(get_settings)):
    """Priority, time-sensitive and strategic groupings of the client's matches."""
    check_request_size(request.sources, settings)
    try:
        result = analyze(
            request.client,
            request.sources,
            qualification_threshold=resolve_threshold(request.qualification_threshold, settings),
        )
        return build_recommendations(result.matches)
    except Exception as e:
        logger.error(f"Recommendations failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/api/matching/portfolio", response_model=PortfolioResponse, dependencies=[Depends(rate_limit)])
async def match_portfolio(request: PortfolioRequest, settings: Settings = Depends(get_settings)):
    """Match all clients against the same grant sources."""
    check_request_size(request.sources, settings)
    start = time.time()
    try:
        results = analyze_portfolio(
            request.clients,
            request.sources,
            qualification_threshold=resolve_threshold(request.qualification_threshold, settings),
        )
    except Exception as e:
        logger.error(f"Portfolio matching failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    return PortfolioResponse(
        results=results,
        clients_analyzed=len(results),
        processing_time=f"{time.time() - start:.2f}s",
    )


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
