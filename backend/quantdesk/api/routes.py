"""REST API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from quantcore.errors import EmptySeriesError, MalformedDataError
from quantcore.indicators import compute_indicators
from quantcore.models import Candle
from quantdesk.services import EvaluationBatchRunner
from quantdesk.storage import RecommendationRepository

logger = logging.getLogger(__name__)

router = APIRouter()


# Request / response models
class IndicatorRequest(BaseModel):
    """Candle window to compute indicators for."""

    symbol: str
    timeframe: str = "1h"
    candles: list[Candle]
    live_price: Optional[float] = Field(default=None, gt=0)


class BatchResponse(BaseModel):
    """Counters of one evaluation pass."""

    success: bool = True
    processed: int
    targetHits: int
    stopHits: int
    expired: int
    failed: int
    skipped: int


class ResetResponse(BaseModel):
    success: bool
    message: str
    resetCount: int


class AccuracyResponse(BaseModel):
    symbol: str
    total_analyses: int
    target_hit_count: int
    stop_hit_count: int
    pending_count: int
    expired_count: int
    accuracy_percentage: float
    avg_hours_to_target: Optional[float] = None
    avg_pnl_on_wins: Optional[float] = None


# Dependencies, resolved from app.state (overridden in tests)
def get_runner(request: Request) -> EvaluationBatchRunner:
    return request.app.state.runner


def get_repository(request: Request) -> RecommendationRepository:
    return request.app.state.repository


@router.post("/indicators")
async def post_indicators(body: IndicatorRequest):
    """Compute an indicator snapshot from the supplied candles."""
    logger.info(f"Computing indicators for {body.symbol} ({body.timeframe}, {len(body.candles)} candles)")
    try:
        snapshot = compute_indicators(
            body.candles,
            symbol=body.symbol,
            timeframe=body.timeframe,
            live_price=body.live_price,
        )
    except (EmptySeriesError, MalformedDataError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    return snapshot.to_payload()


@router.post("/trade-outcomes/check", response_model=BatchResponse)
async def check_trade_outcomes(runner: EvaluationBatchRunner = Depends(get_runner)):
    """Run one outcome evaluation pass now."""
    counters = await runner.evaluate_batch()
    return BatchResponse(**counters.to_dict())


@router.post("/trade-outcomes/reset", response_model=ResetResponse)
async def reset_trade_outcomes(repo: RecommendationRepository = Depends(get_repository)):
    """Clear every evaluated outcome to start tracking afresh."""
    count = await repo.reset_outcomes()
    logger.info(f"Reset {count} trade outcomes")
    return ResetResponse(
        success=True,
        message=f"Reset {count} trade outcomes",
        resetCount=count,
    )


@router.get("/accuracy/{symbol}", response_model=AccuracyResponse)
async def get_accuracy(
    symbol: str,
    days: int = Query(30, ge=1, le=365, description="Lookback window in days"),
    repo: RecommendationRepository = Depends(get_repository),
):
    """Historical accuracy of evaluated recommendations for a symbol."""
    accuracy = await repo.get_accuracy(symbol, days=days)
    return AccuracyResponse(**accuracy.to_dict())
