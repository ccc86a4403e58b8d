"""EvaluationBatchRunner: resolves open trade recommendations.

One pass: select eligible recommendations → claim each → fetch its candle
window → classify → persist. Collaborators are passed in, so the runner can
be driven by the scheduler, an HTTP call or tests with fakes.

A record that fails (fetch error, no data, bad data, timeout) is logged and
left open for the next pass; it never aborts the batch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from quantcore.errors import EmptySeriesError, MalformedDataError, ProviderError
from quantcore.models import Market, Outcome, OutcomeUpdate, TradeRecommendation, validate_series
from quantcore.outcome import EXPIRY, classify_outcome, is_expired
from quantcore.protocols import CandleProvider, RecommendationStore
from quantdesk.clients.polygon_rest import resolve_provider_symbol
from quantdesk.config import Settings

logger = logging.getLogger(__name__)

SymbolResolver = Callable[[str, Market], str]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BatchCounters:
    """Aggregate result of one evaluation pass."""

    processed: int = 0
    target_hits: int = 0
    stop_hits: int = 0
    expired: int = 0
    failed: int = 0
    skipped: int = 0

    def record(self, outcome: Outcome) -> None:
        self.processed += 1
        if outcome == Outcome.TARGET_HIT:
            self.target_hits += 1
        elif outcome == Outcome.STOP_HIT:
            self.stop_hits += 1
        elif outcome == Outcome.EXPIRED:
            self.expired += 1

    def to_dict(self) -> dict[str, int]:
        return {
            "processed": self.processed,
            "targetHits": self.target_hits,
            "stopHits": self.stop_hits,
            "expired": self.expired,
            "failed": self.failed,
            "skipped": self.skipped,
        }


class EvaluationBatchRunner:
    """Drive the outcome classifier over a bounded batch of recommendations."""

    def __init__(
        self,
        store: RecommendationStore,
        provider: CandleProvider,
        symbol_resolver: SymbolResolver = resolve_provider_symbol,
        batch_limit: int = 50,
        min_age_hours: float = 1.0,
        expiry: timedelta = EXPIRY,
        fetch_timeout: float = 20.0,
        clock: Clock = utc_now,
    ):
        self._store = store
        self._provider = provider
        self._resolve_symbol = symbol_resolver
        self.batch_limit = batch_limit
        self.min_age_hours = min_age_hours
        self.expiry = expiry
        self.fetch_timeout = fetch_timeout
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: RecommendationStore,
        provider: CandleProvider,
    ) -> EvaluationBatchRunner:
        """Build a runner with limits taken from application settings."""
        return cls(
            store=store,
            provider=provider,
            batch_limit=settings.batch_limit,
            min_age_hours=settings.min_age_hours,
            expiry=timedelta(days=settings.expiry_days),
            # Whole-fetch bound, above the HTTP client's per-request timeout
            fetch_timeout=settings.request_timeout_seconds + 5.0,
        )

    async def evaluate_batch(self) -> BatchCounters:
        """Run one evaluation pass and return its counters."""
        start_time = time.time()
        counters = BatchCounters()

        recommendations = await self._store.select_eligible(
            limit=self.batch_limit, older_than_hours=self.min_age_hours
        )
        logger.info(f"Found {len(recommendations)} open recommendations to check")

        for rec in recommendations:
            try:
                update = await self._evaluate_one(rec)
            except (ProviderError, EmptySeriesError, MalformedDataError) as e:
                counters.failed += 1
                logger.warning(f"Recommendation {rec.id} ({rec.symbol}) left open: {e}")
                continue
            except asyncio.TimeoutError:
                counters.failed += 1
                logger.warning(
                    f"Recommendation {rec.id} ({rec.symbol}) left open: "
                    f"candle fetch timed out after {self.fetch_timeout}s"
                )
                continue
            except Exception:
                counters.failed += 1
                logger.error(f"Error processing recommendation {rec.id}", exc_info=True)
                continue

            if update is None:
                counters.skipped += 1
                continue

            counters.record(update.outcome)
            if update.is_terminal and update.outcome != Outcome.EXPIRED:
                logger.info(
                    f"Recommendation {rec.id}: {update.outcome.value} at "
                    f"{update.outcome_price} ({update.pnl_percentage:.2f}% PnL)"
                )
            else:
                logger.info(f"Recommendation {rec.id}: {update.outcome.value}")

        elapsed = time.time() - start_time
        logger.info(
            f"Evaluation pass completed in {elapsed:.1f}s. Processed: {counters.processed}, "
            f"Targets: {counters.target_hits}, Stops: {counters.stop_hits}, "
            f"Expired: {counters.expired}, Failed: {counters.failed}, "
            f"Skipped: {counters.skipped}"
        )
        return counters

    async def _evaluate_one(self, rec: TradeRecommendation) -> OutcomeUpdate | None:
        """Claim, classify and persist one recommendation.

        Returns None when another pass claimed the record first.
        """
        now = self._clock()
        if not await self._store.claim(rec.id, rec.checked_at, now):
            logger.info(f"Recommendation {rec.id} claimed by another run, skipping")
            return None

        if is_expired(rec, now, self.expiry):
            update = classify_outcome(rec, [], now, self.expiry)
        else:
            symbol = self._resolve_symbol(rec.symbol, rec.market)
            candles = await asyncio.wait_for(
                self._provider.get_candles(symbol, rec.timeframe, rec.created_at, now),
                timeout=self.fetch_timeout,
            )
            if not candles:
                raise EmptySeriesError(f"no candles for {symbol} {rec.timeframe}")
            validate_series(candles)
            update = classify_outcome(rec, candles, now, self.expiry)

        await self._store.update_outcome(rec.id, update.to_patch())
        return update
