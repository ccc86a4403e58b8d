"""Business services."""

from quantdesk.services.evaluation_runner import BatchCounters, EvaluationBatchRunner
from quantdesk.services.scheduler import EvaluationScheduler

__all__ = [
    "BatchCounters",
    "EvaluationBatchRunner",
    "EvaluationScheduler",
]
