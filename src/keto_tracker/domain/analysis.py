"""Outcome of a food-logging pipeline invocation."""

from dataclasses import dataclass
from enum import StrEnum

from keto_tracker.domain.inference import Modality
from keto_tracker.domain.nutrition import AnalysisResult


class OutcomeStatus(StrEnum):
    OK = "ok"
    NO_ITEMS = "no_items"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisOutcome:
    """User-facing result of analyzing one meal.

    ``message`` is localized and safe to show. ``detail`` keeps the
    underlying error text for diagnostics only.
    """

    modality: Modality
    status: OutcomeStatus
    result: AnalysisResult | None = None
    error_code: str | None = None
    message: str | None = None
    detail: str | None = None
    transcription: str | None = None

    @property
    def success(self) -> bool:
        return self.status is OutcomeStatus.OK
