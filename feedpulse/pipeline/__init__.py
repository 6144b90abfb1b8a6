"""Ingestion pipeline: orchestration, scheduling and feed previews."""

from .orchestrator import CycleState, CycleSummary, IngestionOrchestrator, SourceOutcome, create_orchestrator
from .preview import FeedPreview, PreviewItem, preview_feed
from .scheduler import IngestionScheduler

__all__ = [
    "CycleState",
    "CycleSummary",
    "FeedPreview",
    "IngestionOrchestrator",
    "IngestionScheduler",
    "PreviewItem",
    "SourceOutcome",
    "create_orchestrator",
    "preview_feed",
]
