"""Batch orchestration and the folder-to-file pipeline."""
from snapsheet.processing.orchestrator import BatchOrchestrator, summarize_batch
from snapsheet.processing.pipeline import export_table, run_pipeline
from snapsheet.processing.status import StatusTracker

__all__ = [
    "BatchOrchestrator",
    "StatusTracker",
    "export_table",
    "run_pipeline",
    "summarize_batch",
]
