"""Sequential, throttled batch processing of images into table rows."""
from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from snapsheet.core.config import ExtractionContext
from snapsheet.core.models import BatchResult, ProcessingStatus, SourceImage, TableRow
from snapsheet.extraction.client import ExtractionClient
from snapsheet.processing.status import StatusTracker
from snapsheet.reporting.table import TableStore

logger = logging.getLogger(__name__)

TOTAL_FAILURE_MESSAGE = "Failed to process selected images."


def summarize_batch(succeeded: int, total: int, failed: int) -> str:
    """Return the completion message, e.g. ``2 of 3 processed (1 failed).``"""

    suffix = f" ({failed} failed)" if failed else ""
    return f"{succeeded} of {total} processed{suffix}."


class BatchOrchestrator:
    """Run images through the extraction client one at a time.

    A failing image never stops the batch; it is logged and listed in the
    result. Calls are spaced by ``context.request_delay`` seconds to stay under
    the model's request-rate ceiling.
    """

    def __init__(
        self,
        context: ExtractionContext,
        store: Optional[TableStore] = None,
        extractor: Optional[ExtractionClient] = None,
        tracker: Optional[StatusTracker] = None,
    ) -> None:
        self.context = context
        self.store = store if store is not None else TableStore(context.columns)
        self.extractor = extractor or ExtractionClient(context)
        self.tracker = tracker or StatusTracker(context.status_reset_delay, clock=context.clock)

    @property
    def state(self):
        return self.tracker.state

    def run_batch(
        self,
        images: Sequence[SourceImage],
        progress_callback: Optional[Callable[[float], None]] = None,
    ) -> BatchResult:
        """Process ``images`` in order, appending a row per successful extraction."""

        total = len(images)
        result = BatchResult(total=total)
        if not images:
            return result

        logger.info("Starting batch of %d image(s)", total)
        self.tracker.processing(f"Starting processing of {total} image(s)...")

        for index, image in enumerate(images):
            self.tracker.processing(f"Processing {index + 1} of {total}: {image.file_name}")
            try:
                record = self.extractor.extract_image(image, columns=self.context.columns)
            except Exception:
                logger.exception("Error processing %s", image.file_name)
                result.failed.append(image.file_name)
            else:
                row = TableRow(data=record, source_name=image.file_name)
                self.store.append(row)
                result.rows.append(row)

            if progress_callback:
                progress_callback((index + 1) / total)

            if index < total - 1:
                self.context.sleep(self.context.request_delay)

        self._finish(result)
        return result

    def clear_table(self) -> None:
        """Drop every row and return the status to IDLE."""

        self.store.clear()
        self.tracker.reset()

    def _finish(self, result: BatchResult) -> None:
        if result.succeeded:
            message = summarize_batch(result.succeeded, result.total, len(result.failed))
            logger.info("Batch finished: %s", message)
            if result.failed:
                logger.warning("Failed images: %s", ", ".join(result.failed))
            self.tracker.finish(ProcessingStatus.SUCCESS, message)
        else:
            logger.error("Batch failed for all %d image(s)", result.total)
            self.tracker.finish(ProcessingStatus.ERROR, TOTAL_FAILURE_MESSAGE)
