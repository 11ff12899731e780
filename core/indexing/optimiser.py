# Path: core/indexing/optimiser.py
# Purpose: Generate optimised and preview derivatives for a whole index in parallel.
# Layer: core/indexing.
# Details: Fan-out/fan-in worker pool over typed work items; the caller blocks until the batch completes.

from __future__ import annotations

import logging
import os
import queue
import threading
from typing import Dict, List, Optional

from core.models.domain import Dimensions, ImageEntry, WorkItem, WorkResult

from .resize import VariantGenerator

logger = logging.getLogger(__name__)

# Closes the job queue for one worker.
_STOP = None


class Optimiser:
    """Apply a VariantGenerator to every entry of an index mapping.

    Each worker derives two variants per entry, both from the original
    full-size file. A failure for one entry is logged and that entry is
    returned without derivatives; the batch always completes.
    """

    def __init__(
        self,
        generator: VariantGenerator,
        optimised_size: Dimensions,
        preview_size: Dimensions,
        workers: Optional[int] = None,
    ) -> None:
        self.generator = generator
        self.optimised_size = optimised_size
        self.preview_size = preview_size
        self.workers = workers or os.cpu_count() or 1

    def optimise_entry(self, entry: ImageEntry) -> ImageEntry:
        """Return a copy of ``entry`` with its derivative paths filled in where generation succeeded."""

        markers = self.generator.markers
        optimised = self.generator.derive(entry.original_path, markers.optimised, self.optimised_size)
        preview = self.generator.derive(entry.original_path, markers.preview, self.preview_size)
        return entry.with_derivatives(
            optimised_path=optimised if optimised != entry.original_path else "",
            preview_path=preview if preview != entry.original_path else "",
        )

    def optimise_all(self, entries: Dict[str, ImageEntry]) -> Dict[str, ImageEntry]:
        """Optimise every entry and merge the results back into ``entries`` by name.

        The mapping is updated in place and also returned. Nothing is merged
        until every submitted item has produced a result.
        """

        if not entries:
            return entries

        jobs: "queue.Queue[Optional[WorkItem]]" = queue.Queue()
        results: "queue.Queue[WorkResult]" = queue.Queue(maxsize=len(entries))

        for name, entry in entries.items():
            jobs.put(WorkItem(name=name, entry=entry))

        worker_count = min(self.workers, len(entries))
        for _ in range(worker_count):
            jobs.put(_STOP)

        threads: List[threading.Thread] = []
        for index in range(worker_count):
            thread = threading.Thread(
                target=self._work, args=(jobs, results), name=f"optimiser-{index}", daemon=True
            )
            thread.start()
            threads.append(thread)

        collected = [results.get() for _ in range(len(entries))]
        for thread in threads:
            thread.join()

        for result in collected:
            entries[result.name] = result.entry

        optimised = sum(1 for entry in entries.values() if entry.is_optimised())
        logger.info("optimised %d of %d images using %d workers", optimised, len(entries), worker_count)
        return entries

    def _work(self, jobs: "queue.Queue[Optional[WorkItem]]", results: "queue.Queue[WorkResult]") -> None:
        while True:
            item = jobs.get()
            if item is _STOP:
                return
            try:
                entry = self.optimise_entry(item.entry)
            except Exception:
                logger.exception("failed to optimise %s", item.name)
                entry = item.entry
            results.put(WorkResult(name=item.name, entry=entry))
