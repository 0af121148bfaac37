from __future__ import annotations
"""Application use case fetching many import paths with bounded concurrency."""

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
import logging
from pathlib import Path
import threading
from typing import Sequence

from goget_tool.application.use_cases.fetch_package import FetchPackageUseCase
from goget_tool.domain.entities import BatchSummary, FetchOutcome
from goget_tool.domain.errors import GogetError


LOGGER = logging.getLogger(__name__)

MAX_CONCURRENT_FETCHES = 10


class FetchCancelledError(GogetError):
    """Recorded for items that never started because the batch was cancelled."""


@dataclass(slots=True)
class BatchFetcher:
    """Run the single-fetch pipeline for every import path.

    At most `max_workers` fetches run at once. Each worker writes only its own
    result slot, so the returned outcomes follow input order. A failing item
    is recorded and never cancels its siblings; only an interrupt does.
    """

    fetcher: FetchPackageUseCase
    max_workers: int = MAX_CONCURRENT_FETCHES
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def run_all(
        self,
        import_paths: Sequence[str],
        root: str | Path | None,
        working_dir: str | Path,
        use_https: bool,
    ) -> BatchSummary:
        """Fetch `import_paths` and return one outcome per path, in input order.

        On `KeyboardInterrupt` the cancel event is set, running git processes
        are terminated, pending items never launch git, and the interrupt is
        re-raised once every worker has stopped.
        """
        total = len(import_paths)
        results: list[FetchOutcome | None] = [None] * total
        console = self.fetcher.console
        worker_count = max(1, min(self.max_workers, MAX_CONCURRENT_FETCHES))

        LOGGER.info(
            "batch fetch started",
            extra={"event": "batch.start", "count": total, "max_workers": worker_count},
        )

        def worker(index: int, import_path: str) -> None:
            position = f"[{index + 1}/{total}]"
            if self.cancel_event.is_set():
                results[index] = FetchOutcome(
                    import_path=import_path,
                    error=FetchCancelledError(f"fetch of {import_path} cancelled before start"),
                )
                return

            console.line(f"\n{position} Fetching {import_path}...")
            try:
                outcome = self.fetcher.fetch(
                    import_path,
                    root,
                    working_dir,
                    use_https,
                    cancel_event=self.cancel_event,
                )
            except Exception as error:  # noqa: BLE001
                LOGGER.error(
                    "dependency fetch failed",
                    extra={"event": "batch.item.failed", "import_path": import_path, "error": str(error)},
                )
                outcome = FetchOutcome(import_path=import_path, error=error)
            results[index] = outcome

            if outcome.error is not None:
                console.line(f"{position} ERROR: Failed to fetch {import_path}: {outcome.error}")
            elif outcome.skipped:
                console.line(f"{position} SKIPPED: {import_path}")
            elif self.fetcher.dry_run:
                console.line(f"{position} PLANNED: {import_path} (dry run, git not invoked)")
            else:
                console.line(f"{position} SUCCESS: Fetched {import_path}")

        executor = ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="goget-fetch")
        try:
            futures = [executor.submit(worker, index, path) for index, path in enumerate(import_paths)]
            wait(futures)
        except KeyboardInterrupt:
            LOGGER.warning("batch fetch interrupted; cancelling workers", extra={"event": "batch.cancelled"})
            self.cancel_event.set()
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            executor.shutdown(wait=True)

        outcomes = tuple(
            outcome
            if outcome is not None
            else FetchOutcome(import_path=path, error=FetchCancelledError(f"fetch of {path} did not run"))
            for outcome, path in zip(results, import_paths)
        )
        summary = BatchSummary(outcomes=outcomes, dry_run=self.fetcher.dry_run)

        LOGGER.info(
            "batch fetch completed",
            extra={
                "event": "batch.completed",
                "count": summary.total,
                "fetched": summary.fetched_count,
                "skipped": summary.skipped_count,
                "failed": len(summary.failed),
            },
        )
        return summary
