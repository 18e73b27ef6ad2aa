"""Concurrent image scanning: fetch, decode and classify under a worker cap.

Every reference becomes one task. A task holds an admission gate slot for its
whole lifetime; the slot is taken and returned by a `with` block so no exit
path (success, skip or error) can leak it. Progress numbers are assigned when
tasks are submitted, so they follow input order even though tasks finish in
any order.
"""

import sys
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Callable, Iterable, Optional, TextIO

from tqdm import tqdm

from ..api.fetcher import FetchError, ImageFetcher, ReadError
from ..config import ScanConfig
from .classifier import classify
from .metadata import DecodedMetadata, NoMetadataError, decode_metadata
from .models import ImageReference, ScanResult, ScanSummary
from .report import (
    render_fetch_failure,
    render_finding,
    render_progress,
    render_read_failure,
)


class AdmissionGate:
    """Counting semaphore with scoped acquisition and usage counters.

    Usage:
        gate = AdmissionGate(8)
        with gate:
            ...  # at most 8 threads in here at once
    """

    def __init__(self, limit: int):
        if limit < 1:
            raise ValueError(f"gate limit must be at least 1, got {limit}")
        self.limit = limit
        self._slots = threading.BoundedSemaphore(limit)
        self._lock = threading.Lock()
        self.in_flight = 0
        self.peak = 0
        self.acquired = 0
        self.released = 0

    def __enter__(self) -> "AdmissionGate":
        self._slots.acquire()
        with self._lock:
            self.acquired += 1
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        with self._lock:
            self.in_flight -= 1
            self.released += 1
        self._slots.release()
        return False


class Console:
    """Line-oriented output shared by all workers.

    Lines from one call are written together; lines from different workers
    never interleave mid-line. Output goes through tqdm so an active
    progress bar is redrawn below it.
    """

    def __init__(self, file: Optional[TextIO] = None):
        self.file = file
        self._lock = threading.Lock()

    def write(self, *lines: str) -> None:
        with self._lock:
            for line in lines:
                tqdm.write(line, file=self.file or sys.stdout)


class TaskStatus(str, Enum):
    CLASSIFIED = "classified"
    FETCH_FAILED = "fetch_failed"
    NO_METADATA = "no_metadata"


class ScanPipeline:
    """Scans image references for sensitive EXIF metadata."""

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        fetcher: Optional[ImageFetcher] = None,
        decoder: Optional[Callable[[bytes], DecodedMetadata]] = None,
        console: Optional[Console] = None,
        gate: Optional[AdmissionGate] = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Run settings (concurrency, verbosity, link prefixes)
            fetcher: Object with fetch(url) -> bytes raising FetchError
            decoder: Callable bytes -> metadata map raising NoMetadataError
            console: Output sink (default: stdout)
            gate: Admission gate; defaults to one sized to config.concurrency
        """
        self.config = config or ScanConfig()
        self.fetcher = fetcher or ImageFetcher(
            timeout=self.config.fetch_timeout,
            user_agent=self.config.user_agent,
        )
        self.decode = decoder or decode_metadata
        self.console = console or Console()
        self.gate = gate or AdmissionGate(self.config.concurrency)

    def run(self, references: Iterable[ImageReference]) -> ScanSummary:
        """Scan every reference and block until all tasks have finished.

        Returns:
            ScanSummary with one result per successfully decoded image, in
            input order, plus failure counts
        """
        references = list(references)
        total = len(references)
        summary = ScanSummary(total=total)
        if not references:
            return summary

        outcomes: list[tuple[TaskStatus, Optional[ScanResult]]] = []
        with tqdm(
            total=total,
            desc="Scanning",
            unit="img",
            leave=False,
            disable=not self.config.show_progress,
        ) as bar:
            with ThreadPoolExecutor(
                max_workers=self.config.concurrency,
                thread_name_prefix="exif-scan",
            ) as executor:
                futures = [
                    executor.submit(self._run_task, index, ref, total)
                    for index, ref in enumerate(references, start=1)
                ]
                for future in as_completed(futures):
                    outcomes.append(future.result())
                    bar.update(1)

        for status, result in outcomes:
            if status is TaskStatus.CLASSIFIED:
                summary.results.append(result)
            elif status is TaskStatus.FETCH_FAILED:
                summary.fetch_failures += 1
            else:
                summary.no_metadata += 1
        summary.results.sort(key=lambda r: r.index)
        return summary

    def _run_task(
        self,
        index: int,
        ref: ImageReference,
        total: int,
    ) -> tuple[TaskStatus, Optional[ScanResult]]:
        with self.gate:
            self.console.write(render_progress(index, total, ref.url, self.config.color))
            try:
                return self._scan_one(index, ref)
            except Exception as e:
                self.console.write(f"    ❌ Error scanning {ref.url}: {e}")
                return TaskStatus.FETCH_FAILED, None

    def _scan_one(
        self,
        index: int,
        ref: ImageReference,
    ) -> tuple[TaskStatus, Optional[ScanResult]]:
        color = self.config.color

        try:
            data = self.fetcher.fetch(ref.url)
        except ReadError:
            self.console.write(render_read_failure(ref.url, color))
            return TaskStatus.FETCH_FAILED, None
        except FetchError:
            self.console.write(render_fetch_failure(ref.url, color))
            return TaskStatus.FETCH_FAILED, None

        try:
            metadata = self.decode(data)
        except NoMetadataError:
            return TaskStatus.NO_METADATA, None

        classification = classify(metadata)
        result = ScanResult(
            index=index,
            post_id=ref.post_id,
            url=ref.url,
            sensitive=classification.sensitive,
            gps=classification.gps,
            readings=classification.readings,
        )
        if result.sensitive:
            self.console.write(*render_finding(
                result,
                permalink_base=self.config.permalink_base,
                map_base=self.config.map_base,
                verbose=self.config.verbose,
                color=color,
            ))
        return TaskStatus.CLASSIFIED, result


def scan(
    references: Iterable[ImageReference],
    config: Optional[ScanConfig] = None,
    **kwargs,
) -> ScanSummary:
    """Run a ScanPipeline over references (see ScanPipeline for kwargs)."""
    return ScanPipeline(config, **kwargs).run(references)
