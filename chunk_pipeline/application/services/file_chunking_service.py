"""
Application service: split files into chunks across a pool of workers.

Business decisions owned here:
  - Planning: each file's range is computed and split into unit ranges once,
    before any work item is handed to a worker.
  - Distribution: one pool task per unit range; a worker owns its range and
    claim tracker exclusively.  At most a small window of work items is in
    flight, so memory stays bounded by the pool size, not by the file sizes.
  - Streaming: every chunk is handed to the caller's sink as soon as its work
    item completes and is not kept afterwards.
  - Failure isolation: a failed work item is reported, not retried, and never
    affects the chunks produced by other work items.

IBlobStore and IEventEmitter are injected; no imports from boto3 or any other
external library appear here.
"""

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Optional

from chunk_pipeline.application.services.chunk_range_calculator import calculate_chunk_range
from chunk_pipeline.application.services.split_policy import split_unit_ranges
from chunk_pipeline.application.use_cases.process_unit_range import (
    ProcessUnitRangeUseCase,
    WorkItem,
)
from chunk_pipeline.application.use_cases.read_chunk import ReadChunkUseCase
from chunk_pipeline.domain.entities.chunk_range import ChunkRange
from chunk_pipeline.domain.entities.file_chunk import Chunk, FileDescriptor
from chunk_pipeline.domain.ports.blob_store_port import IBlobStore
from chunk_pipeline.domain.ports.observability_port import IEventEmitter, NullEventEmitter

ChunkSink = Callable[[Chunk], None]


@dataclass(frozen=True)
class UnitFailure:
    file_name: str
    unit_range: ChunkRange
    error: BaseException


@dataclass
class FileStats:
    chunks: int = 0
    bytes: int = 0


@dataclass
class ChunkingReport:
    """Counts per file and failed work items; chunk payloads are never kept."""

    files: dict[str, FileStats] = field(default_factory=dict)
    failures: list[UnitFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def stats_for(self, file_name: str) -> FileStats:
        return self.files.get(file_name, FileStats())


class FileChunkingService:
    DEFAULT_MAX_WORKERS: int = 8
    # work items in flight per worker thread
    WINDOW_PER_WORKER: int = 2

    def __init__(
        self,
        blob_store: IBlobStore,
        chunk_size: int,
        max_workers: int = DEFAULT_MAX_WORKERS,
        events: Optional[IEventEmitter] = None,
    ) -> None:
        if max_workers <= 0:
            raise ValueError(f"max_workers must be > 0, got {max_workers}")
        self._events = events or NullEventEmitter()
        self._reader = ReadChunkUseCase(blob_store, chunk_size, events=self._events)
        self._processor = ProcessUnitRangeUseCase(self._reader)
        self._chunk_size = chunk_size
        self._max_workers = max_workers

    def plan(self, file: FileDescriptor) -> list[WorkItem]:
        """Compute and split the chunk range of *file* into unit work items."""
        full_range = calculate_chunk_range(file.size_bytes, self._chunk_size)
        self._events.emit(
            "chunk_range.planned",
            file=file.name,
            size_bytes=file.size_bytes,
            start=full_range.start,
            stop=full_range.stop,
            chunk_size=self._chunk_size,
        )
        return [WorkItem(file, unit) for unit in split_unit_ranges(full_range)]

    def plan_all(self, files: Iterable[FileDescriptor]) -> list[WorkItem]:
        items: list[WorkItem] = []
        for file in files:
            items.extend(self.plan(file))
        return items

    def run(self, files: Iterable[FileDescriptor], sink: ChunkSink) -> ChunkingReport:
        """Chunk every file in *files*, passing each chunk to *sink*.

        Every file is planned before the first work item is submitted.  *sink*
        is called from the calling thread, in completion order (not index
        order); an exception raised by *sink* stops the run and propagates.
        """
        items = self.plan_all(files)
        report = ChunkingReport()
        for item in items:
            report.files.setdefault(item.file.name, FileStats())
        if not items:
            return report

        pending_items = iter(items)
        in_flight: dict[Future, WorkItem] = {}
        window = self._max_workers * self.WINDOW_PER_WORKER

        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            self._fill(pool, pending_items, in_flight, window)
            while in_flight:
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    item = in_flight.pop(future)
                    self._collect(future, item, report, sink)
                self._fill(pool, pending_items, in_flight, window)
        return report

    def _fill(
        self,
        pool: ThreadPoolExecutor,
        pending_items: Iterator[WorkItem],
        in_flight: dict[Future, WorkItem],
        window: int,
    ) -> None:
        while len(in_flight) < window:
            item = next(pending_items, None)
            if item is None:
                return
            in_flight[pool.submit(self._processor.execute, item)] = item

    def _collect(
        self,
        future: Future,
        item: WorkItem,
        report: ChunkingReport,
        sink: ChunkSink,
    ) -> None:
        try:
            chunks = future.result()
        except Exception as exc:
            report.failures.append(UnitFailure(item.file.name, item.unit_range, exc))
            self._events.emit(
                "chunk.unit_failed",
                file=item.file.name,
                start=item.unit_range.start,
                stop=item.unit_range.stop,
                error=repr(exc),
            )
            return

        stats = report.files[item.file.name]
        for chunk in chunks:
            sink(chunk)
            stats.chunks += 1
            stats.bytes += len(chunk)
