"""
Use-case: process one work item (a file plus the range assigned to a worker).
Depends only on application services and Domain entities.

A fresh RangeClaimTracker is created per call and driven until exhausted, so
re-running a failed work item starts from a clean claim state.
"""

from dataclasses import dataclass

from chunk_pipeline.application.services.range_claim_tracker import RangeClaimTracker
from chunk_pipeline.application.use_cases.read_chunk import ReadChunkUseCase
from chunk_pipeline.domain.entities.chunk_range import ChunkRange
from chunk_pipeline.domain.entities.file_chunk import Chunk, FileDescriptor


@dataclass(frozen=True)
class WorkItem:
    file: FileDescriptor
    unit_range: ChunkRange


class ProcessUnitRangeUseCase:
    def __init__(self, reader: ReadChunkUseCase) -> None:
        self._reader = reader

    def execute(self, item: WorkItem) -> list[Chunk]:
        tracker = RangeClaimTracker(item.unit_range)
        return [self._reader.execute(item.file, index) for index in tracker]
