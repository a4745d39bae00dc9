"""
Application service: exactly-once claiming of indices within one ChunkRange.

A tracker is owned by a single worker for the lifetime of one work item and
is never shared, so it holds no lock.  Claims strictly increase and no index
is handed out twice; once the range is used up the tracker stays exhausted.
"""

from typing import Iterator, Optional

from chunk_pipeline.domain.entities.chunk_range import ChunkRange


class RangeClaimTracker:
    def __init__(self, chunk_range: ChunkRange) -> None:
        self._range = chunk_range
        self._last_claimed: Optional[int] = None

    @property
    def current_range(self) -> ChunkRange:
        return self._range

    @property
    def last_claimed(self) -> Optional[int]:
        return self._last_claimed

    @property
    def is_exhausted(self) -> bool:
        return self._next_candidate() >= self._range.stop

    def claim_next(self) -> Optional[int]:
        """Claim the next index in the range.

        Returns:
            The claimed index, or None once the range is exhausted.  Calling
            again after exhaustion keeps returning None.
        """
        candidate = self._next_candidate()
        if candidate >= self._range.stop:
            return None
        self._last_claimed = candidate
        return candidate

    def __iter__(self) -> Iterator[int]:
        while True:
            index = self.claim_next()
            if index is None:
                return
            yield index

    def __repr__(self) -> str:
        return f"RangeClaimTracker(range={self._range}, last_claimed={self._last_claimed})"

    def _next_candidate(self) -> int:
        if self._last_claimed is None:
            return self._range.start
        return self._last_claimed + 1
