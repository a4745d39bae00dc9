"""
Application service: split a chunk range into unit-width ranges.

Splitting happens once per file, right after the initial range is computed
and before any index is claimed, so every unit range can go to a different
worker.
"""

from chunk_pipeline.domain.entities.chunk_range import ChunkRange


def split_unit_ranges(chunk_range: ChunkRange) -> list[ChunkRange]:
    """Return [a, a+1), [a+1, a+2), ..., [b-1, b) for *chunk_range* = [a, b).

    A unit-width range comes back as a one-element list holding the same
    object; an empty range yields no work.
    """
    if chunk_range.width == 1:
        return [chunk_range]
    return [
        ChunkRange(index, index + 1)
        for index in range(chunk_range.start, chunk_range.stop)
    ]
