"""
Application service: how many chunks a file of a given size yields.

Business decision owned here: every file, including an empty one, yields at
least one claimable chunk so downstream consumers always see a record for it.
The count is the exact ceiling of size / chunk_size, so a file whose size is
a multiple of the chunk size gets exactly size / chunk_size full chunks.
"""

from chunk_pipeline.domain.entities.chunk_range import ChunkRange


def chunk_count(size_bytes: int, chunk_size: int) -> int:
    """Return max(1, ceil(size_bytes / chunk_size)) using integer arithmetic.

    Raises:
        ValueError: if *size_bytes* is negative or *chunk_size* is not positive.
    """
    if size_bytes < 0:
        raise ValueError(f"size_bytes must be >= 0, got {size_bytes}")
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
    return max(1, -(-size_bytes // chunk_size))


def calculate_chunk_range(size_bytes: int, chunk_size: int) -> ChunkRange:
    """Return the full claimable range [1, chunk_count + 1) for one file."""
    return ChunkRange(1, chunk_count(size_bytes, chunk_size) + 1)
