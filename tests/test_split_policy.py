# tests/test_split_policy.py
from chunk_pipeline.application.services.split_policy import split_unit_ranges
from chunk_pipeline.domain.entities.chunk_range import ChunkRange


def test_splits_into_ordered_unit_ranges():
    parts = split_unit_ranges(ChunkRange(1, 4))
    assert parts == [ChunkRange(1, 2), ChunkRange(2, 3), ChunkRange(3, 4)]


def test_unit_range_returned_unchanged():
    unit = ChunkRange(5, 6)
    parts = split_unit_ranges(unit)
    assert parts == [unit]
    assert parts[0] is unit


def test_empty_range_yields_no_work():
    assert split_unit_ranges(ChunkRange(2, 2)) == []


def test_parts_partition_the_range():
    for start, stop in [(1, 2), (1, 11), (7, 40)]:
        parts = split_unit_ranges(ChunkRange(start, stop))
        assert len(parts) == stop - start
        assert all(p.width == 1 for p in parts)
        covered = [p.start for p in parts]
        assert covered == list(range(start, stop))
        # consecutive: each part starts where the previous stopped
        assert all(a.stop == b.start for a, b in zip(parts, parts[1:]))
