"""
Domain entity for a half-open interval of 1-based chunk indices.
A ChunkRange is the assignable unit of work handed to one worker.
Zero external dependencies: pure Python dataclass only.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ChunkRange:
    start: int
    stop: int

    def __post_init__(self) -> None:
        if self.start < 1:
            raise ValueError(f"start must be >= 1, got {self.start}")
        if self.stop < self.start:
            raise ValueError(
                f"stop must be >= start, got [{self.start}, {self.stop})"
            )

    @property
    def width(self) -> int:
        return self.stop - self.start

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index < self.stop

    def __str__(self) -> str:
        return f"[{self.start}, {self.stop})"
