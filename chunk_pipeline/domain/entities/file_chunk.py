"""
Domain entities for files split into fixed-size byte chunks.
Zero external dependencies: pure Python dataclasses only.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FileDescriptor:
    name: str
    size_bytes: int

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be >= 0, got {self.size_bytes}")


@dataclass(frozen=True)
class Chunk:
    """One bounded byte range of a file, addressed by a 1-based index."""

    file_name: str
    index: int
    data: bytes

    def __len__(self) -> int:
        return len(self.data)
