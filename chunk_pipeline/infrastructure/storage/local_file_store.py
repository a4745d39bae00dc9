"""
Infrastructure adapter: local filesystem directory → IBlobStore.

File names are paths relative to the store root, with POSIX separators, so the
same name works on every platform and in chunk output paths.
"""

from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from chunk_pipeline.domain.entities.file_chunk import FileDescriptor
from chunk_pipeline.domain.ports.blob_store_port import IBlobStore


class LocalFileStore(IBlobStore):
    """Serves the regular files found under a directory."""

    def __init__(self, root: str | Path, pattern: str = "**/*") -> None:
        self._root = Path(root).resolve()
        if not self._root.is_dir():
            raise NotADirectoryError(f"Not a directory: {self._root}")
        self._pattern = pattern

    @property
    def root(self) -> Path:
        return self._root

    def list_files(self) -> Iterator[FileDescriptor]:
        for path in sorted(self._root.glob(self._pattern)):
            if path.is_file():
                yield FileDescriptor(
                    name=path.relative_to(self._root).as_posix(),
                    size_bytes=path.stat().st_size,
                )

    def open_reader(self, name: str, size: Optional[int] = None) -> BinaryIO:
        return open(self._resolve(name), "rb")

    def _resolve(self, name: str) -> Path:
        path = (self._root / name).resolve()
        if not path.is_relative_to(self._root):
            raise ValueError(f"{name!r} points outside of {self._root}")
        return path
