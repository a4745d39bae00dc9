"""
Port (interface) for random-access file storage.
Infrastructure adapters (e.g. LocalFileStore, S3BlobStore) must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, ContextManager, Iterator, Optional

from chunk_pipeline.domain.entities.file_chunk import FileDescriptor


class IBlobStore(ABC):
    @abstractmethod
    def list_files(self) -> Iterator[FileDescriptor]:
        """Yield a descriptor (name + size) for every file the store exposes."""
        ...

    @abstractmethod
    def open_reader(self, name: str, size: Optional[int] = None) -> ContextManager[BinaryIO]:
        """Open a seekable read handle for *name*.

        *size* is the file size when the caller already knows it (files are
        immutable); adapters may use it to skip a metadata lookup.

        The returned object is used as a context manager; leaving the block
        must release the handle whether or not the read succeeded.

        Raises:
            OSError (or an adapter-specific error) if the file cannot be opened.
        """
        ...
