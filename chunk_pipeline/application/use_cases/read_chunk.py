"""
Use-case: read one claimed chunk of a file.
Depends only on Domain ports and entities; no infrastructure imports.

The read is a pure function of (file name, offset, length), so re-reading the
same index of an unchanged file always returns the same bytes and a failed
read can simply be retried by the caller.
"""

from typing import BinaryIO, Optional

from chunk_pipeline.domain.entities.file_chunk import Chunk, FileDescriptor
from chunk_pipeline.domain.ports.blob_store_port import IBlobStore
from chunk_pipeline.domain.ports.observability_port import IEventEmitter, NullEventEmitter


class ReadChunkUseCase:
    def __init__(
        self,
        blob_store: IBlobStore,
        chunk_size: int,
        events: Optional[IEventEmitter] = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
        self._blob_store = blob_store
        self._chunk_size = chunk_size
        self._events = events or NullEventEmitter()

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def execute(self, file: FileDescriptor, index: int) -> Chunk:
        """Read chunk *index* (1-based) of *file*.

        The read handle is opened and released inside this call, on success
        and on failure alike.

        Raises:
            ValueError: if *index* is < 1.
            Any exception propagated from IBlobStore while opening or reading.
        """
        if index < 1:
            raise ValueError(f"chunk index must be >= 1, got {index}")
        offset = (index - 1) * self._chunk_size
        with self._blob_store.open_reader(file.name, size=file.size_bytes) as reader:
            reader.seek(offset)
            data = self._read_up_to(reader, self._chunk_size)

        self._events.emit(
            "chunk.read",
            file=file.name,
            index=index,
            offset=offset,
            length=len(data),
        )
        return Chunk(file_name=file.name, index=index, data=data)

    @staticmethod
    def _read_up_to(reader: BinaryIO, size: int) -> bytes:
        # read() may return short before EOF; keep going until size or EOF.
        parts: list[bytes] = []
        remaining = size
        while remaining > 0:
            part = reader.read(remaining)
            if not part:
                break
            parts.append(part)
            remaining -= len(part)
        return b"".join(parts)
