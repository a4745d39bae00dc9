# tests/conftest.py
"""
Shared fakes for the domain ports.

Tests run entirely in-process: files live in tmp_path or in memory, the
publisher records what it was given, and events are collected in a list.
"""

import io
import threading

import pytest

from chunk_pipeline.domain.entities.file_chunk import FileDescriptor
from chunk_pipeline.domain.ports.blob_store_port import IBlobStore
from chunk_pipeline.domain.ports.message_publisher_port import IMessagePublisher
from chunk_pipeline.domain.ports.observability_port import IEventEmitter


class TrackingReader(io.BytesIO):
    """BytesIO that reports its close() to the owning store."""

    def __init__(self, store, name, data, fail_on_read=False):
        super().__init__(data)
        self._store = store
        self._name = name
        self._fail_on_read = fail_on_read

    def read(self, size=-1):
        if self._fail_on_read:
            raise OSError(f"simulated read failure for {self._name}")
        return super().read(size)

    def close(self):
        if not self.closed:
            self._store.record_close(self._name)
        super().close()


class InMemoryBlobStore(IBlobStore):
    def __init__(self, files=None, fail_open=(), fail_read=()):
        self.files = dict(files or {})
        self.fail_open = set(fail_open)
        self.fail_read = set(fail_read)
        self.opened = 0
        self.closed = 0
        self._lock = threading.Lock()

    def list_files(self):
        for name, data in self.files.items():
            yield FileDescriptor(name, len(data))

    def open_reader(self, name, size=None):
        if name in self.fail_open:
            raise OSError(f"simulated open failure for {name}")
        with self._lock:
            self.opened += 1
        return TrackingReader(self, name, self.files[name], fail_on_read=name in self.fail_read)

    def record_close(self, name):
        with self._lock:
            self.closed += 1


class RecordingPublisher(IMessagePublisher):
    def __init__(self):
        self.messages = []

    def publish(self, topic_id, message):
        self.messages.append((topic_id, message))
        return f"msg-{len(self.messages)}"


class CollectingEmitter(IEventEmitter):
    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def emit(self, event, **fields):
        with self._lock:
            self.events.append((event, fields))

    def named(self, event):
        return [fields for name, fields in self.events if name == event]


@pytest.fixture
def emitter():
    return CollectingEmitter()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def make_store():
    return InMemoryBlobStore
