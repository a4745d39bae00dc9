"""
Infrastructure adapter: Amazon S3 bucket/prefix → IBlobStore.

S3 has no file handles, so S3ObjectReader emulates a seekable read-only file:
it tracks a position and turns each read() into one ranged GetObject call.
The object size comes from the caller when it is already known (a listing
reports it), otherwise from one lazy HeadObject call.  Knowing it means reads at
or past the end (including every read of an empty object) never issue a ranged
request S3 would reject.
All boto3 details are confined here; the rest of the codebase depends only on
IBlobStore.
"""

import io
import os
from typing import Any, Iterator, Optional

import boto3

from chunk_pipeline.domain.entities.file_chunk import FileDescriptor
from chunk_pipeline.domain.ports.blob_store_port import IBlobStore


class S3ObjectReader:
    """Seekable, read-only view over one S3 object."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        key: str,
        size: Optional[int] = None,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._key = key
        self._size = size
        self._position = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        if self._size is None:
            response = self._client.head_object(Bucket=self._bucket, Key=self._key)
            self._size = int(response["ContentLength"])
        return self._size

    def tell(self) -> int:
        self._check_open()
        return self._position

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        if whence == io.SEEK_SET:
            position = offset
        elif whence == io.SEEK_CUR:
            position = self._position + offset
        elif whence == io.SEEK_END:
            position = self.size + offset
        else:
            raise ValueError(f"invalid whence: {whence}")
        if position < 0:
            raise ValueError(f"negative seek position {position}")
        self._position = position
        return position

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        end = self.size if size is None or size < 0 else min(self._position + size, self.size)
        if end <= self._position:
            return b""

        response = self._client.get_object(
            Bucket=self._bucket,
            Key=self._key,
            Range=f"bytes={self._position}-{end - 1}",
        )
        body = response["Body"]
        try:
            data = body.read()
        finally:
            body.close()
        self._position += len(data)
        return data

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "S3ObjectReader":
        self._check_open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"I/O operation on closed reader for s3://{self._bucket}/{self._key}")


class S3BlobStore(IBlobStore):
    """Lists and reads the objects stored under an S3 bucket prefix."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        client: Any = None,
        region: str | None = None,
    ) -> None:
        if not bucket:
            raise ValueError("bucket must be a non-empty string")
        self._bucket = bucket
        self._prefix = prefix
        self._client = client or boto3.client(
            "s3",
            region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def prefix(self) -> str:
        return self._prefix

    def list_files(self) -> Iterator[FileDescriptor]:
        paginator = self._client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self._bucket, Prefix=self._prefix):
            for obj in page.get("Contents", []):
                # zero-byte "folder" placeholders created by the console
                if obj["Key"].endswith("/"):
                    continue
                yield FileDescriptor(name=obj["Key"], size_bytes=int(obj["Size"]))

    def open_reader(self, name: str, size: Optional[int] = None) -> S3ObjectReader:
        return S3ObjectReader(self._client, self._bucket, name, size=size)
