"""
CLI entry point: chunk files and publish relevant annotations.

This module is the Composition Root for command-line runs: it reads
PipelineSettings, wires the infrastructure adapters (LocalFileStore or
S3BlobStore, SNSMessagePublisher, LoggingEventEmitter) and hands them to the
application layer.

    export CHUNK_SIZE_BYTES=8388608
    chunk-pipeline split s3://videos-bucket/incoming/ --workers 16

    export ALLOWED_ENTITIES=person,vehicle MIN_CONFIDENCE=0.9
    export TOPIC_ID=arn:aws:sns:us-east-1:123456789012:annotations
    chunk-pipeline publish annotations.jsonl
"""

import json
import sys
from functools import partial
from pathlib import Path
from typing import Any, Iterator, Optional, TextIO

import typer

from chunk_pipeline.application.services.file_chunking_service import FileChunkingService
from chunk_pipeline.application.use_cases.publish_annotations import (
    PublishRelevantAnnotationsUseCase,
)
from chunk_pipeline.domain.entities.annotation_filter import MalformedAnnotationError
from chunk_pipeline.domain.entities.file_chunk import Chunk
from chunk_pipeline.domain.ports.blob_store_port import IBlobStore
from chunk_pipeline.infrastructure.config.settings import PipelineSettings
from chunk_pipeline.infrastructure.messaging.sns_publisher import SNSMessagePublisher
from chunk_pipeline.infrastructure.observability.logging_emitter import (
    LoggingEventEmitter,
    configure_logging,
)
from chunk_pipeline.infrastructure.storage.local_file_store import LocalFileStore
from chunk_pipeline.infrastructure.storage.s3_blob_store import S3BlobStore

app = typer.Typer(
    help="Split large files into chunks for parallel processing and publish relevant annotations.",
    no_args_is_help=True,
)


def _load_settings() -> PipelineSettings:
    try:
        settings = PipelineSettings.from_env()
    except ValueError as exc:
        # pydantic.ValidationError is a ValueError
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    configure_logging(settings.log_level)
    return settings


def _blob_store_for(source: str, settings: PipelineSettings) -> IBlobStore:
    if source.startswith("s3://"):
        bucket, _, prefix = source[len("s3://"):].partition("/")
        if not bucket:
            raise typer.BadParameter(f"missing bucket in {source!r}", param_hint="SOURCE")
        return S3BlobStore(bucket, prefix, region=settings.aws_region)
    path = Path(source)
    if not path.is_dir():
        raise typer.BadParameter(f"{source!r} is not a directory", param_hint="SOURCE")
    return LocalFileStore(path)


def _part_path(output_dir: Path, file_name: str, index: int) -> Path:
    """Return <output_dir>/<file_name>.<index>.part, refusing names that leave output_dir."""
    root = output_dir.resolve()
    target = (root / f"{file_name}.{index:06d}.part").resolve()
    if not target.is_relative_to(root):
        raise ValueError(f"{file_name!r} would be written outside of {root}")
    return target


def _write_chunk(output_dir: Path, chunk: Chunk) -> None:
    target = _part_path(output_dir, chunk.file_name, chunk.index)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(chunk.data)


def _discard(chunk: Chunk) -> None:
    return None


@app.command()
def split(
    source: str = typer.Argument(..., help="Local directory or s3://bucket/prefix."),
    chunk_size: Optional[int] = typer.Option(
        None, "--chunk-size", min=1, help="Chunk size in bytes (overrides CHUNK_SIZE_BYTES)."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", min=1, help="Worker threads (overrides MAX_WORKERS)."
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", help="Write every chunk to <DIR>/<file>.<index>.part."
    ),
) -> None:
    """Chunk every file under SOURCE and report the chunks per file."""
    settings = _load_settings()
    if chunk_size is None:
        try:
            chunk_size = settings.require_chunk_size()
        except ValueError as exc:
            raise typer.BadParameter(
                "pass --chunk-size or set CHUNK_SIZE_BYTES", param_hint="--chunk-size"
            ) from exc

    store = _blob_store_for(source, settings)
    service = FileChunkingService(
        store,
        chunk_size,
        max_workers=workers or settings.max_workers,
        events=LoggingEventEmitter(),
    )
    files = list(store.list_files())

    if output_dir is None:
        sink = _discard
    else:
        try:
            for file in files:
                _part_path(output_dir, file.name, 1)
        except ValueError as exc:
            typer.echo(f"Refusing to write chunks: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        sink = partial(_write_chunk, output_dir)

    report = service.run(files, sink)

    for file in files:
        stats = report.stats_for(file.name)
        typer.echo(f"{file.name}: {stats.chunks} chunks, {stats.bytes} bytes")

    for failure in report.failures:
        typer.echo(
            f"FAILED {failure.file_name} {failure.unit_range}: {failure.error}", err=True
        )
    if not report.ok:
        raise typer.Exit(code=1)


def _read_json_lines(stream: TextIO) -> Iterator[dict[str, Any]]:
    for line_no, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            raise MalformedAnnotationError(f"line {line_no}: invalid JSON ({exc.msg})") from exc
        if not isinstance(record, dict):
            raise MalformedAnnotationError(f"line {line_no}: expected a JSON object")
        yield record


@app.command()
def publish(
    records_file: str = typer.Argument(..., help="JSON Lines file of annotation records, or - for stdin."),
) -> None:
    """Publish the records that pass the entity/confidence filter to TOPIC_ID."""
    settings = _load_settings()
    try:
        settings.require_filter_settings()
        filter_config = settings.filter_config()
    except ValueError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    use_case = PublishRelevantAnnotationsUseCase(
        SNSMessagePublisher(region=settings.aws_region),
        filter_config,
        settings.topic_id,
        events=LoggingEventEmitter(),
    )
    try:
        if records_file == "-":
            published = use_case.execute(_read_json_lines(sys.stdin))
        else:
            with open(records_file, encoding="utf-8") as fh:
                published = use_case.execute(_read_json_lines(fh))
    except MalformedAnnotationError as exc:
        typer.echo(f"Malformed annotation record: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Published {published} record(s) to {settings.topic_id}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
