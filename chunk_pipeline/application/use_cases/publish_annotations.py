"""
Use-case: publish the annotation records that pass the entity/confidence filter.
Depends only on Domain ports and entities; no infrastructure imports.

A batch is validated as a whole before anything is published; records are then
evaluated in arrival order and every match is sent on its own.
There is no batching, deduplication or retry here; delivery guarantees belong
to the IMessagePublisher adapter.
"""

import json
from typing import Any, Iterable, Mapping, Optional

from chunk_pipeline.domain.entities.annotation_filter import FilterConfig, MalformedAnnotationError
from chunk_pipeline.domain.ports.message_publisher_port import IMessagePublisher
from chunk_pipeline.domain.ports.observability_port import IEventEmitter, NullEventEmitter


def to_json(record: Mapping[str, Any]) -> str:
    """Serialize *record* compactly with keys sorted at every level.

    Two records carrying the same fields always produce the same text,
    whatever order the producer emitted them in.
    """
    return json.dumps(dict(record), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class PublishRelevantAnnotationsUseCase:
    def __init__(
        self,
        publisher: IMessagePublisher,
        filter_config: FilterConfig,
        topic_id: str,
        events: Optional[IEventEmitter] = None,
    ) -> None:
        if not topic_id or not topic_id.strip():
            raise ValueError("topic_id must be a non-empty string")
        self._publisher = publisher
        self._filter = filter_config
        self._topic_id = topic_id
        self._events = events or NullEventEmitter()

    @property
    def topic_id(self) -> str:
        return self._topic_id

    def execute_one(self, record: Mapping[str, Any]) -> Optional[str]:
        """Filter and, if it matches, publish a single record.

        Returns:
            The publisher's message id, or None if the record was filtered out.

        Raises:
            MalformedAnnotationError: if the record lacks a valid entity or confidence.
            Any exception propagated from IMessagePublisher.
        """
        if not self._filter.matches(record):
            self._events.emit(
                "annotation.rejected",
                entity=self._filter.entity_of(record),
                confidence=self._filter.confidence_of(record),
            )
            return None

        message_id = self._publisher.publish(self._topic_id, to_json(record))
        self._events.emit(
            "annotation.published",
            topic_id=self._topic_id,
            entity=self._filter.entity_of(record),
            message_id=message_id,
        )
        return message_id

    def validate(self, records: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
        """Check every record's entity and confidence without publishing anything.

        Raises:
            MalformedAnnotationError: naming the 0-based position of the first bad record.
        """
        checked = list(records)
        for position, record in enumerate(checked):
            try:
                self._filter.entity_of(record)
                self._filter.confidence_of(record)
            except MalformedAnnotationError as exc:
                raise MalformedAnnotationError(f"record {position}: {exc}") from exc
        return checked

    def execute(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Publish every matching record of *records*; return how many were sent.

        The whole batch is validated first, so a malformed record means
        nothing from the batch is published.
        """
        published = 0
        for record in self.validate(records):
            if self.execute_one(record) is not None:
                published += 1
        return published
