"""
FastAPI entry point: HTTP front door for the annotation filter/publisher.

create_app() is the Composition Root for the HTTP surface: without an injected
use case it reads PipelineSettings and wires SNSMessagePublisher and
LoggingEventEmitter into PublishRelevantAnnotationsUseCase.

Run locally:
    uvicorn chunk_pipeline.infrastructure.entrypoints.fastapi_app:create_app --factory --port 8000
"""

from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from chunk_pipeline.application.use_cases.publish_annotations import (
    PublishRelevantAnnotationsUseCase,
)
from chunk_pipeline.domain.entities.annotation_filter import MalformedAnnotationError
from chunk_pipeline.infrastructure.config.settings import PipelineSettings
from chunk_pipeline.infrastructure.messaging.sns_publisher import SNSMessagePublisher
from chunk_pipeline.infrastructure.observability.logging_emitter import (
    LoggingEventEmitter,
    configure_logging,
)


class AnnotationBatch(BaseModel):
    records: list[dict[str, Any]]


class PublishResult(BaseModel):
    published: int


def _default_use_case() -> PublishRelevantAnnotationsUseCase:
    settings = PipelineSettings.from_env()
    settings.require_filter_settings()
    configure_logging(settings.log_level)
    return PublishRelevantAnnotationsUseCase(
        SNSMessagePublisher(region=settings.aws_region),
        settings.filter_config(),
        settings.topic_id,
        events=LoggingEventEmitter(),
    )


def create_app(use_case: Optional[PublishRelevantAnnotationsUseCase] = None) -> FastAPI:
    use_case = use_case or _default_use_case()
    app = FastAPI(title="Chunk Pipeline Annotation API")

    @app.post("/annotations", response_model=PublishResult)
    def publish_annotations(body: AnnotationBatch) -> PublishResult:
        """Filter the posted records and publish the matches, in order.

        Blocking SNS calls run in FastAPI's threadpool (sync route).
        """
        try:
            published = use_case.execute(body.records)
        except MalformedAnnotationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return PublishResult(published=published)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
