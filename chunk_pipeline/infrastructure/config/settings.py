"""
Process-wide settings, read from environment variables (and a local .env file).

Every field is validated once when the settings object is built.  Fields that
only one command needs are optional here; the require_* helpers raise a clear
ValueError when a command runs without them.
"""

import logging
import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from chunk_pipeline.domain.entities.annotation_filter import FilterConfig

ENV_FIELDS = {
    "CHUNK_SIZE_BYTES": "chunk_size_bytes",
    "ALLOWED_ENTITIES": "allowed_entities",
    "MIN_CONFIDENCE": "min_confidence",
    "TOPIC_ID": "topic_id",
    "ENTITY_FIELD": "entity_field",
    "CONFIDENCE_FIELD": "confidence_field",
    "MAX_WORKERS": "max_workers",
    "AWS_DEFAULT_REGION": "aws_region",
    "LOG_LEVEL": "log_level",
}


class PipelineSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    chunk_size_bytes: Optional[PositiveInt] = None
    allowed_entities: list[str] = Field(default_factory=list)
    min_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    topic_id: Optional[str] = None
    entity_field: str = "entity"
    confidence_field: str = "confidence"
    max_workers: PositiveInt = 8
    aws_region: str = "us-east-1"
    log_level: str = "INFO"

    @field_validator("allowed_entities", mode="before")
    @classmethod
    def _split_comma_list(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("topic_id")
    @classmethod
    def _topic_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("topic_id must not be blank")
        return value.strip() if value else value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "PipelineSettings":
        """Build settings from *env*, or from os.environ after loading .env."""
        if env is None:
            load_dotenv()
            env = os.environ
        values = {
            field: env[var]
            for var, field in ENV_FIELDS.items()
            if env.get(var, "").strip()
        }
        return cls(**values)

    def require_chunk_size(self) -> int:
        if self.chunk_size_bytes is None:
            raise ValueError("CHUNK_SIZE_BYTES is not set")
        return self.chunk_size_bytes

    def require_filter_settings(self) -> None:
        missing = [
            var
            for var, present in (
                ("ALLOWED_ENTITIES", bool(self.allowed_entities)),
                ("TOPIC_ID", bool(self.topic_id)),
            )
            if not present
        ]
        if missing:
            raise ValueError(f"missing required settings: {', '.join(missing)}")

    def filter_config(self) -> FilterConfig:
        return FilterConfig.of(
            self.allowed_entities,
            self.min_confidence,
            entity_field=self.entity_field,
            confidence_field=self.confidence_field,
        )
