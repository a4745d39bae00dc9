"""
Domain entity for the annotation allow-list / confidence filter.
Zero external dependencies: pure Python dataclass only.

An annotation record is any mapping produced by the annotation service.  The
filter only looks at the entity and confidence fields; every other field is
carried through untouched.  Field paths may be dotted to reach into nested
mappings (e.g. "file_data.entity").
"""

from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Iterable, Mapping


class MalformedAnnotationError(ValueError):
    """Raised when a record lacks, or carries an invalid, entity/confidence field."""


@dataclass(frozen=True)
class FilterConfig:
    allowed_entities: frozenset[str]
    min_confidence: float
    entity_field: str = "entity"
    confidence_field: str = "confidence"
    _entity_path: tuple[str, ...] = field(init=False, repr=False, compare=False)
    _confidence_path: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        entities = frozenset(self.allowed_entities)
        if not entities:
            raise ValueError("allowed_entities must not be empty")
        if any(not isinstance(e, str) or not e.strip() for e in entities):
            raise ValueError("allowed_entities must contain non-blank strings only")
        if isinstance(self.min_confidence, bool) or not isinstance(self.min_confidence, Real):
            raise ValueError(f"min_confidence must be a number, got {self.min_confidence!r}")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be in [0, 1], got {self.min_confidence}")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "allowed_entities", entities)
        object.__setattr__(self, "min_confidence", float(self.min_confidence))
        object.__setattr__(self, "_entity_path", _split_path(self.entity_field))
        object.__setattr__(self, "_confidence_path", _split_path(self.confidence_field))

    @classmethod
    def of(
        cls,
        allowed_entities: Iterable[str],
        min_confidence: float,
        **kwargs: str,
    ) -> "FilterConfig":
        return cls(frozenset(allowed_entities), min_confidence, **kwargs)

    def entity_of(self, record: Mapping[str, Any]) -> str:
        value = _lookup(record, self._entity_path, self.entity_field)
        if not isinstance(value, str):
            raise MalformedAnnotationError(
                f"{self.entity_field!r} must be a string, got {value!r}"
            )
        return value

    def confidence_of(self, record: Mapping[str, Any]) -> float:
        value = _lookup(record, self._confidence_path, self.confidence_field)
        if isinstance(value, bool) or not isinstance(value, Real):
            raise MalformedAnnotationError(
                f"{self.confidence_field!r} must be a number, got {value!r}"
            )
        return float(value)

    def matches(self, record: Mapping[str, Any]) -> bool:
        """Return True iff the record's entity is allowed and its confidence
        is strictly greater than min_confidence.

        Raises:
            MalformedAnnotationError: if either field is missing or has the wrong type.
        """
        entity = self.entity_of(record)
        confidence = self.confidence_of(record)
        return entity in self.allowed_entities and confidence > self.min_confidence


def _split_path(path: str) -> tuple[str, ...]:
    parts = tuple(path.split("."))
    if not path or any(not p for p in parts):
        raise ValueError(f"invalid field path: {path!r}")
    return parts


def _lookup(record: Mapping[str, Any], path: tuple[str, ...], label: str) -> Any:
    current: Any = record
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            raise MalformedAnnotationError(f"record is missing field {label!r}")
        current = current[key]
    return current
