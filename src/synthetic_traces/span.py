"""
Span Model

Immutable span value plus the builder that fills in identity tags,
fallback names and randomized error markers.
"""

import random
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

IDENTITY_TAG_KEYS = ('application', 'cluster', 'service', 'shard')

# Fallback values used when a span is built without business context
RANDOM_NAMES = {
    'source': ('coffee', 'tea', 'mate', 'cocoa'),
    'application': ('coffee', 'tea', 'mate', 'cocoa'),
    'cluster': ('us-east', 'us-west', 'eu-north', 'isolated'),
    'service': ('Order', 'Purchase', 'Queue', 'Brew', 'Delivery'),
    'shard': ('shard-1', 'shard-2', 'shard-3'),
}


@dataclass(frozen=True)
class SpanLog:
    """A structured log entry attached to a span."""
    timestamp: int
    fields: Dict[str, str]


@dataclass(frozen=True)
class Span:
    """One timed unit of work within a trace."""
    operation_name: str
    start_time: int
    duration: int
    source: str
    trace_id: Optional[uuid.UUID]
    span_id: uuid.UUID
    parents: List[uuid.UUID] = field(default_factory=list)
    follows_from: List[uuid.UUID] = field(default_factory=list)
    tags: List[Tuple[str, str]] = field(default_factory=list)
    span_logs: List[SpanLog] = field(default_factory=list)

    def get_tag(self, key: str) -> Optional[str]:
        """Return the first value recorded for a tag key."""
        for tag_key, value in self.tags:
            if tag_key == key:
                return value
        return None

    def tag_values(self, key: str) -> List[str]:
        return [value for tag_key, value in self.tags if tag_key == key]

    def to_dict(self) -> Dict:
        """Plain representation used for logging."""
        return {
            "operationName": self.operation_name,
            "startTime": self.start_time,
            "duration": self.duration,
            "source": self.source,
            "traceId": str(self.trace_id) if self.trace_id else None,
            "spanId": str(self.span_id),
            "parents": [str(p) for p in self.parents],
            "followsFrom": [str(f) for f in self.follows_from],
            "tags": [{"key": k, "value": v} for k, v in self.tags],
            "spanLogs": [{"timestamp": log.timestamp, "fields": log.fields} for log in self.span_logs],
        }


class SpanBuilder:
    """
    Assembles a Span.

    Identity tags (application, cluster, service, shard) are added only when
    absent from the user tags, so each one ends up on the span exactly once.
    Blank names fall back to a random pick from RANDOM_NAMES.
    """

    def __init__(self, operation_name: Optional[str] = 'operation', start_millis: Optional[int] = None,
                 duration_millis: Optional[int] = None, source: Optional[str] = 'source',
                 rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.trace_id = None
        self.span_id = uuid.uuid4()
        self.operation_name = operation_name
        self.start_millis = int(time.time() * 1000) if start_millis is None else start_millis
        self.duration_millis = self.rng.randrange(500) if duration_millis is None else duration_millis
        self.source = source
        self.parents: List[uuid.UUID] = []
        self.follows_from: List[uuid.UUID] = []
        self.tags: List[Tuple[str, str]] = []
        self.span_logs: List[SpanLog] = []
        self.error_chance = 0.0
        self._identity = dict.fromkeys(IDENTITY_TAG_KEYS)

    def set_trace_id(self, trace_id: uuid.UUID) -> 'SpanBuilder':
        self.trace_id = trace_id
        return self

    def set_parents(self, parents: List[uuid.UUID]) -> 'SpanBuilder':
        self.parents = list(parents)
        return self

    def set_follows_from(self, follows_from: List[uuid.UUID]) -> 'SpanBuilder':
        self.follows_from = list(follows_from)
        return self

    def add_tag(self, key: str, value: str) -> 'SpanBuilder':
        self.tags.append((key, value))
        return self

    def set_span_logs(self, span_logs: List[SpanLog]) -> 'SpanBuilder':
        self.span_logs = list(span_logs)
        return self

    def set_identity_tags(self, application: Optional[str], cluster: Optional[str],
                          service: Optional[str], shard: Optional[str]) -> 'SpanBuilder':
        self._identity = {
            'application': application,
            'cluster': cluster,
            'service': service,
            'shard': shard,
        }
        return self

    def set_error_chance(self, percentage: float) -> 'SpanBuilder':
        self.error_chance = percentage
        return self

    def build(self) -> Span:
        if self.span_id is None:
            self.span_id = uuid.uuid4()
        if not self.operation_name:
            self.operation_name = self._random_value('operationName')
        if not self.source:
            self.source = self._random_value('source')

        self._add_identity_tags()

        if self.error_chance > self.rng.random() * 100:
            self._add_error()

        return Span(
            operation_name=self.operation_name,
            start_time=self.start_millis,
            duration=self.duration_millis,
            source=self.source,
            trace_id=self.trace_id,
            span_id=self.span_id,
            parents=list(self.parents),
            follows_from=list(self.follows_from),
            tags=list(self.tags),
            span_logs=list(self.span_logs),
        )

    def _add_identity_tags(self):
        for key in IDENTITY_TAG_KEYS:
            if self._has_tag(key):
                continue
            value = self._identity.get(key)
            self.add_tag(key, value if value else self._random_value(key))

    def _add_error(self):
        # span logs for errors are not sent for the time being
        self.add_tag('error', 'true')

    def _has_tag(self, key: str) -> bool:
        return any(tag_key == key for tag_key, _ in self.tags)

    def _random_value(self, key: str) -> str:
        names = RANDOM_NAMES.get(key, (key,))
        return self.rng.choice(names)
