"""
Operation

A node in the call graph. Generating a trace from an operation emits its own
span and then the spans of every operation it calls, depth first.
"""

import random
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from .latency_calculator import MAX_TRACE_DURATION_MS, random_duration, span_window
from .span import Span, SpanBuilder
from .trace_generator import TraceGenerator

DEFAULT_SOURCE = 'trace-generator'
DEFAULT_ERROR_CHANCE = 5.0


@dataclass
class CallReference:
    """Unresolved call target as written in a topology document."""
    application: Optional[str] = None
    service: Optional[str] = None
    name: Optional[str] = None

    @property
    def slug(self) -> str:
        return f"{self.application}.{self.service}.{self.name}"


class Operation(TraceGenerator):
    """A single operation of a service."""

    def __init__(self, name: str, service: Optional[str] = None, application: Optional[str] = None,
                 tags: Optional[Dict[str, str]] = None, error_chance: float = DEFAULT_ERROR_CHANCE,
                 source: str = DEFAULT_SOURCE, rng: Optional[random.Random] = None):
        if not 0 <= error_chance <= 100:
            raise ValueError(f"errorChance must be between 0 and 100, got {error_chance}")
        self.name = name
        self.service = service
        self.application = application
        self.tags = dict(tags or {})
        self.error_chance = float(error_chance)
        self.source = source
        self.rng = rng or random.Random()
        self.calls: List['Operation'] = []
        # Filled by the topology loader, replaced by ``calls`` once linked
        self.call_references: List[CallReference] = []

    @property
    def slug(self) -> str:
        return f"{self.application}.{self.service}.{self.name}"

    def add_call(self, operation: 'Operation') -> None:
        self.calls.append(operation)

    def generate_trace(self, trace_id: uuid.UUID, parent_id: Optional[uuid.UUID] = None,
                       offset_millis: int = 0, budget_millis: Optional[int] = None,
                       rng: Optional[random.Random] = None, now_millis: Optional[int] = None) -> List[Span]:
        """
        Generate the spans of this operation and everything it calls.

        Args:
            trace_id: Trace id stamped on every span
            parent_id: Span id of the calling span, None for the root
            offset_millis: Start of the window granted by the caller
            budget_millis: Length of that window; drawn from MAX_TRACE_DURATION_MS for the root
            rng: Random source threaded through the whole call tree
            now_millis: Wall-clock reference shared by every span of the trace

        Returns:
            Spans in pre-order: this operation first, then each call in declared order
        """
        rng = rng or self.rng
        if budget_millis is None:
            budget_millis = random_duration(MAX_TRACE_DURATION_MS, rng)
        if now_millis is None:
            now_millis = int(time.time() * 1000)

        offset, duration = span_window(offset_millis, budget_millis, rng)
        span = self._build_span(trace_id, parent_id, now_millis + offset, duration, rng)

        trace = [span]
        for call in self.calls:
            trace.extend(call.generate_trace(trace_id, span.span_id, offset, duration,
                                             rng=rng, now_millis=now_millis))
        return trace

    def _build_span(self, trace_id: uuid.UUID, parent_id: Optional[uuid.UUID],
                    start_millis: int, duration_millis: int, rng: random.Random) -> Span:
        builder = SpanBuilder(self.name, start_millis, duration_millis, self.source, rng=rng)
        builder.set_trace_id(trace_id)
        if parent_id is not None:
            builder.set_parents([parent_id])
        builder.set_error_chance(self.error_chance)
        builder.set_identity_tags(self.application, 'cluster', self.service, 'shard')
        for key, value in self.tags.items():
            builder.add_tag(key, value)
        return builder.build()

    def __repr__(self):
        return f"Operation({self.slug!r}, calls={[c.slug for c in self.calls]})"
