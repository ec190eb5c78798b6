"""
Service

Owns a set of operations. Spans generated under a service carry its base
latency and its tags.
"""

import random
import uuid
from dataclasses import replace
from typing import Dict, List, Optional

from .operation import Operation
from .span import Span
from .trace_generator import TraceGenerator


class Service(TraceGenerator):
    """A service with named operations, extra tags and a latency bias."""

    def __init__(self, name: str, application: Optional[str] = None,
                 operations: Optional[Dict[str, Operation]] = None,
                 tags: Optional[Dict[str, str]] = None, base_latency: int = 0,
                 rng: Optional[random.Random] = None):
        self.name = name
        self.application = application
        self.tags = dict(tags or {})
        self.base_latency = int(base_latency)
        self.rng = rng or random.Random()
        self.operations: Dict[str, Operation] = {}
        self.set_operations(operations or {})

    def set_operations(self, operations: Dict[str, Operation]) -> None:
        """Adopt operations, pointing each one back at this service."""
        for operation in operations.values():
            operation.service = self.name
            operation.application = self.application
        self.operations = dict(operations)

    def set_application(self, application: str) -> None:
        self.application = application
        for operation in self.operations.values():
            operation.application = application

    def get_operation(self, name: str) -> Optional[Operation]:
        return self.operations.get(name)

    def random_operation(self, rng: Optional[random.Random] = None) -> Optional[Operation]:
        if not self.operations:
            return None
        rng = rng or self.rng
        return rng.choice(list(self.operations.values()))

    def generate_trace(self, trace_id: uuid.UUID, operation: Optional[str] = None,
                       rng: Optional[random.Random] = None) -> List[Span]:
        """
        Generate a trace starting at one of this service's operations.

        Args:
            trace_id: Trace id stamped on every span
            operation: Operation name; a random operation when omitted

        Returns:
            The decorated spans, or an empty list for an unknown operation
        """
        rng = rng or self.rng
        if operation is None:
            op = self.random_operation(rng)
        else:
            op = self.get_operation(operation)
        if op is None:
            return []

        # Tags are appended, not merged: a service tag may repeat a key
        extra_tags = list(self.tags.items())
        return [
            replace(span, duration=span.duration + self.base_latency, tags=span.tags + extra_tags)
            for span in op.generate_trace(trace_id, rng=rng)
        ]
