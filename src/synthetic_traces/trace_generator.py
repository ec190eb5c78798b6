"""
Trace Generator

Common interface for everything that can produce a trace: operations,
services and applications.
"""

import uuid
from typing import List

from .span import Span


class TraceGenerator:
    """Base class for objects that generate a list of spans for a trace id."""

    def generate_trace(self, trace_id: uuid.UUID) -> List[Span]:
        raise NotImplementedError


def generate_traces(generator: TraceGenerator, num_traces: int) -> List[List[Span]]:
    """
    Convenience function to generate several independent traces.

    Args:
        generator: Operation, Service or Application to start traces from
        num_traces: Number of traces to generate

    Returns:
        One list of spans per trace, each with its own trace id
    """
    return [generator.generate_trace(uuid.uuid4()) for _ in range(num_traces)]
