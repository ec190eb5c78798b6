"""
Synthetic Trace Generation Module

This module builds a topology of applications, services and operations and
generates synthetic distributed traces by walking its call graph.

Components:
- Span / SpanBuilder: Span value and identity/tag builder with error injection
- Operation: Call graph node; generates nested, timed spans
- Service / Application: Owners of operations and services
- TopologyBuilder: Loads or synthesizes a topology and validates its call graph
"""

from .span import Span, SpanBuilder, SpanLog
from .latency_calculator import MAX_TRACE_DURATION_MS, random_duration
from .trace_generator import TraceGenerator, generate_traces
from .operation import CallReference, Operation
from .service import Service
from .application import Application
from .service_topology import (
    CircularReferenceError,
    ConfigurationError,
    Topology,
    TopologyBuilder,
    check_call_graph,
)

__all__ = [
    'Span', 'SpanBuilder', 'SpanLog', 'MAX_TRACE_DURATION_MS', 'random_duration',
    'TraceGenerator', 'generate_traces', 'CallReference', 'Operation', 'Service',
    'Application', 'CircularReferenceError', 'ConfigurationError', 'Topology',
    'TopologyBuilder', 'check_call_graph',
]
