#!/usr/bin/env python3
"""
Emission Pipeline - Periodically generates a trace and sends it
"""

import logging
import random
import time
from typing import List, Optional

from synthetic_traces import Operation, Span, Topology
from trace_sending import SpanSendError, TraceSender

logger = logging.getLogger("trace-emitter")


class TraceEmitter:
    """Sends one trace from a random entrypoint every ``frequency_ms`` milliseconds."""

    def __init__(self, topology: Topology, sender: TraceSender, frequency_ms: int = 30000,
                 rng: Optional[random.Random] = None):
        self.topology = topology
        self.sender = sender
        self.frequency_ms = frequency_ms
        self.rng = rng or random.Random()

    def random_entrypoint(self) -> Operation:
        return self.topology.random_entrypoint(self.rng)

    def generate(self, operation: Operation) -> List[Span]:
        """Generate a trace through the owning service so its latency and tags apply."""
        app = self.topology.get_application(operation.application)
        service = app.get_service(operation.service) if app else None
        if service is None or service.get_operation(operation.name) is not operation:
            return operation.generate_trace(self.sender.trace_id, rng=self.rng)
        return service.generate_trace(self.sender.trace_id, operation.name, rng=self.rng)

    def emit_once(self) -> int:
        """
        Generate and send a single trace.

        Returns:
            Number of spans sent, 0 when the transport failed
        """
        operation = self.random_entrypoint()
        trace = self.generate(operation)
        logger.info(f"Sending {len(trace)} spans for {operation.slug}")
        try:
            return self.sender.send(trace)
        except SpanSendError as e:
            logger.error(f"Failed to send trace for {operation.slug}: {e}")
            return 0

    def run(self, max_cycles: Optional[int] = None) -> int:
        """
        Emit traces until ``max_cycles`` is reached (forever when None).

        Returns:
            Total number of spans sent
        """
        logger.info(f"Emitting a trace every {self.frequency_ms}ms from "
                    f"{len(self.topology.entrypoints())} entrypoints")
        total = 0
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            started = time.monotonic()
            total += self.emit_once()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            elapsed = time.monotonic() - started
            time.sleep(max(0.0, self.frequency_ms / 1000 - elapsed))
        logger.info(f"Emitted {cycles} traces, {total} spans")
        return total
