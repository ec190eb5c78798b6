import json
import logging
import uuid
from typing import List

from synthetic_traces import Span, TraceGenerator

logger = logging.getLogger("trace-sender")


class TraceSender:
    """
    Buffers the spans of one trace and sends them with a shared trace id.

    The trace id is replaced after every flush, so consecutive sends never
    share one.
    """

    def __init__(self, client):
        self.client = client
        self.spans: List[Span] = []
        self.trace_id = uuid.uuid4()

    def add_span(self, span: Span) -> None:
        self.spans.append(span)

    def flush(self) -> int:
        """
        Send every buffered span.

        Returns:
            Number of spans sent

        Raises:
            SpanSendError: propagated from the client; the buffer is still cleared
        """
        logger.info(f"Trace {self.trace_id} - {len(self.spans)} spans")
        try:
            for span in self.spans:
                logger.debug(f"Span {span.operation_name} - parent {[str(p) for p in span.parents]}")
                logger.debug(json.dumps(span.to_dict(), indent=2))
                self.client.send_span(span.operation_name, span.start_time, span.duration, span.source,
                                      self.trace_id, span.span_id, span.parents, span.follows_from,
                                      span.tags, span.span_logs)
            return len(self.spans)
        finally:
            self.spans = []
            self.trace_id = uuid.uuid4()

    def send(self, spans: List[Span]) -> int:
        for span in spans:
            self.add_span(span)
        return self.flush()

    def send_generator(self, generator: TraceGenerator) -> int:
        """Generate a trace with the current trace id and send it."""
        return self.send(generator.generate_trace(self.trace_id))
