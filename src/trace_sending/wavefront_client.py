import logging
import uuid
from typing import List, Optional, Tuple

from wavefront_sdk.proxy import WavefrontProxyClient
from wavefront_sdk.entities.tracing.span_log import SpanLog as WavefrontSpanLog

from synthetic_traces.span import SpanLog

from .config import Config

logger = logging.getLogger("wavefront-client")


class SpanSendError(IOError):
    """A span could not be delivered to the tracing backend."""


class WavefrontClient:
    """
    Sends spans to a Wavefront proxy through the Wavefront SDK.

    Args:
        config: proxy host and listener ports
        sender: an already built SDK client; a ``WavefrontProxyClient`` is created when omitted
    """

    def __init__(self, config: Config, sender=None):
        self.config = config
        self.sender = sender or WavefrontProxyClient(
            host=config.WAVEFRONT_PROXY_HOST,
            metrics_port=int(config.WAVEFRONT_METRICS_PORT),
            distribution_port=int(config.WAVEFRONT_DISTRIBUTION_PORT),
            tracing_port=int(config.WAVEFRONT_TRACING_PORT)
        )

    def send_span(self, name: str, start_millis: int, duration_millis: int, source: str,
                  trace_id: uuid.UUID, span_id: uuid.UUID, parents: Optional[List[uuid.UUID]],
                  follows_from: Optional[List[uuid.UUID]], tags: Optional[List[Tuple[str, str]]],
                  span_logs: Optional[List[SpanLog]]) -> None:
        """
        Send one span.

        Raises:
            SpanSendError: when the proxy cannot be reached or the SDK rejects the span
        """
        logs = [WavefrontSpanLog(log.timestamp, dict(log.fields)) for log in span_logs or []]
        try:
            self.sender.send_span(name, start_millis, duration_millis, source, trace_id, span_id,
                                  parents, follows_from, tags, logs or None)
        except (OSError, ValueError) as e:
            logger.error(f"Wavefront proxy error: {e}")
            raise SpanSendError(f"Failed to send span {name} to {self.config.tracing_endpoint}: {e}") from e

    def close(self) -> None:
        self.sender.close()


class LoggingClient:
    """Drop-in client that only logs spans; used for dry runs."""

    def __init__(self):
        self.sent = 0

    def send_span(self, name, start_millis, duration_millis, source, trace_id, span_id,
                  parents, follows_from, tags, span_logs) -> None:
        self.sent += 1
        tag_text = " ".join(f"{key}={value}" for key, value in tags or [])
        logger.info(f"{name} source={source} traceId={trace_id} spanId={span_id} "
                    f"parents={[str(p) for p in parents or []]} {tag_text} "
                    f"{start_millis} {duration_millis}")

    def close(self) -> None:
        pass
