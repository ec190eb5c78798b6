"""
Trace Sending Package

This package provides the configuration, the Wavefront transport client and
the sender that ships generated traces to a tracing backend.
"""

from .config import Config
from .wavefront_client import LoggingClient, SpanSendError, WavefrontClient
from .sender import TraceSender

__all__ = ['Config', 'LoggingClient', 'SpanSendError', 'WavefrontClient', 'TraceSender']
