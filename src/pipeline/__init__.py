"""
Pipeline Package

Command-line handling and the periodic trace emission loop.
"""

from .cli import CLI
from .emission import TraceEmitter

__all__ = ['CLI', 'TraceEmitter']
