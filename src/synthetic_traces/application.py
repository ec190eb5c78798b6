"""
Application

Top-level addressing unit of a topology; owns services by name.
"""

import random
import uuid
from typing import Dict, List, Optional

from .service import Service
from .span import Span
from .trace_generator import TraceGenerator


class Application(TraceGenerator):

    def __init__(self, name: str, services: Optional[Dict[str, Service]] = None,
                 rng: Optional[random.Random] = None):
        self.name = name
        self.services: Dict[str, Service] = dict(services or {})
        self.rng = rng or random.Random()

    def get_service(self, name: str) -> Optional[Service]:
        return self.services.get(name)

    def generate_trace(self, trace_id: uuid.UUID, service: Optional[str] = None,
                       rng: Optional[random.Random] = None) -> List[Span]:
        """Generate a trace for the named service, or a random one."""
        rng = rng or self.rng
        if service is None:
            if not self.services:
                return []
            service = rng.choice(list(self.services))
        if service not in self.services:
            return []
        return self.services[service].generate_trace(trace_id, rng=rng)
