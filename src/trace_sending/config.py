import os


class Config:
    """Centralized configuration management"""
    WAVEFRONT_PROXY_HOST = os.getenv("WAVEFRONT_PROXY_HOST", "localhost")
    WAVEFRONT_METRICS_PORT = os.getenv("WAVEFRONT_METRICS_PORT", "2878")
    WAVEFRONT_DISTRIBUTION_PORT = os.getenv("WAVEFRONT_DISTRIBUTION_PORT", "2878")
    WAVEFRONT_TRACING_PORT = os.getenv("WAVEFRONT_TRACING_PORT", "30001")
    SEND_FREQUENCY_MS = int(os.getenv("SEND_FREQUENCY_MS", "30000"))  # one trace every 30 seconds
    TOPOLOGY_FILE = os.getenv("TOPOLOGY_FILE", "")  # Empty means a random topology
    TOPOLOGY_APP_COUNT = int(os.getenv("TOPOLOGY_APP_COUNT", "10"))
    TOPOLOGY_SERVICES_PER_APP = int(os.getenv("TOPOLOGY_SERVICES_PER_APP", "50"))
    TOPOLOGY_OPERATIONS_PER_SERVICE = int(os.getenv("TOPOLOGY_OPERATIONS_PER_SERVICE", "10"))
    TOPOLOGY_INTERNAL_CALL_COUNT = int(os.getenv("TOPOLOGY_INTERNAL_CALL_COUNT", "3"))
    ERROR_PERCENTAGE = float(os.getenv("ERROR_PERCENTAGE", "5"))  # Default error chance per operation

    @property
    def tracing_endpoint(self):
        return f"{self.WAVEFRONT_PROXY_HOST}:{self.WAVEFRONT_TRACING_PORT}"
