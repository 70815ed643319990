"""
dnsrank - DNS resolver speed ranking.

Probes resolvers concurrently, aggregates their response times and
ranks them, never recommending a resolver that did not answer.
"""

__version__ = "1.0.0"

from .models import Endpoint, EndpointStats, Measurement, UNAVAILABLE
from .ranking import rank, top_k
from .runner import ConcurrentProber, ProberResourceError, run_all
from .statistics import StatisticsEngine

__all__ = [
    "__version__",
    "Endpoint",
    "EndpointStats",
    "Measurement",
    "UNAVAILABLE",
    "ConcurrentProber",
    "ProberResourceError",
    "StatisticsEngine",
    "rank",
    "run_all",
    "top_k",
]
