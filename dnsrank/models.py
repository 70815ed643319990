"""
Data models for dnsrank.

Defines structured types for endpoints, single probe measurements
and the per-endpoint aggregates consumed by the ranker.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class Transport(Enum):
    """DNS transport protocols."""
    UDP = "udp"
    TCP = "tcp"


class MeasurementStatus(Enum):
    """Outcome of a single probe attempt."""
    OK = "ok"
    TIMEOUT = "timeout"
    ERROR = "error"


class EndpointStatus(Enum):
    """Overall status of an endpoint across all of its attempts."""
    OK = "ok"
    TIMEOUT = "timeout"
    ERROR = "error"


class Unavailable(Enum):
    """
    Marker for a latency that could not be measured.

    Deliberately not a number: comparing it with a float raises
    TypeError instead of silently sorting somewhere.
    """
    UNAVAILABLE = "unavailable"

    def __repr__(self) -> str:
        return "UNAVAILABLE"

    def __bool__(self) -> bool:
        return False


UNAVAILABLE = Unavailable.UNAVAILABLE

Latency = Union[float, Unavailable]


@dataclass(frozen=True)
class Endpoint:
    """A named, addressable DNS resolver."""
    name: str
    address: str
    region: Optional[str] = None

    @property
    def label(self) -> str:
        """Human-readable identity, e.g. ``Quad9 (9.9.9.9)``."""
        return f"{self.name} ({self.address})"


@dataclass(frozen=True)
class Measurement:
    """Result of a single probe attempt against one endpoint."""
    status: MeasurementStatus
    latency_ms: Optional[float] = None
    connectivity: bool = False
    first_answer: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def success(
        cls,
        latency_ms: float,
        connectivity: bool = True,
        first_answer: Optional[str] = None,
    ) -> "Measurement":
        """Build a successful measurement."""
        return cls(
            status=MeasurementStatus.OK,
            latency_ms=float(latency_ms),
            connectivity=connectivity,
            first_answer=first_answer,
        )

    @classmethod
    def failure(
        cls,
        error_message: Optional[str] = None,
        connectivity: bool = False,
    ) -> "Measurement":
        """Build a failed measurement (unreachable or errored target)."""
        return cls(
            status=MeasurementStatus.ERROR,
            connectivity=connectivity,
            error_message=error_message,
        )

    @classmethod
    def timed_out(cls, timeout: Optional[float] = None) -> "Measurement":
        """Build a measurement for an attempt that ran out of time."""
        message = f"Probe timed out after {timeout}s" if timeout else "Probe timed out"
        return cls(status=MeasurementStatus.TIMEOUT, error_message=message)

    @property
    def is_success(self) -> bool:
        """Check if the attempt produced a usable sample."""
        return self.status == MeasurementStatus.OK and self.latency_ms is not None


@dataclass(frozen=True)
class EndpointStats:
    """
    Aggregated statistics for one endpoint across all its attempts.

    Latency fields hold ``UNAVAILABLE`` whenever ``success_count`` is 0.
    ``order`` is the endpoint's position in the registry and breaks ties
    between equal means.
    """
    endpoint: Endpoint
    samples: tuple[Measurement, ...]
    attempts: int
    success_count: int
    status: EndpointStatus
    connectivity: bool

    # Latency stats (in milliseconds)
    min_latency: Latency = UNAVAILABLE
    max_latency: Latency = UNAVAILABLE
    avg_latency: Latency = UNAVAILABLE
    median_latency: Latency = UNAVAILABLE
    stddev_latency: Latency = UNAVAILABLE

    # Failure breakdown
    timeout_count: int = 0
    error_count: int = 0

    order: int = 0

    @property
    def is_available(self) -> bool:
        """Whether at least one attempt produced a latency sample."""
        return self.success_count > 0

    @property
    def success_rate(self) -> float:
        """Percentage of successful attempts."""
        if self.attempts == 0:
            return 0.0
        return (self.success_count / self.attempts) * 100

    @property
    def latencies(self) -> list[float]:
        """Successful latency samples, in attempt order."""
        return [m.latency_ms for m in self.samples if m.is_success]


@dataclass
class RunSummary:
    """Everything a single run produced, handed to the output layer."""
    ranked: list[EndpointStats] = field(default_factory=list)
    recommended: list[EndpointStats] = field(default_factory=list)
    attempts_per_endpoint: int = 0
    concurrency: int = 0
    duration_seconds: float = 0.0

    @property
    def winner(self) -> Optional[EndpointStats]:
        """Fastest usable endpoint, if any."""
        return self.recommended[0] if self.recommended else None
