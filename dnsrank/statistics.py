"""
Statistical aggregation of probe measurements.

Turns the raw samples collected for one endpoint into an
EndpointStats record:
- Basic stats: min, max, average, median, standard deviation
- Reliability: success count, timeout and error counts
- Connectivity: whether any attempt confirmed basic reachability
"""

import logging
from typing import Sequence

import numpy as np

from .models import (
    UNAVAILABLE,
    Endpoint,
    EndpointStats,
    EndpointStatus,
    Measurement,
    MeasurementStatus,
)

logger = logging.getLogger(__name__)


class StatisticsEngine:
    """Calculates per-endpoint statistics from probe measurements."""

    @staticmethod
    def summarize(
        endpoint: Endpoint,
        samples: Sequence[Measurement],
        order: int = 0,
    ) -> EndpointStats:
        """
        Calculate aggregated statistics for an endpoint.

        Latency figures are computed over successful samples only. When
        no sample succeeded every latency field is ``UNAVAILABLE`` and the
        status is ``timeout`` if all attempts timed out, ``error``
        otherwise.

        Args:
            endpoint: Endpoint the samples were taken from
            samples: Measurements in attempt order
            order: Registry position, kept for tie-breaking

        Returns:
            EndpointStats for this endpoint
        """
        samples = tuple(samples)
        successful = [m for m in samples if m.is_success]

        timeouts = sum(1 for m in samples if m.status == MeasurementStatus.TIMEOUT)
        errors = len(samples) - len(successful) - timeouts

        # Connectivity is reported by the probe, independent of success
        connectivity = any(m.connectivity for m in samples)

        if not successful:
            if samples and timeouts == len(samples):
                status = EndpointStatus.TIMEOUT
            else:
                status = EndpointStatus.ERROR
            logger.debug(
                "%s: no successful samples (%d timeouts, %d errors)",
                endpoint.label, timeouts, errors,
            )
            return EndpointStats(
                endpoint=endpoint,
                samples=samples,
                attempts=len(samples),
                success_count=0,
                status=status,
                connectivity=connectivity,
                timeout_count=timeouts,
                error_count=errors,
                order=order,
            )

        latencies = np.array([m.latency_ms for m in successful], dtype=float)

        return EndpointStats(
            endpoint=endpoint,
            samples=samples,
            attempts=len(samples),
            success_count=len(successful),
            status=EndpointStatus.OK,
            connectivity=connectivity,
            min_latency=float(np.min(latencies)),
            max_latency=float(np.max(latencies)),
            avg_latency=float(np.mean(latencies)),
            median_latency=float(np.median(latencies)),
            stddev_latency=float(np.std(latencies)),
            timeout_count=timeouts,
            error_count=errors,
            order=order,
        )
