"""
Probe capability.

A probe takes one Endpoint and returns one Measurement. The prober
accepts either a BaseProbe subclass or any plain callable, sync or
async, so a real network query can be swapped in without touching
the aggregation code.
"""

import asyncio
import inspect
import random
from abc import ABC, abstractmethod
from concurrent.futures import Executor
from typing import Awaitable, Callable, Optional, Union

from .models import Endpoint, Measurement


class BaseProbe(ABC):
    """Base class for probes."""

    @abstractmethod
    async def probe(self, endpoint: Endpoint) -> Measurement:
        """
        Run one probe attempt against an endpoint.

        Implementations may raise; the prober records any exception as
        a failed Measurement.
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the probe."""


ProbeFunction = Callable[[Endpoint], Union[Measurement, Awaitable[Measurement]]]
ProbeLike = Union[BaseProbe, ProbeFunction]


def _is_async_callable(func: Callable) -> bool:
    if inspect.iscoroutinefunction(func):
        return True
    call = getattr(type(func), "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


def is_threaded_probe(probe: ProbeLike) -> bool:
    """True when the probe is a plain synchronous callable."""
    return (
        not isinstance(probe, BaseProbe)
        and callable(probe)
        and not _is_async_callable(probe)
    )


def as_async_probe(
    probe: ProbeLike,
    executor: Optional[Executor] = None,
) -> Callable[[Endpoint], Awaitable[Measurement]]:
    """
    Normalise anything probe-like into an async callable.

    Synchronous callables run in a worker thread so a blocking query
    never stalls the event loop: on ``executor`` when one is given,
    otherwise on the loop's default pool.
    """
    if isinstance(probe, BaseProbe):
        return probe.probe
    if not callable(probe):
        raise TypeError(f"Probe must be callable, got {type(probe).__name__}")
    if _is_async_callable(probe):
        return probe

    async def threaded(endpoint: Endpoint) -> Measurement:
        if executor is None:
            return await asyncio.to_thread(probe, endpoint)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, probe, endpoint)

    return threaded


class SimulatedProbe(BaseProbe):
    """
    Random latency generator for offline runs.

    Produces 0-200ms base latency plus up to 20ms of jitter, and flips
    a coin for connectivity. Seeded, so a given seed always yields the
    same sequence of measurements.
    """

    def __init__(self, seed: Optional[int] = None, failure_rate: float = 0.0):
        """
        Initialize the simulated probe.

        Args:
            seed: Random seed (None for a nondeterministic run)
            failure_rate: Probability of an attempt failing outright
        """
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        self.failure_rate = failure_rate
        self._random = random.Random(seed)

    async def probe(self, endpoint: Endpoint) -> Measurement:
        """Simulate a single DNS query."""
        if self._random.random() < self.failure_rate:
            return Measurement.failure("Simulated failure")

        base_time = self._random.random() * 200
        jitter = self._random.random() * 20
        connectivity = self._random.randint(0, 1) == 1
        first_answer = f"192.168.{self._random.randint(0, 254)}.{self._random.randint(0, 254)}"

        return Measurement.success(
            base_time + jitter,
            connectivity=connectivity,
            first_answer=first_answer,
        )
