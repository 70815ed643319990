"""
Concurrent prober.

Runs a probe against every endpoint with bounded parallelism:
- One task per endpoint, admitted through a counting semaphore
- Sequential attempts per endpoint, failures recorded as data
- A single collector task owning the result buffer
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Awaitable, Callable, Optional, Sequence

from .models import Endpoint, EndpointStats, Measurement
from .probes import ProbeLike, as_async_probe, is_threaded_probe
from .statistics import StatisticsEngine

logger = logging.getLogger(__name__)


# Type for progress callback
ProgressCallback = Callable[[str, int, int], None]

AsyncProbe = Callable[[Endpoint], Awaitable[Measurement]]

_DONE = object()


class ProberResourceError(RuntimeError):
    """Raised when the prober cannot admit or schedule its tasks."""


class ResultCollector:
    """
    Exclusive owner of the result buffer.

    Endpoint tasks never touch the buffer; they send finished stats
    through the queue and :meth:`collect` appends them one at a time.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._results: list[EndpointStats] = []

    async def submit(self, stats: EndpointStats) -> None:
        """Hand a finished EndpointStats to the collector."""
        await self._queue.put(stats)

    async def close(self) -> None:
        """Tell the collector that no more results will arrive."""
        await self._queue.put(_DONE)

    async def collect(self) -> list[EndpointStats]:
        """Drain the queue until closed and return everything received."""
        while True:
            item = await self._queue.get()
            if item is _DONE:
                return self._results
            self._results.append(item)


class ConcurrentProber:
    """
    Probes endpoints in parallel under a fixed concurrency cap.

    Probe failures never escape: an exception or a timeout inside an
    attempt becomes a failed Measurement and the run carries on.

    Synchronous probes run on a thread pool owned by each run and sized
    to the concurrency cap. The pool is shut down without waiting when
    the run ends, so a blocking call that outlives its attempt timeout
    does not hold up :meth:`run_all`.
    """

    def __init__(
        self,
        probe: ProbeLike,
        attempt_timeout: Optional[float] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize the prober.

        Args:
            probe: BaseProbe instance or callable taking an Endpoint
            attempt_timeout: Per-attempt limit in seconds (None for no limit)
            progress_callback: Optional callback for progress updates
        """
        # Rejects anything that cannot be called
        as_async_probe(probe)
        self.probe = probe
        self.attempt_timeout = attempt_timeout
        self.progress_callback = progress_callback

    async def _attempt(self, call: AsyncProbe, endpoint: Endpoint) -> Measurement:
        """Run one probe attempt, absorbing every failure."""
        try:
            if self.attempt_timeout is None:
                return await call(endpoint)
            return await asyncio.wait_for(call(endpoint), self.attempt_timeout)
        except asyncio.TimeoutError:
            logger.debug("%s: attempt timed out", endpoint.label)
            return Measurement.timed_out(self.attempt_timeout)
        except Exception as exc:
            logger.debug("%s: probe failed: %r", endpoint.label, exc)
            return Measurement.failure(str(exc) or type(exc).__name__)

    def _report_progress(self, stats: EndpointStats, current: int, total: int) -> None:
        if not self.progress_callback:
            return
        try:
            self.progress_callback(
                f"{stats.endpoint.label}: {stats.status.value}",
                current,
                total,
            )
        except Exception as exc:
            logger.debug("Progress callback failed: %r", exc)

    async def _probe_endpoint(
        self,
        call: AsyncProbe,
        endpoint: Endpoint,
        order: int,
        attempts: int,
        gate: asyncio.Semaphore,
        collector: ResultCollector,
        progress: list[int],
        total: int,
    ) -> None:
        async with gate:
            samples = []
            for _ in range(attempts):
                measurement = await self._attempt(call, endpoint)
                if not isinstance(measurement, Measurement):
                    measurement = Measurement.failure(
                        f"Probe returned {type(measurement).__name__}, not Measurement"
                    )
                samples.append(measurement)

        stats = StatisticsEngine.summarize(endpoint, samples, order=order)
        await collector.submit(stats)

        progress[0] += 1
        self._report_progress(stats, progress[0], total)

    async def run_all(
        self,
        endpoints: Sequence[Endpoint],
        attempts_per_endpoint: int = 3,
        concurrency: int = 10,
    ) -> list[EndpointStats]:
        """
        Probe every endpoint and wait for all of them to finish.

        Args:
            endpoints: Endpoints in registry order
            attempts_per_endpoint: Sequential attempts per endpoint
            concurrency: Maximum endpoints probed at the same time

        Returns:
            One EndpointStats per endpoint, in completion order

        Raises:
            ValueError: If concurrency or attempts_per_endpoint is below 1
            ProberResourceError: If the tasks cannot be admitted or scheduled
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        if attempts_per_endpoint < 1:
            raise ValueError(
                f"attempts_per_endpoint must be >= 1, got {attempts_per_endpoint}"
            )

        endpoints = list(endpoints)
        if not endpoints:
            return []

        logger.info(
            "Probing %d endpoints (%d attempts each, concurrency %d)",
            len(endpoints), attempts_per_endpoint, concurrency,
        )

        executor = None
        try:
            if is_threaded_probe(self.probe):
                executor = ThreadPoolExecutor(
                    max_workers=concurrency,
                    thread_name_prefix="dnsrank-probe",
                )
            try:
                gate = asyncio.Semaphore(concurrency)
                collector = ResultCollector()
                collector_task = asyncio.create_task(collector.collect())
            except (MemoryError, RuntimeError) as exc:
                raise ProberResourceError(f"Cannot allocate admission gate: {exc}") from exc

            call = as_async_probe(self.probe, executor)
            progress = [0]
            tasks = []
            try:
                for order, endpoint in enumerate(endpoints):
                    tasks.append(asyncio.create_task(self._probe_endpoint(
                        call,
                        endpoint,
                        order,
                        attempts_per_endpoint,
                        gate,
                        collector,
                        progress,
                        len(endpoints),
                    )))
            except (MemoryError, RuntimeError) as exc:
                for task in tasks:
                    task.cancel()
                collector_task.cancel()
                raise ProberResourceError(f"Cannot schedule probe tasks: {exc}") from exc

            try:
                await asyncio.gather(*tasks)
            finally:
                await collector.close()
            results = await collector_task
        finally:
            if executor is not None:
                executor.shutdown(wait=False, cancel_futures=True)

        logger.info(
            "Probed %d endpoints, %d available",
            len(results), sum(1 for s in results if s.is_available),
        )
        return results


def run_all(
    probe: ProbeLike,
    endpoints: Sequence[Endpoint],
    attempts_per_endpoint: int = 3,
    concurrency: int = 10,
    attempt_timeout: Optional[float] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[EndpointStats]:
    """
    Blocking wrapper around :meth:`ConcurrentProber.run_all`.

    Must not be called from inside a running event loop.
    """
    prober = ConcurrentProber(
        probe,
        attempt_timeout=attempt_timeout,
        progress_callback=progress_callback,
    )
    return asyncio.run(prober.run_all(endpoints, attempts_per_endpoint, concurrency))
