"""Tests for dnsrank.probes: the probe base class and adapters."""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from dnsrank.models import Endpoint, Measurement, MeasurementStatus
from dnsrank.probes import BaseProbe, SimulatedProbe, as_async_probe, is_threaded_probe

ENDPOINT = Endpoint(name="Test", address="192.0.2.1")


class TestBaseProbe:
    """BaseProbe is abstract."""

    def test_cannot_instantiate(self) -> None:
        with pytest.raises(TypeError, match="abstract"):
            BaseProbe()  # type: ignore[abstract]

    def test_subclass_must_implement_probe(self) -> None:
        class Incomplete(BaseProbe):
            pass

        with pytest.raises(TypeError, match="abstract"):
            Incomplete()  # type: ignore[abstract]

    def test_close_is_a_noop_by_default(self) -> None:
        class Complete(BaseProbe):
            async def probe(self, endpoint: Endpoint) -> Measurement:
                return Measurement.success(1.0)

        asyncio.run(Complete().close())


class TestAsAsyncProbe:
    """as_async_probe() normalises every probe flavour."""

    def test_base_probe_instance(self) -> None:
        probe = SimulatedProbe(seed=1)
        wrapped = as_async_probe(probe)
        assert asyncio.run(wrapped(ENDPOINT)).is_success

    def test_async_function(self) -> None:
        async def probe(endpoint: Endpoint) -> Measurement:
            return Measurement.success(3.0)

        assert as_async_probe(probe) is probe

    def test_async_callable_object(self) -> None:
        class Callable:
            async def __call__(self, endpoint: Endpoint) -> Measurement:
                return Measurement.success(4.0)

        wrapped = as_async_probe(Callable())
        assert asyncio.run(wrapped(ENDPOINT)).latency_ms == 4.0

    def test_sync_function_runs_in_worker_thread(self) -> None:
        threads = []

        def probe(endpoint: Endpoint) -> Measurement:
            threads.append(threading.current_thread())
            return Measurement.success(5.0)

        result = asyncio.run(as_async_probe(probe)(ENDPOINT))

        assert result.latency_ms == 5.0
        assert threads[0] is not threading.main_thread()

    def test_not_callable(self) -> None:
        with pytest.raises(TypeError, match="callable"):
            as_async_probe("8.8.8.8")  # type: ignore[arg-type]

    def test_sync_function_uses_given_executor(self) -> None:
        names = []

        def lookup(endpoint: Endpoint) -> Measurement:
            names.append(threading.current_thread().name)
            return Measurement.success(6.0)

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="own-pool") as pool:
            result = asyncio.run(as_async_probe(lookup, pool)(ENDPOINT))

        assert result.latency_ms == 6.0
        assert names[0].startswith("own-pool")

    def test_is_threaded_probe(self) -> None:
        async def async_lookup(endpoint: Endpoint) -> Measurement:
            return Measurement.success(1.0)

        def sync_lookup(endpoint: Endpoint) -> Measurement:
            return Measurement.success(1.0)

        assert is_threaded_probe(sync_lookup)
        assert not is_threaded_probe(async_lookup)
        assert not is_threaded_probe(SimulatedProbe(seed=1))


class TestSimulatedProbe:
    """SimulatedProbe mirrors the offline mock: 0-220ms, coin-flip connectivity."""

    def _run(self, probe: SimulatedProbe, n: int) -> list:
        async def collect() -> list:
            return [await probe.probe(ENDPOINT) for _ in range(n)]

        return asyncio.run(collect())

    def test_latency_range(self) -> None:
        for m in self._run(SimulatedProbe(seed=7), 200):
            assert m.status == MeasurementStatus.OK
            assert 0.0 <= m.latency_ms < 220.0

    def test_same_seed_same_measurements(self) -> None:
        assert self._run(SimulatedProbe(seed=42), 20) == self._run(SimulatedProbe(seed=42), 20)

    def test_connectivity_varies(self) -> None:
        flags = {m.connectivity for m in self._run(SimulatedProbe(seed=3), 100)}
        assert flags == {True, False}

    def test_first_answer_is_private_address(self) -> None:
        (m,) = self._run(SimulatedProbe(seed=1), 1)
        assert m.first_answer.startswith("192.168.")

    def test_failure_rate_one(self) -> None:
        results = self._run(SimulatedProbe(seed=1, failure_rate=1.0), 5)
        assert all(m.status == MeasurementStatus.ERROR for m in results)

    def test_invalid_failure_rate(self) -> None:
        with pytest.raises(ValueError, match="failure_rate"):
            SimulatedProbe(failure_rate=1.5)
