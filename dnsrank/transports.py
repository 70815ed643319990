"""
DNS transport implementations.

Provides transport classes for the plain DNS protocols:
- UDP (standard DNS)
- TCP (DNS over TCP)

Each transport returns the response together with the measured
round-trip time in milliseconds.
"""

import asyncio
import struct
import time
from abc import ABC, abstractmethod

import dns.asyncquery
import dns.message

from .models import Transport

DNS_PORT = 53


class BaseTransport(ABC):
    """Base class for DNS transports."""

    transport_type: Transport

    def __init__(self, port: int = DNS_PORT):
        self.port = port

    @abstractmethod
    async def query(
        self,
        message: dns.message.Message,
        resolver_ip: str,
        timeout: float = 5.0,
    ) -> tuple[dns.message.Message, float]:
        """
        Send a DNS query and return the response.

        Returns:
            Tuple of (response, round_trip_ms)
        """
        pass


class UDPTransport(BaseTransport):
    """Standard DNS over UDP."""

    transport_type = Transport.UDP

    async def query(
        self,
        message: dns.message.Message,
        resolver_ip: str,
        timeout: float = 5.0,
    ) -> tuple[dns.message.Message, float]:
        """
        Send DNS query over UDP.

        Uses the native asyncio query so no thread pool sits between the
        timer and the socket.
        """
        start = time.perf_counter_ns()

        response = await dns.asyncquery.udp(
            message,
            resolver_ip,
            timeout=timeout,
            port=self.port,
        )

        end = time.perf_counter_ns()
        return response, (end - start) / 1_000_000


class TCPTransport(BaseTransport):
    """DNS over TCP."""

    transport_type = Transport.TCP

    async def query(
        self,
        message: dns.message.Message,
        resolver_ip: str,
        timeout: float = 5.0,
    ) -> tuple[dns.message.Message, float]:
        """Send DNS query over TCP, connection setup included in the timing."""
        start = time.perf_counter_ns()

        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(resolver_ip, self.port),
            timeout=timeout
        )

        try:
            # DNS over TCP requires length prefix
            wire = message.to_wire()
            writer.write(struct.pack("!H", len(wire)) + wire)
            await writer.drain()

            length_data = await asyncio.wait_for(
                reader.readexactly(2),
                timeout=timeout
            )
            response_length = struct.unpack("!H", length_data)[0]

            response_data = await asyncio.wait_for(
                reader.readexactly(response_length),
                timeout=timeout
            )
        finally:
            writer.close()
            await writer.wait_closed()

        end = time.perf_counter_ns()
        return dns.message.from_wire(response_data), (end - start) / 1_000_000


def create_transport(transport_type: Transport) -> BaseTransport:
    """
    Create a transport instance for the given type.

    Args:
        transport_type: Type of transport to create

    Returns:
        Appropriate transport instance
    """
    if transport_type == Transport.UDP:
        return UDPTransport()
    elif transport_type == Transport.TCP:
        return TCPTransport()
    else:
        raise ValueError(f"Unknown transport type: {transport_type}")
