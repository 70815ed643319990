"""
Core DNS query engine.

Real-network probe: sends one DNS query per attempt to the endpoint
and turns the response into a Measurement with high-resolution timing.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Optional

import dns.exception
import dns.message
import dns.rcode
import dns.rdatatype

from .models import Endpoint, Measurement, Transport
from .probes import BaseProbe
from .transports import BaseTransport, create_transport
from .workload import WorkloadGenerator

logger = logging.getLogger(__name__)

# Response codes that prove the resolver answered the question
ANSWERED_RCODES = (dns.rcode.NOERROR, dns.rcode.NXDOMAIN)


class DNSQueryEngine(BaseProbe):
    """
    DNS probe over UDP or TCP.

    Each call to :meth:`probe` asks for the ``A`` record of the next
    domain in the workload rotation for that endpoint.
    """

    def __init__(
        self,
        domains: Optional[list[str]] = None,
        transport: Transport = Transport.UDP,
        timeout: float = 2.0,
        cache_bypass: bool = False,
    ):
        """
        Initialize the query engine.

        Args:
            domains: Domains to query, rotated per attempt
            transport: Transport protocol to use
            timeout: Query timeout in seconds
            cache_bypass: Prefix a random label to every query name
        """
        self.timeout = timeout
        self.transport_type = transport
        self.workload = WorkloadGenerator(domains, cache_bypass=cache_bypass)
        self._transport: BaseTransport = create_transport(transport)
        self._attempts: dict[str, int] = defaultdict(int)

    def _create_query_message(self, domain: str) -> dns.message.Message:
        """Create a DNS query message."""
        return dns.message.make_query(domain, dns.rdatatype.A)

    def _extract_addresses(self, response: dns.message.Message) -> list[str]:
        """Extract A record addresses from a response."""
        addresses = []
        for rrset in response.answer:
            if rrset.rdtype != dns.rdatatype.A:
                continue
            for rdata in rrset:
                addresses.append(str(rdata))
        return addresses

    def _next_domain(self, endpoint: Endpoint) -> str:
        attempt = self._attempts[endpoint.address]
        self._attempts[endpoint.address] += 1
        return self.workload.domain_for_attempt(attempt)

    async def probe(self, endpoint: Endpoint) -> Measurement:
        """
        Execute a single DNS query against the endpoint.

        Args:
            endpoint: Resolver to query

        Returns:
            Measurement with the round-trip time, or a failure
        """
        domain = self._next_domain(endpoint)
        message = self._create_query_message(domain)

        try:
            response, elapsed_ms = await self._transport.query(
                message,
                endpoint.address,
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, dns.exception.Timeout):
            logger.debug("%s: %s timed out", endpoint.label, domain)
            return Measurement.timed_out(self.timeout)
        except (OSError, dns.exception.DNSException) as exc:
            logger.debug("%s: %s failed: %s", endpoint.label, domain, exc)
            return Measurement.failure(str(exc))

        rcode = response.rcode()
        if rcode not in ANSWERED_RCODES:
            return Measurement.failure(f"{dns.rcode.to_text(rcode)} for {domain}")

        addresses = self._extract_addresses(response)
        return Measurement.success(
            elapsed_ms,
            connectivity=bool(addresses),
            first_answer=addresses[0] if addresses else None,
        )
