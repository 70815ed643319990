"""
Query workload for DNS probing.

Picks the name each probe attempt asks for: attempts rotate through
a small list of popular domains, optionally with a random label in
front to force the resolver past its cache.
"""

import secrets
import string
from typing import Optional


# Domains queried by default, one per attempt in rotation
DEFAULT_TEST_DOMAINS = [
    "www.google.com",
    "www.baidu.com",
    "www.qq.com",
    "www.taobao.com",
]


class WorkloadGenerator:
    """Hands out the query name for each probe attempt."""

    def __init__(
        self,
        domains: Optional[list[str]] = None,
        cache_bypass: bool = False,
    ):
        """
        Initialize the workload generator.

        Args:
            domains: Custom domain list (uses DEFAULT_TEST_DOMAINS if None)
            cache_bypass: Generate random subdomains to bypass cache
        """
        self.domains = list(domains) if domains else list(DEFAULT_TEST_DOMAINS)
        self.cache_bypass = cache_bypass

    def _generate_random_prefix(self, length: int = 8) -> str:
        """Generate a random subdomain prefix for cache bypass."""
        chars = string.ascii_lowercase + string.digits
        return ''.join(secrets.choice(chars) for _ in range(length))

    def domain_for_attempt(self, attempt: int) -> str:
        """
        Name to query on the given attempt (0-based).

        With cache bypass a fresh random label is prepended on every
        call, so the resolver cannot answer from cache.
        """
        domain = self.domains[attempt % len(self.domains)]
        if self.cache_bypass:
            return f"{self._generate_random_prefix()}.{domain}"
        return domain
