"""
Built-in resolver registry.

Provides the seed list of public DNS resolvers and an ordered
registry that the prober reads from.
"""

import logging
from typing import Iterable, Iterator, Optional

from .models import Endpoint

logger = logging.getLogger(__name__)


# Pre-configured resolver profiles, in ranking tie-break order
RESOLVERS: dict[str, Endpoint] = {
    "google": Endpoint(name="Google DNS", address="8.8.8.8", region="Global"),
    "google-secondary": Endpoint(name="Google DNS", address="8.8.4.4", region="Global"),
    "cloudflare": Endpoint(name="Cloudflare DNS", address="1.1.1.1", region="Global"),
    "cloudflare-secondary": Endpoint(name="Cloudflare DNS", address="1.0.0.1", region="Global"),
    "opendns": Endpoint(name="OpenDNS", address="208.67.222.222", region="Global"),
    "quad9": Endpoint(name="Quad9", address="9.9.9.9", region="Global"),
    "alidns": Endpoint(name="AliDNS", address="223.5.5.5", region="China"),
    "alidns-secondary": Endpoint(name="AliDNS", address="223.6.6.6", region="China"),
    "dnspod": Endpoint(name="Tencent DNSPod", address="119.29.29.29", region="China"),
    "114dns": Endpoint(name="114 DNS", address="114.114.114.114", region="China"),
    "baidu": Endpoint(name="Baidu DNS", address="180.76.76.76", region="China"),
    "cnnic": Endpoint(name="CNNIC DNS", address="1.2.4.8", region="China"),
}

# Every built-in resolver is tested unless the caller narrows the list
DEFAULT_RESOLVERS = list(RESOLVERS)


class EndpointRegistry:
    """
    Ordered, read-only-after-registration collection of endpoints.

    Registration order is the tie-break order used by the ranker, so
    the registry never reorders entries. Addresses are unique.
    """

    def __init__(self, endpoints: Optional[Iterable[Endpoint]] = None):
        self._endpoints: list[Endpoint] = []
        self._addresses: set[str] = set()
        for endpoint in endpoints or ():
            self.register(endpoint)

    def register(self, endpoint: Endpoint) -> Endpoint:
        """
        Add an endpoint to the end of the registry.

        Raises:
            ValueError: If an endpoint with the same address is present
        """
        if endpoint.address in self._addresses:
            raise ValueError(f"Endpoint already registered: {endpoint.address}")
        self._endpoints.append(endpoint)
        self._addresses.add(endpoint.address)
        logger.debug("Registered %s", endpoint.label)
        return endpoint

    def position(self, endpoint: Endpoint) -> int:
        """Registry position of an endpoint (its tie-break rank)."""
        return self._endpoints.index(endpoint)

    def has_address(self, address: str) -> bool:
        """Check whether an address is already registered."""
        return address in self._addresses

    def __iter__(self) -> Iterator[Endpoint]:
        return iter(self._endpoints)

    def __len__(self) -> int:
        return len(self._endpoints)

    def __contains__(self, endpoint: object) -> bool:
        return endpoint in self._endpoints

    @property
    def endpoints(self) -> list[Endpoint]:
        """Snapshot of the registered endpoints, in order."""
        return list(self._endpoints)


def get_resolver(name: str) -> Endpoint:
    """Get a resolver by name (case-insensitive)."""
    key = name.lower()
    if key in RESOLVERS:
        return RESOLVERS[key]
    raise ValueError(f"Unknown resolver: {name}. Available: {list(RESOLVERS.keys())}")


def create_custom_resolver(
    address: str,
    name: str = "Custom",
    region: Optional[str] = None,
) -> Endpoint:
    """Create a custom resolver endpoint."""
    return Endpoint(name=name, address=address, region=region)


def list_resolvers() -> list[str]:
    """List all available resolver names."""
    return list(RESOLVERS.keys())


def build_registry(
    names: Iterable[str] = (),
    custom: Iterable[Endpoint] = (),
) -> EndpointRegistry:
    """
    Build a registry from built-in resolver names and custom endpoints.

    Falls back to ``DEFAULT_RESOLVERS`` when neither is given. Custom
    endpoints whose address duplicates an earlier entry are skipped.

    Raises:
        ValueError: If a name is not a built-in resolver
    """
    names = list(names)
    custom = list(custom)
    if not names and not custom:
        names = DEFAULT_RESOLVERS

    registry = EndpointRegistry()
    for endpoint in [get_resolver(n) for n in names] + custom:
        if registry.has_address(endpoint.address):
            logger.warning("Skipping duplicate resolver %s", endpoint.label)
            continue
        registry.register(endpoint)
    return registry
