"""Tests for dnsrank.resolvers: the endpoint registry."""

import pytest

from dnsrank.models import Endpoint
from dnsrank.resolvers import (
    DEFAULT_RESOLVERS,
    RESOLVERS,
    EndpointRegistry,
    build_registry,
    create_custom_resolver,
    get_resolver,
    list_resolvers,
)


class TestBuiltinResolvers:
    """The seed list of public resolvers."""

    def test_twelve_resolvers(self) -> None:
        assert len(RESOLVERS) == 12

    def test_addresses_unique(self) -> None:
        addresses = [e.address for e in RESOLVERS.values()]
        assert len(addresses) == len(set(addresses))

    def test_every_resolver_has_region(self) -> None:
        assert {e.region for e in RESOLVERS.values()} == {"Global", "China"}

    def test_defaults_cover_everything(self) -> None:
        assert DEFAULT_RESOLVERS == list_resolvers()

    def test_get_resolver_case_insensitive(self) -> None:
        assert get_resolver("Quad9").address == "9.9.9.9"

    def test_get_unknown_resolver(self) -> None:
        with pytest.raises(ValueError, match="Unknown resolver: nope"):
            get_resolver("nope")

    def test_custom_resolver(self) -> None:
        endpoint = create_custom_resolver("192.0.2.1", name="Lab", region="Home")
        assert endpoint == Endpoint(name="Lab", address="192.0.2.1", region="Home")


class TestEndpointRegistry:
    """EndpointRegistry keeps registration order."""

    def test_preserves_order(self) -> None:
        a = Endpoint(name="A", address="192.0.2.1")
        b = Endpoint(name="B", address="192.0.2.2")
        registry = EndpointRegistry([b, a])

        assert list(registry) == [b, a]
        assert registry.position(a) == 1
        assert len(registry) == 2
        assert a in registry

    def test_duplicate_address_rejected(self) -> None:
        registry = EndpointRegistry([Endpoint(name="A", address="192.0.2.1")])
        with pytest.raises(ValueError, match="already registered"):
            registry.register(Endpoint(name="B", address="192.0.2.1"))

    def test_endpoints_is_a_copy(self) -> None:
        registry = EndpointRegistry([Endpoint(name="A", address="192.0.2.1")])
        registry.endpoints.clear()
        assert len(registry) == 1

    def test_empty(self) -> None:
        assert list(EndpointRegistry()) == []


class TestBuildRegistry:
    """build_registry() combines built-in names and custom endpoints."""

    def test_defaults_when_nothing_given(self) -> None:
        registry = build_registry()
        assert len(registry) == len(RESOLVERS)
        assert registry.endpoints[0] == RESOLVERS["google"]

    def test_named_in_given_order(self) -> None:
        registry = build_registry(["quad9", "google"])
        assert [e.address for e in registry] == ["9.9.9.9", "8.8.8.8"]

    def test_custom_only(self) -> None:
        custom = Endpoint(name="Lab", address="192.0.2.1")
        assert build_registry(custom=[custom]).endpoints == [custom]

    def test_custom_after_named(self) -> None:
        custom = Endpoint(name="Lab", address="192.0.2.1")
        registry = build_registry(["quad9"], [custom])
        assert registry.endpoints == [RESOLVERS["quad9"], custom]

    def test_duplicates_skipped(self) -> None:
        dup = Endpoint(name="Same", address="9.9.9.9")
        registry = build_registry(["quad9"], [dup])
        assert registry.endpoints == [RESOLVERS["quad9"]]

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown resolver"):
            build_registry(["nope"])
