"""
Tests for the Network Endpoint Registry and credential injection.
"""

import pytest

from wallet_history.endpoints import NetworkEndpointRegistry, apply_auth
from wallet_history.exceptions import ConfigurationError
from wallet_history.models import AuthScheme, NetworkEndpoint


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def tzkt_registry():
    """Registry with three named networks."""
    return NetworkEndpointRegistry("tzkt", [
        NetworkEndpoint("mainnet", "https://api.tzkt.io"),
        NetworkEndpoint("ghostnet", "https://api.ghostnet.tzkt.io"),
        NetworkEndpoint("testnet", "https://api.testnet.tzkt.io"),
    ])


# ============================================================
# REGISTRY TESTS
# ============================================================

class TestNetworkEndpointRegistry:
    """Tests for named network lookup."""

    def test_resolve(self, tzkt_registry):
        """Test resolving a registered network."""
        endpoint = tzkt_registry.resolve("ghostnet")

        assert endpoint.network_name == "ghostnet"
        assert endpoint.base_url == "https://api.ghostnet.tzkt.io"

    def test_resolve_is_repeatable(self, tzkt_registry):
        """Test switching back and forth between networks."""
        assert tzkt_registry.resolve("testnet").base_url.endswith("testnet.tzkt.io")
        assert tzkt_registry.resolve("mainnet").base_url == "https://api.tzkt.io"
        assert tzkt_registry.resolve("testnet").base_url.endswith("testnet.tzkt.io")

    def test_unknown_network(self, tzkt_registry):
        """Test an unknown name raises ConfigurationError listing known names."""
        with pytest.raises(ConfigurationError) as exc_info:
            tzkt_registry.resolve("devnet")

        error = exc_info.value
        assert error.provider == "tzkt"
        assert error.network == "devnet"
        assert error.config_key == "network"
        assert "ghostnet" in error.message

    def test_default_network(self, tzkt_registry):
        """Test the first network is the default when none is given."""
        assert tzkt_registry.default_network == "mainnet"

    def test_explicit_default(self):
        """Test an explicit default network."""
        registry = NetworkEndpointRegistry(
            "xrpl",
            [
                NetworkEndpoint("mainnet", "https://xrplcluster.com/"),
                NetworkEndpoint("testnet", "https://s.altnet.rippletest.net:51234/"),
            ],
            default_network="testnet",
        )
        assert registry.default_network == "testnet"

    def test_invalid_default(self):
        """Test an unregistered default is rejected."""
        with pytest.raises(ConfigurationError):
            NetworkEndpointRegistry(
                "xrpl",
                [NetworkEndpoint("mainnet", "https://xrplcluster.com/")],
                default_network="devnet",
            )

    def test_empty_registry(self):
        """Test at least one network is required."""
        with pytest.raises(ConfigurationError):
            NetworkEndpointRegistry("empty", [])

    def test_membership(self, tzkt_registry):
        """Test container protocol."""
        assert "ghostnet" in tzkt_registry
        assert "devnet" not in tzkt_registry
        assert len(tzkt_registry) == 3
        assert tzkt_registry.networks == ["mainnet", "ghostnet", "testnet"]


# ============================================================
# AUTH TESTS
# ============================================================

class TestApplyAuth:
    """Tests for credential injection per auth scheme."""

    def test_none(self):
        """Test unauthenticated endpoints are unchanged."""
        endpoint = NetworkEndpoint("mainnet", "https://api.tzkt.io")
        url, params, headers = apply_auth(endpoint, "https://api.tzkt.io/v1", {"limit": 5})

        assert url == "https://api.tzkt.io/v1"
        assert params == {"limit": 5}
        assert headers == {}

    def test_header_key(self):
        """Test header credential."""
        endpoint = NetworkEndpoint(
            "mainnet", "https://api.hiro.so", AuthScheme.HEADER_KEY, "hiro-key", "x-api-key"
        )
        _, params, headers = apply_auth(endpoint, "https://api.hiro.so/x")

        assert headers == {"x-api-key": "hiro-key"}
        assert params == {}

    def test_query_key(self):
        """Test query parameter credential."""
        endpoint = NetworkEndpoint(
            "mainnet", "https://api.helius.xyz", AuthScheme.QUERY_KEY, "helius-key", "api-key"
        )
        _, params, _ = apply_auth(endpoint, "https://api.helius.xyz/v0", {"limit": 100})

        assert params == {"limit": 100, "api-key": "helius-key"}

    def test_path_key(self):
        """Test URL path credential."""
        endpoint = NetworkEndpoint(
            "mainnet", "https://eth-mainnet.g.alchemy.com/v2", AuthScheme.PATH_KEY, "alchemy-key"
        )
        url, _, _ = apply_auth(endpoint, "https://eth-mainnet.g.alchemy.com/v2/")

        assert url == "https://eth-mainnet.g.alchemy.com/v2/alchemy-key"

    def test_missing_credential(self):
        """Test a scheme without credential leaves the request alone."""
        endpoint = NetworkEndpoint("mainnet", "https://api.blockchair.com", AuthScheme.QUERY_KEY, None, "key")
        _, params, _ = apply_auth(endpoint, "https://api.blockchair.com/bitcoin", {"limit": 1})

        assert params == {"limit": 1}
        assert not endpoint.is_authenticated

    def test_inputs_not_mutated(self):
        """Test the caller's dicts are copied."""
        endpoint = NetworkEndpoint(
            "mainnet", "https://api.hiro.so", AuthScheme.HEADER_KEY, "hiro-key", "x-api-key"
        )
        params = {"limit": 1}
        headers = {"Accept": "application/json"}

        apply_auth(endpoint, "https://api.hiro.so", params, headers)

        assert params == {"limit": 1}
        assert headers == {"Accept": "application/json"}

    def test_credential_not_serialized(self):
        """Test to_dict never exposes the credential."""
        endpoint = NetworkEndpoint(
            "mainnet", "https://api.helius.xyz", AuthScheme.QUERY_KEY, "helius-key", "api-key"
        )
        data = endpoint.to_dict()

        assert data["has_credential"] is True
        assert "helius-key" not in str(data)
