"""
Network Endpoint Registry - Named network lookup per provider.

Resolving a network is a pure lookup performed before every request;
switching from mainnet to testnet never requires a new adapter.
"""

from typing import Any, Iterable, Optional

from wallet_history.exceptions import ConfigurationError
from wallet_history.models import AuthScheme, NetworkEndpoint


class NetworkEndpointRegistry:
    """
    Immutable map of network name -> NetworkEndpoint for one provider.

    Usage:
        registry = NetworkEndpointRegistry("tzkt", [
            NetworkEndpoint("mainnet", "https://api.tzkt.io"),
            NetworkEndpoint("ghostnet", "https://api.ghostnet.tzkt.io"),
        ])
        endpoint = registry.resolve("ghostnet")
    """

    def __init__(
        self,
        provider_name: str,
        endpoints: Iterable[NetworkEndpoint],
        default_network: Optional[str] = None,
    ) -> None:
        self._provider_name = provider_name
        self._endpoints: dict[str, NetworkEndpoint] = {}
        for endpoint in endpoints:
            self._endpoints[endpoint.network_name] = endpoint

        if not self._endpoints:
            raise ConfigurationError(
                "Endpoint registry needs at least one network",
                provider=provider_name,
            )

        if default_network is None:
            default_network = next(iter(self._endpoints))
        self._default_network = self.resolve(default_network).network_name

    @property
    def provider_name(self) -> str:
        return self._provider_name

    @property
    def networks(self) -> list[str]:
        return list(self._endpoints)

    @property
    def default_network(self) -> str:
        return self._default_network

    def resolve(self, network_name: str) -> NetworkEndpoint:
        """Return the endpoint for a network or raise ConfigurationError."""
        endpoint = self._endpoints.get(network_name)
        if endpoint is None:
            raise ConfigurationError(
                f"Unknown network '{network_name}' "
                f"(registered: {', '.join(self._endpoints)})",
                provider=self._provider_name,
                network=network_name,
                config_key="network",
            )
        return endpoint

    def __contains__(self, network_name: object) -> bool:
        return network_name in self._endpoints

    def __len__(self) -> int:
        return len(self._endpoints)

    def __repr__(self) -> str:
        return f"<NetworkEndpointRegistry(provider={self._provider_name}, networks={self.networks})>"


def apply_auth(
    endpoint: NetworkEndpoint,
    url: str,
    params: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> tuple[str, dict[str, Any], dict[str, str]]:
    """
    Attach the endpoint credential to a request.

    Returns new (url, params, headers); the inputs are not modified.
    """
    params = dict(params or {})
    headers = dict(headers or {})

    if not endpoint.credential or endpoint.auth_scheme == AuthScheme.NONE:
        return url, params, headers

    if endpoint.auth_scheme == AuthScheme.HEADER_KEY:
        headers[endpoint.auth_param or "Authorization"] = endpoint.credential
    elif endpoint.auth_scheme == AuthScheme.QUERY_KEY:
        params[endpoint.auth_param or "apikey"] = endpoint.credential
    elif endpoint.auth_scheme == AuthScheme.PATH_KEY:
        url = url.rstrip("/") + "/" + endpoint.credential

    return url, params, headers
