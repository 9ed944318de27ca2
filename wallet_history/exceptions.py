"""
Wallet History Exceptions - Custom exception hierarchy.

Every error carries enough context (provider, network, wallet address,
HTTP status) to be logged and displayed without re-querying the provider.
Empty transaction histories are NOT errors and never raise.
"""

from datetime import datetime
from typing import Any, Optional


class WalletHistoryError(Exception):
    """Base exception for all wallet history errors."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        network: Optional[str] = None,
        address: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.network = network
        self.address = address
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "provider": self.provider,
            "network": self.network,
            "address": self.address,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.provider:
            parts.append(f"[provider={self.provider}]")
        if self.network:
            parts.append(f"[network={self.network}]")
        if self.address:
            parts.append(f"[address={self.address}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class ConfigurationError(WalletHistoryError):
    """Unknown network name or missing mandatory credential. Not retryable."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        network: Optional[str] = None,
        config_key: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, provider, network, None, original_error, context)
        self.config_key = config_key

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["config_key"] = self.config_key
        return data


class ProviderError(WalletHistoryError):
    """
    Upstream provider failure.

    Raised for non-2xx responses, malformed envelopes, timeouts and
    connection errors. Callers may retry at their discretion.
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        network: Optional[str] = None,
        address: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, provider, network, address, original_error, context)
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "response_body": self.response_body,
            "request_url": self.request_url,
        })
        return data

    def __str__(self) -> str:
        text = super().__str__()
        if self.status_code is not None:
            text += f" [status={self.status_code}]"
        return text


class RateLimitError(ProviderError):
    """Provider answered HTTP 429."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        network: Optional[str] = None,
        address: Optional[str] = None,
        retry_after_seconds: Optional[int] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            provider=provider,
            network=network,
            address=address,
            status_code=429,
            request_url=request_url,
            original_error=original_error,
            context=context,
        )
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["retry_after_seconds"] = self.retry_after_seconds
        return data


class UnsupportedCurrencyError(WalletHistoryError):
    """No adapter is registered for the requested currency symbol."""

    def __init__(
        self,
        currency_symbol: str,
        supported: Optional[list[str]] = None,
    ) -> None:
        super().__init__(f"No adapter registered for currency '{currency_symbol}'")
        self.currency_symbol = currency_symbol
        self.supported = supported or []

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "currency_symbol": self.currency_symbol,
            "supported": self.supported,
        })
        return data


class NormalizationError(WalletHistoryError):
    """A raw response shape has no registered normalizer."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        raw_type: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, provider, None, None, original_error, context)
        self.raw_type = raw_type

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["raw_type"] = self.raw_type
        return data
