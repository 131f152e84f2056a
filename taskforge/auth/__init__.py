"""Identity-provider login."""

from .callbacks import CallbackHandler, CallbackOutcome, CallbackResult
from .providers import (
    AuthlibProviderClient,
    AuthProviderClient,
    ProviderFailure,
    get_provider_client,
)

__all__ = [
    "AuthProviderClient",
    "AuthlibProviderClient",
    "CallbackHandler",
    "CallbackOutcome",
    "CallbackResult",
    "ProviderFailure",
    "get_provider_client",
]
