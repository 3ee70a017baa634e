"""Payment gateway configuration.

Settings are installed once at startup with configure_gateway() and read by
checkout and webhook handlers through get_gateway_settings(). Nothing is
constructed lazily: an unconfigured process raises ConfigurationError.
"""

from ordering.errors import ConfigurationError
from ordering.gateway.settings import GatewaySettings

_settings: GatewaySettings | None = None


def configure_gateway(settings: GatewaySettings) -> None:
    """Install the gateway settings for this process."""
    global _settings
    _settings = settings


def get_gateway_settings() -> GatewaySettings:
    if _settings is None:
        raise ConfigurationError("Payment gateway settings were not configured at startup")
    return _settings


def reset_gateway() -> None:
    """Forget the installed settings (useful for tests)."""
    global _settings
    _settings = None
