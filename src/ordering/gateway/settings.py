"""Process-wide gateway configuration, read once at startup."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from ordering.errors import ConfigurationError

DEFAULT_CURRENCY = "LKR"


@dataclass(frozen=True)
class GatewaySettings:
    """Merchant credentials and public URLs for the payment gateway.

    ``mode`` is ``live`` for the production gateway; any other value selects
    the sandbox.
    """

    merchant_id: str = ""
    merchant_secret: str = ""
    mode: str = "sandbox"
    currency: str = DEFAULT_CURRENCY
    app_base_url: str = ""
    api_base_url: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GatewaySettings":
        env = os.environ if environ is None else environ
        return cls(
            merchant_id=env.get("GATEWAY_MERCHANT_ID", "").strip(),
            merchant_secret=env.get("GATEWAY_MERCHANT_SECRET", "").strip(),
            mode=env.get("GATEWAY_MODE", "sandbox").strip().lower() or "sandbox",
            currency=env.get("GATEWAY_CURRENCY", DEFAULT_CURRENCY).strip().upper() or DEFAULT_CURRENCY,
            app_base_url=env.get("APP_BASE_URL", "").strip().rstrip("/"),
            api_base_url=env.get("API_BASE_URL", "").strip().rstrip("/"),
        )

    @property
    def sandbox(self) -> bool:
        return self.mode != "live"

    @property
    def has_credentials(self) -> bool:
        return bool(self.merchant_id and self.merchant_secret)

    def require_credentials(self) -> None:
        """Fail fast when the merchant credentials are absent."""
        missing = [
            name
            for name, value in (
                ("GATEWAY_MERCHANT_ID", self.merchant_id),
                ("GATEWAY_MERCHANT_SECRET", self.merchant_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Payment gateway is not configured: missing {', '.join(missing)}",
                missing=missing,
            )
