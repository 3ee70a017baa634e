"""Signed payment request handed to the buyer's browser for the gateway.

The browser posts these fields to the gateway's checkout page; ``hash`` binds
merchant, order, amount and currency so none of them can be altered in transit.
"""

from dataclasses import asdict, dataclass

from ordering.gateway.settings import GatewaySettings
from ordering.gateway.signature import compute_checkout_signature, format_amount

DEFAULT_COUNTRY = "Sri Lanka"
ITEMS_DESCRIPTION = "Cart Purchase"


@dataclass(frozen=True)
class PaymentRequest:
    sandbox: bool
    merchant_id: str
    return_url: str
    cancel_url: str
    notify_url: str
    order_id: str
    items: str
    amount: str
    currency: str
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    country: str
    hash: str

    def as_dict(self) -> dict:
        return asdict(self)


def _split_name(full_name: str | None) -> tuple[str, str]:
    parts = (full_name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def build_payment_request(order, settings: GatewaySettings) -> PaymentRequest:
    """Build the signed gateway payload for a GATEWAY order."""
    settings.require_credentials()
    order_id = str(order.id)
    address = order.address
    first_name, last_name = _split_name(address.full_name if address else None)

    return PaymentRequest(
        sandbox=settings.sandbox,
        merchant_id=settings.merchant_id,
        return_url=f"{settings.app_base_url}/payment/return?orderId={order_id}",
        cancel_url=f"{settings.app_base_url}/payment/cancel?orderId={order_id}",
        notify_url=f"{settings.api_base_url}/payments/webhook",
        order_id=order_id,
        items=ITEMS_DESCRIPTION,
        amount=format_amount(order.total_amount),
        currency=order.currency,
        first_name=first_name,
        last_name=last_name,
        email=(address.email if address else None) or "",
        phone=(address.phone if address else None) or "",
        address=(address.address if address else None) or "",
        city=(address.city if address else None) or "",
        country=(address.country if address else None) or DEFAULT_COUNTRY,
        hash=compute_checkout_signature(
            settings.merchant_id,
            order_id,
            order.total_amount,
            order.currency,
            settings.merchant_secret,
        ),
    )
