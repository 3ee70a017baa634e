import json

import pytest
from ordering.checkout.placement import PlaceOrder
from ordering.gateway import configure_gateway, reset_gateway
from ordering.gateway.settings import GatewaySettings
from ordering.gateway.signature import compute_notification_signature
from ordering.notifier import reset_notifier, set_notifier
from ordering.notifier.fake_adapter import FakeNotifier
from ordering.payment.notification import ProcessPaymentNotification
from protean import current_domain
from protean.integrations.pytest import DomainFixture

MERCHANT_ID = "1211149"
MERCHANT_SECRET = "MzE0NjQ4NjU0MjE4NzQ1MjY0"

DEFAULT_ITEMS = [
    {"product_ref": "prod-001", "title": "Ceylon Tea Caddy", "unit_price": 1250.0, "quantity": 2},
]
DEFAULT_ADDRESS = {
    "full_name": "Nimal Perera",
    "address": "12 Galle Road",
    "city": "Colombo",
    "postal_code": "00300",
    "phone": "0771234567",
    "email": "nimal@example.com",
}


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def gateway_settings():
    settings = GatewaySettings(
        merchant_id=MERCHANT_ID,
        merchant_secret=MERCHANT_SECRET,
        mode="sandbox",
        currency="LKR",
        app_base_url="https://shop.example.lk",
        api_base_url="https://api.shop.example.lk",
    )
    configure_gateway(settings)
    yield settings
    reset_gateway()


@pytest.fixture(autouse=True)
def notifier():
    fake = FakeNotifier()
    set_notifier(fake)
    yield fake
    reset_notifier()


@pytest.fixture()
def place_order():
    """Place an order through the checkout handler and return its id."""

    def _place(
        customer_id="cust-001",
        payment_method="GATEWAY",
        total_amount="2500.00",
        items=None,
        address=None,
    ):
        return current_domain.process(
            PlaceOrder(
                customer_id=customer_id,
                items=json.dumps(DEFAULT_ITEMS if items is None else items),
                address=json.dumps(DEFAULT_ADDRESS if address is None else address),
                total_amount=str(total_amount),
                currency="LKR",
                payment_method=payment_method,
            ),
            asynchronous=False,
        )

    return _place


@pytest.fixture()
def signed_payload():
    """Build a gateway notification as the gateway would post it."""

    def _build(
        order_id,
        status_code="2",
        amount="2500.00",
        currency="LKR",
        payment_id="320025071278",
        merchant_id=MERCHANT_ID,
        secret=MERCHANT_SECRET,
    ):
        return {
            "merchant_id": merchant_id,
            "order_id": order_id,
            "payment_id": payment_id,
            "payhere_amount": amount,
            "payhere_currency": currency,
            "status_code": status_code,
            "md5sig": compute_notification_signature(merchant_id, order_id, amount, currency, status_code, secret),
            "method": "VISA",
            "status_message": "Successfully completed the payment.",
        }

    return _build


@pytest.fixture()
def notify(signed_payload):
    """Process a signed gateway notification through the webhook handler."""

    def _notify(order_id, signature=None, **kwargs):
        payload = signed_payload(order_id, **kwargs)
        return current_domain.process(
            ProcessPaymentNotification(
                merchant_id=payload["merchant_id"],
                order_id=order_id,
                payment_ref=payload["payment_id"],
                amount=payload["payhere_amount"],
                currency=payload["payhere_currency"],
                status_code=payload["status_code"],
                signature=payload["md5sig"] if signature is None else signature,
                card_method=payload["method"],
                status_message=payload["status_message"],
                raw_payload=json.dumps(payload),
            ),
            asynchronous=False,
        )

    return _notify
