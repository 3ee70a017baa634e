"""PaymentRecord aggregate — the payment ledger, one record per order.

The ledger is an audit view of what the gateway (or the courier, or an
administrator) last reported for an order's payment. It is keyed by the
order id, so every write is an upsert and a redelivered notification
converges to the same single record.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from ordering.domain import ordering
from ordering.errors import InvalidAmount
from ordering.gateway.signature import to_money


class PaymentProvider(Enum):
    PAYHERE = "payhere"
    COD = "cod"


@ordering.aggregate
class PaymentRecord:
    order_id = Identifier(identifier=True, required=True)
    customer_id = Identifier()
    provider = String(choices=PaymentProvider, default=PaymentProvider.PAYHERE.value)
    payment_method = String(max_length=50)
    payment_status = String(max_length=50, required=True)
    amount = Float()
    currency = String(max_length=3)
    provider_payment_id = String(max_length=255)
    payer_ref = String(max_length=255)
    card_method = String(max_length=50)
    message = String(max_length=1000)
    raw_payload = Text()  # JSON: last verified notification, as received
    needs_reconciliation = Boolean(default=False)
    last_updated_at = DateTime()

    @staticmethod
    def provider_for(payment_method: str) -> str:
        if payment_method == "CASH_ON_DELIVERY":
            return PaymentProvider.COD.value
        return PaymentProvider.PAYHERE.value

    @classmethod
    def open_for(cls, order):
        """Start a ledger record mirroring the order's identity and total."""
        return cls(
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            provider=cls.provider_for(order.payment_method),
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            amount=order.total_amount,
            currency=order.currency,
            last_updated_at=datetime.now(UTC),
        )

    def record(
        self,
        payment_status: str,
        provider_payment_id: str | None = None,
        payer_ref: str | None = None,
        card_method: str | None = None,
        message: str | None = None,
        raw_payload: dict | None = None,
    ) -> None:
        self.payment_status = payment_status
        if provider_payment_id:
            self.provider_payment_id = provider_payment_id
        if payer_ref:
            self.payer_ref = payer_ref
        if card_method:
            self.card_method = card_method
        if message is not None:
            self.message = message
        if raw_payload is not None:
            self.raw_payload = json.dumps(raw_payload, sort_keys=True, default=str)
        self.last_updated_at = datetime.now(UTC)

    def amount_matches(self, reported_amount) -> bool:
        """Compare a reported amount with the ledger's amount at 2dp.

        Unparseable amounts never match.
        """
        if self.amount is None:
            return True
        try:
            return to_money(reported_amount) == to_money(self.amount)
        except InvalidAmount:
            return False

    def flag_for_reconciliation(self) -> None:
        self.needs_reconciliation = True

    @property
    def payload(self) -> dict:
        return json.loads(self.raw_payload) if self.raw_payload else {}
