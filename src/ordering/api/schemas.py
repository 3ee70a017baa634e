"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    full_name: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str | None = None
    phone: str | None = None
    email: str | None = None
    notes: str | None = None


class OrderItemSchema(BaseModel):
    product_ref: str
    title: str
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1)


class StatusChangeSchema(BaseModel):
    status: str
    actor: str
    changed_at: datetime


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    items: list[OrderItemSchema]
    address: AddressSchema | None = None
    total_amount: float | str
    currency: str | None = None
    payment_method: str = "GATEWAY"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {"product_ref": "prod-001", "title": "Tea Caddy", "unit_price": 1250.0, "quantity": 2},
                    ],
                    "address": {
                        "full_name": "Nimal Perera",
                        "address": "12 Galle Road",
                        "city": "Colombo",
                        "phone": "0771234567",
                        "email": "nimal@example.com",
                    },
                    "total_amount": 2500.0,
                    "payment_method": "GATEWAY",
                }
            ]
        }
    }


class PaymentRequestSchema(BaseModel):
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


class CheckoutResponse(BaseModel):
    order_id: str
    payment_method: str
    payment_status: str
    order_status: str
    payment: PaymentRequestSchema | None = None


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------
class UpdateDeliveryStatusRequest(BaseModel):
    status: str


class CodCollectedResponse(BaseModel):
    order_id: str
    payment_status: str
    order_status: str
    already_paid: bool


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
class AssignDeliveryRequest(BaseModel):
    delivery_actor_id: str


class OverridePaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_status: str = Field(alias="paymentStatus")
    order_status: str | None = Field(default=None, alias="orderStatus")


class PaymentRecordResponse(BaseModel):
    order_id: str
    customer_id: str | None = None
    provider: str | None = None
    payment_method: str | None = None
    payment_status: str
    amount: float | None = None
    currency: str | None = None
    provider_payment_id: str | None = None
    payer_ref: str | None = None
    card_method: str | None = None
    message: str | None = None
    needs_reconciliation: bool = False
    last_updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record) -> "PaymentRecordResponse":
        return cls(
            order_id=str(record.order_id),
            customer_id=str(record.customer_id) if record.customer_id else None,
            provider=record.provider,
            payment_method=record.payment_method,
            payment_status=record.payment_status,
            amount=record.amount,
            currency=record.currency,
            provider_payment_id=record.provider_payment_id,
            payer_ref=record.payer_ref,
            card_method=record.card_method,
            message=record.message,
            needs_reconciliation=bool(record.needs_reconciliation),
            last_updated_at=record.last_updated_at,
        )


class SummaryBucket(BaseModel):
    count: int
    total_amount: float


class PaymentSummaryResponse(BaseModel):
    by_status: dict[str, SummaryBucket]
    by_method: dict[str, SummaryBucket]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    order_status: str
    payment_method: str
    payment_status: str
    total_amount: float
    currency: str
    assigned_to: str | None = None
    items: list[OrderItemSchema]
    address: AddressSchema | None = None
    status_history: list[StatusChangeSchema]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        address = order.address
        return cls(
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            order_status=order.order_status,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            total_amount=order.total_amount,
            currency=order.currency,
            assigned_to=str(order.assigned_to) if order.assigned_to else None,
            items=[
                OrderItemSchema(
                    product_ref=line.product_ref,
                    title=line.title,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                )
                for line in order.items
            ],
            address=AddressSchema(**address.to_dict()) if address else None,
            status_history=[
                StatusChangeSchema(status=change.status, actor=change.actor, changed_at=change.changed_at)
                for change in order.history
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class StatusResponse(BaseModel):
    status: str
