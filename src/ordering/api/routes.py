"""FastAPI routes for the Ordering domain — checkout, gateway webhook,
delivery, admin and order read endpoints."""

import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from protean.utils.globals import current_domain

from ordering.actors import Actor, ActorRole, require_role
from ordering.admin.overrides import DeletePayment, OverridePaymentStatus
from ordering.api.actors import get_actor
from ordering.api.schemas import (
    AssignDeliveryRequest,
    CheckoutRequest,
    CheckoutResponse,
    CodCollectedResponse,
    OrderResponse,
    OverridePaymentRequest,
    PaymentRecordResponse,
    PaymentRequestSchema,
    PaymentSummaryResponse,
    StatusResponse,
    UpdateDeliveryStatusRequest,
)
from ordering.checkout.payment_request import build_payment_request
from ordering.checkout.placement import PlaceOrder
from ordering.delivery.assignment import AssignDelivery
from ordering.delivery.cod import MarkCodCollected
from ordering.delivery.transitions import UpdateDeliveryStatus
from ordering.gateway import get_gateway_settings
from ordering.ledger.recording import list_records, summarize_records
from ordering.order.order import PaymentMethod, parse_payment_status
from ordering.order.queries import load_order, load_order_for, orders_assigned_to
from ordering.payment.notification import ProcessPaymentNotification

# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
async def checkout(body: CheckoutRequest, actor: Actor = Depends(get_actor)) -> CheckoutResponse:
    """Place an order and, for gateway payments, return the signed payment request."""
    require_role(actor, ActorRole.CUSTOMER)
    command = PlaceOrder(
        customer_id=actor.id,
        items=json.dumps([item.model_dump() for item in body.items]),
        address=json.dumps(body.address.model_dump(exclude_none=True)) if body.address else None,
        total_amount=str(body.total_amount),
        currency=body.currency,
        payment_method=body.payment_method,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = load_order(order_id)

    payment = None
    if order.payment_method == PaymentMethod.GATEWAY.value:
        request = build_payment_request(order, get_gateway_settings())
        payment = PaymentRequestSchema(**request.as_dict())

    return CheckoutResponse(
        order_id=str(order.id),
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        order_status=order.order_status,
        payment=payment,
    )


# ---------------------------------------------------------------------------
# Gateway Webhook Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


def _first(payload: dict, *keys: str) -> str | None:
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return str(value)
    return None


async def _read_notification(request: Request) -> dict:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        payload = await request.json()
        return payload if isinstance(payload, dict) else {}
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


@payment_router.post("/webhook", response_class=PlainTextResponse)
async def payment_webhook(request: Request) -> PlainTextResponse:
    """Gateway payment notification. Acknowledged with a plain ``OK``."""
    payload = await _read_notification(request)
    command = ProcessPaymentNotification(
        merchant_id=_first(payload, "merchant_id"),
        order_id=_first(payload, "order_id"),
        payment_ref=_first(payload, "payment_id"),
        amount=_first(payload, "payhere_amount", "amount"),
        currency=_first(payload, "payhere_currency", "currency"),
        status_code=_first(payload, "status_code"),
        signature=_first(payload, "md5sig", "signature"),
        card_method=_first(payload, "method"),
        status_message=_first(payload, "status_message", "message"),
        payer_ref=_first(payload, "customer_token"),
        raw_payload=json.dumps(payload, sort_keys=True),
    )
    current_domain.process(command, asynchronous=False)
    return PlainTextResponse("OK")


# ---------------------------------------------------------------------------
# Delivery Router
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/delivery", tags=["delivery"])


@delivery_router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_delivery_status(
    order_id: str,
    body: UpdateDeliveryStatusRequest,
    actor: Actor = Depends(get_actor),
) -> OrderResponse:
    command = UpdateDeliveryStatus(
        order_id=order_id,
        actor_id=actor.id,
        actor_role=actor.role.value,
        status=body.status,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(load_order(order_id))


@delivery_router.patch("/orders/{order_id}/cod-collected", response_model=CodCollectedResponse)
async def mark_cod_collected(order_id: str, actor: Actor = Depends(get_actor)) -> CodCollectedResponse:
    command = MarkCodCollected(order_id=order_id, actor_id=actor.id, actor_role=actor.role.value)
    collected = current_domain.process(command, asynchronous=False)
    order = load_order(order_id)
    return CodCollectedResponse(
        order_id=str(order.id),
        payment_status=order.payment_status,
        order_status=order.order_status,
        already_paid=not collected,
    )


@delivery_router.get("/orders/my", response_model=list[OrderResponse])
async def my_deliveries(actor: Actor = Depends(get_actor)) -> list[OrderResponse]:
    """Orders assigned to the calling delivery actor."""
    require_role(actor, ActorRole.DELIVERY)
    return [OrderResponse.from_order(order) for order in orders_assigned_to(actor.id)]


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.post("/orders/{order_id}/assign", response_model=OrderResponse)
async def assign_delivery(
    order_id: str,
    body: AssignDeliveryRequest,
    actor: Actor = Depends(get_actor),
) -> OrderResponse:
    command = AssignDelivery(
        order_id=order_id,
        delivery_actor_id=body.delivery_actor_id,
        actor_id=actor.id,
        actor_role=actor.role.value,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(load_order(order_id))


@admin_router.patch("/payments/{order_id}", response_model=OrderResponse)
async def override_payment(
    order_id: str,
    body: OverridePaymentRequest,
    actor: Actor = Depends(get_actor),
) -> OrderResponse:
    command = OverridePaymentStatus(
        order_id=order_id,
        payment_status=body.payment_status,
        order_status=body.order_status,
        actor_id=actor.id,
        actor_role=actor.role.value,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(load_order(order_id))


@admin_router.delete("/payments/{order_id}", response_model=StatusResponse)
async def delete_payment(order_id: str, actor: Actor = Depends(get_actor)) -> StatusResponse:
    command = DeletePayment(order_id=order_id, actor_id=actor.id, actor_role=actor.role.value)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="deleted")


@admin_router.get("/payments/summary", response_model=PaymentSummaryResponse)
async def payment_summary(actor: Actor = Depends(get_actor)) -> PaymentSummaryResponse:
    require_role(actor, ActorRole.ADMIN)
    return PaymentSummaryResponse(**summarize_records())


@admin_router.get("/payments", response_model=list[PaymentRecordResponse])
async def list_payments(status: str | None = None, actor: Actor = Depends(get_actor)) -> list[PaymentRecordResponse]:
    require_role(actor, ActorRole.ADMIN)
    payment_status = parse_payment_status(status.upper()).value if status else None
    return [PaymentRecordResponse.from_record(record) for record in list_records(payment_status)]


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Actor = Depends(get_actor)) -> OrderResponse:
    return OrderResponse.from_order(load_order_for(actor, order_id))
