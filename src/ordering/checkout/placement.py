"""Checkout: turn a buyer's cart snapshot into a PENDING order."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.gateway import get_gateway_settings
from ordering.order.order import Order, PaymentMethod, parse_payment_method

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    address = Text()  # JSON: address snapshot dict
    total_amount = String(required=True, max_length=50)
    currency = String(max_length=3)
    payment_method = String(required=True, max_length=50)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        payment_method = parse_payment_method(command.payment_method)
        settings = get_gateway_settings()
        if payment_method == PaymentMethod.GATEWAY:
            # No order may exist that the gateway could never be asked to pay
            settings.require_credentials()

        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        address_data = json.loads(command.address) if isinstance(command.address, str) else command.address

        order = Order.place(
            customer_id=command.customer_id,
            items_data=items_data,
            address_data=address_data,
            total_amount=command.total_amount,
            currency=command.currency or settings.currency,
            payment_method=payment_method,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order.placed",
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            payment_method=order.payment_method,
            total_amount=order.total_amount,
        )
        return str(order.id)
