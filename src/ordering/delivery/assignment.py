"""Delivery assignment: command and handler (admin only)."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.actors import Actor, ActorRole, parse_role, require_role
from ordering.domain import ordering
from ordering.notifier import send_notification
from ordering.order.order import Order
from ordering.order.queries import load_order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class AssignDelivery:
    order_id = Identifier(required=True)
    delivery_actor_id = String(required=True, max_length=255)
    actor_id = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20)


@ordering.command_handler(part_of=Order)
class AssignDeliveryHandler:
    @handle(AssignDelivery)
    def assign(self, command):
        actor = Actor(id=command.actor_id, role=parse_role(command.actor_role))
        require_role(actor, ActorRole.ADMIN)

        order = load_order(command.order_id)
        order.assign_to(command.delivery_actor_id, admin_id=actor.id)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order.delivery_assigned",
            order_id=str(order.id),
            assigned_to=command.delivery_actor_id,
            admin_id=actor.id,
        )

        send_notification(
            command.delivery_actor_id,
            "New delivery",
            f"Order {order.id} has been assigned to you.",
            order_id=str(order.id),
        )
        return order.order_status
