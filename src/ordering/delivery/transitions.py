"""Delivery-side status updates — command and handler.

Delivery staff move their assigned orders forward along the fulfilment graph.
Administrators may move any order, and are the only ones who can cancel.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.actors import Actor, ActorRole, parse_role, require_role
from ordering.domain import ordering
from ordering.errors import Forbidden
from ordering.notifier import notify_customer
from ordering.order.order import Order, parse_order_status
from ordering.order.queries import load_order

logger = structlog.get_logger(__name__)


def require_assignee(actor: Actor, order) -> None:
    """Delivery actors may only act on orders assigned to them."""
    if actor.role == ActorRole.DELIVERY and str(order.assigned_to or "") != actor.id:
        raise Forbidden(
            "Order is not assigned to you",
            order_id=str(order.id),
            actor_id=actor.id,
        )


@ordering.command(part_of="Order")
class UpdateDeliveryStatus:
    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20)
    status = String(required=True, max_length=50)


@ordering.command_handler(part_of=Order)
class UpdateDeliveryStatusHandler:
    @handle(UpdateDeliveryStatus)
    def update_status(self, command):
        actor = Actor(id=command.actor_id, role=parse_role(command.actor_role))
        require_role(actor, ActorRole.DELIVERY, ActorRole.ADMIN)
        target = parse_order_status(command.status)

        order = load_order(command.order_id)
        require_assignee(actor, order)

        previous = order.order_status
        order.advance_status(target, actor_id=actor.id, by_admin=actor.is_admin)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order.status_changed",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.order_status,
            actor_id=actor.id,
            actor_role=actor.role.value,
        )
        notify_customer(
            order,
            "Order update",
            f"Your order {order.id} is now {order.order_status.replace('_', ' ').lower()}.",
        )
        return order.order_status
