"""Order lookups shared by handlers and read endpoints."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.actors import Actor, ActorRole
from ordering.errors import Forbidden, OrderNotFound
from ordering.order.order import Order


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError:
        raise OrderNotFound(f"Order {order_id} not found", order_id=str(order_id)) from None


def load_order_for(actor: Actor, order_id) -> Order:
    """Load an order the actor may read: their own, assigned to them, or any for admins."""
    order = load_order(order_id)
    if actor.role == ActorRole.ADMIN:
        return order
    if actor.role == ActorRole.CUSTOMER and str(order.customer_id) == actor.id:
        return order
    if actor.role == ActorRole.DELIVERY and str(order.assigned_to or "") == actor.id:
        return order
    raise Forbidden("You may not view this order", order_id=str(order_id), actor_id=actor.id)


def orders_assigned_to(delivery_actor_id: str) -> list[Order]:
    orders = current_domain.repository_for(Order)._dao.query.filter(assigned_to=delivery_actor_id).all().items
    return sorted(orders, key=lambda order: order.created_at, reverse=True)
