"""Cash-on-delivery collection: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.actors import Actor, ActorRole, parse_role, require_role
from ordering.domain import ordering
from ordering.ledger.recording import record_cash_collection
from ordering.notifier import notify_customer
from ordering.order.order import Order
from ordering.order.queries import load_order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class MarkCodCollected:
    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20)


@ordering.command_handler(part_of=Order)
class MarkCodCollectedHandler:
    @handle(MarkCodCollected)
    def mark_collected(self, command):
        actor = Actor(id=command.actor_id, role=parse_role(command.actor_role))
        require_role(actor, ActorRole.DELIVERY, ActorRole.ADMIN)

        order = load_order(command.order_id)
        if not order.collect_cash(actor.id):
            logger.info("payment.cod_already_paid", order_id=str(order.id), actor_id=actor.id)
            return False

        current_domain.repository_for(Order).add(order)
        logger.info(
            "payment.cod_collected",
            order_id=str(order.id),
            actor_id=actor.id,
            amount=order.total_amount,
            order_status=order.order_status,
        )

        try:
            record_cash_collection(order, collected_by=actor.id)
        except Exception:
            logger.exception("payment.ledger_write_failed", order_id=str(order.id), needs_reconciliation=True)

        notify_customer(order, "Payment received", f"Cash payment for order {order.id} was collected.")
        return True
