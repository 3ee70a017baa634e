"""Administrator payment overrides and deletions — commands and handlers.

Admin writes are authoritative: unlike gateway notifications they may move a
PAID payment backward. Every override is logged with the admin's identity.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.actors import Actor, ActorRole, parse_role, require_role
from ordering.domain import ordering
from ordering.ledger.recording import delete_record, record_admin_override
from ordering.notifier import notify_customer
from ordering.order.order import Order, parse_order_status, parse_payment_status
from ordering.order.queries import load_order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class OverridePaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, max_length=50)
    order_status = String(max_length=50)
    actor_id = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20)


@ordering.command(part_of="Order")
class DeletePayment:
    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20)


@ordering.command_handler(part_of=Order)
class AdminOverrideHandler:
    @handle(OverridePaymentStatus)
    def override_payment(self, command):
        actor = Actor(id=command.actor_id, role=parse_role(command.actor_role))
        require_role(actor, ActorRole.ADMIN)
        payment_status = parse_payment_status(command.payment_status)
        order_status = parse_order_status(command.order_status) if command.order_status else None

        order = load_order(command.order_id)
        previous_payment, previous_order = order.payment_status, order.order_status
        order.override_payment(payment_status, admin_id=actor.id, order_status=order_status)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "payment.admin_override",
            order_id=str(order.id),
            admin_id=actor.id,
            previous_payment_status=previous_payment,
            payment_status=order.payment_status,
            previous_order_status=previous_order,
            order_status=order.order_status,
        )

        try:
            record_admin_override(order, admin_id=actor.id)
        except Exception:
            logger.exception("payment.ledger_write_failed", order_id=str(order.id), needs_reconciliation=True)

        notify_customer(
            order,
            "Payment update",
            f"Payment for order {order.id} is now {order.payment_status.lower()}.",
        )
        return {"payment_status": order.payment_status, "order_status": order.order_status}

    @handle(DeletePayment)
    def delete_payment(self, command):
        actor = Actor(id=command.actor_id, role=parse_role(command.actor_role))
        require_role(actor, ActorRole.ADMIN)

        order = load_order(command.order_id)
        had_record = delete_record(str(order.id))
        current_domain.repository_for(Order)._dao.delete(order)

        logger.warning(
            "payment.deleted",
            order_id=str(order.id),
            admin_id=actor.id,
            payment_status=order.payment_status,
            ledger_record_deleted=had_record,
        )
        return str(order.id)
