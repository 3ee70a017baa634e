"""Gateway payment notification (webhook) — command and handler.

The gateway posts one notification per payment attempt and may redeliver it.
Every notification is verified against the merchant signature before any
state is touched; an unverifiable one is rejected and logged for review.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import AuthenticationFailure, OrderNotFound
from ordering.gateway import get_gateway_settings
from ordering.gateway.signature import verify_notification_signature
from ordering.ledger.recording import record_gateway_outcome
from ordering.notifier import notify_customer
from ordering.order.order import NotificationOutcome, Order, PaymentStatus
from ordering.payment.status_codes import payment_status_for

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class ProcessPaymentNotification:
    merchant_id = String(max_length=100)
    order_id = Identifier(required=True)
    payment_ref = String(max_length=255)
    amount = String(max_length=50)  # hashed exactly as received
    currency = String(max_length=3)
    status_code = String(max_length=10)
    signature = String(max_length=64)
    card_method = String(max_length=50)
    status_message = String(max_length=1000)
    payer_ref = String(max_length=255)
    raw_payload = Text()  # JSON: the notification as received


@ordering.command_handler(part_of=Order)
class PaymentNotificationHandler:
    @handle(ProcessPaymentNotification)
    def process_notification(self, command):
        settings = get_gateway_settings()
        settings.require_credentials()

        order_id = str(command.order_id)
        if (command.merchant_id or "").strip() != settings.merchant_id:
            logger.warning("payment.merchant_mismatch", order_id=order_id, merchant_id=command.merchant_id)
            raise AuthenticationFailure("Unknown merchant", order_id=order_id)

        verified = verify_notification_signature(
            merchant_id=command.merchant_id.strip(),
            order_id=order_id,
            amount=command.amount or "",
            currency=command.currency or "",
            status_code=command.status_code or "",
            secret=settings.merchant_secret,
            candidate_signature=command.signature,
        )
        if not verified:
            logger.warning("payment.signature_invalid", order_id=order_id, status_code=command.status_code)
            raise AuthenticationFailure("Invalid notification signature", order_id=order_id)

        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(order_id)
        except ObjectNotFoundError:
            logger.error("payment.order_missing", order_id=order_id, payment_ref=command.payment_ref)
            raise OrderNotFound(f"Order {order_id} not found", order_id=order_id) from None

        reported = payment_status_for(command.status_code)
        outcome = order.apply_gateway_outcome(
            reported,
            payment_ref=command.payment_ref,
            payer_ref=command.payer_ref,
            status_code=command.status_code or "",
        )
        if outcome == NotificationOutcome.APPLIED:
            repo.add(order)
            logger.info(
                "payment.notification_applied",
                order_id=order_id,
                payment_status=order.payment_status,
                order_status=order.order_status,
            )
        elif outcome == NotificationOutcome.REJECTED:
            logger.warning(
                "payment.regression_ignored",
                order_id=order_id,
                payment_status=order.payment_status,
                reported_status=reported.value,
            )

        try:
            record_gateway_outcome(order, command, outcome)
        except Exception:
            logger.exception("payment.ledger_write_failed", order_id=order_id, needs_reconciliation=True)

        if outcome == NotificationOutcome.APPLIED:
            if reported == PaymentStatus.PAID:
                notify_customer(order, "Payment received", f"Your payment for order {order_id} was successful.")
            else:
                notify_customer(order, "Payment failed", f"Your payment for order {order_id} did not go through.")

        return outcome.value
