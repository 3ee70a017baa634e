"""Ledger writes: upsert the PaymentRecord mirroring an order's payment.

Called by the webhook, cash-collection and admin handlers after the order
itself has been updated. The order is the source of truth: callers log and
swallow ledger failures instead of failing the whole request.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.ledger.payment_record import PaymentProvider, PaymentRecord
from ordering.order.order import NotificationOutcome

logger = structlog.get_logger(__name__)


def _load_or_open(order) -> PaymentRecord:
    repo = current_domain.repository_for(PaymentRecord)
    try:
        return repo.get(str(order.id))
    except ObjectNotFoundError:
        return PaymentRecord.open_for(order)


def record_gateway_outcome(order, command, outcome=NotificationOutcome.APPLIED) -> PaymentRecord:
    """Mirror a verified gateway notification into the ledger.

    A reported amount that differs from the order total is kept, but the
    record is flagged for manual reconciliation. A rejected notification
    only leaves its payload and message: the references stay those of the
    payment the order actually settled on.
    """
    record = _load_or_open(order)
    references = {}
    if outcome != NotificationOutcome.REJECTED:
        references = {
            "provider_payment_id": command.payment_ref,
            "payer_ref": command.payer_ref,
            "card_method": command.card_method,
        }
    record.record(
        payment_status=order.payment_status,
        message=command.status_message or "",
        raw_payload=json.loads(command.raw_payload) if command.raw_payload else None,
        **references,
    )
    if not record.amount_matches(command.amount):
        logger.warning(
            "payment.integrity_warning",
            order_id=str(order.id),
            expected_amount=record.amount,
            reported_amount=command.amount,
        )
        record.flag_for_reconciliation()

    current_domain.repository_for(PaymentRecord).add(record)
    return record


def record_cash_collection(order, collected_by: str) -> PaymentRecord:
    record = _load_or_open(order)
    record.provider = PaymentProvider.COD.value
    record.record(
        payment_status=order.payment_status,
        provider_payment_id=order.gateway_payment_ref or f"COD-{order.id}",
        payer_ref=collected_by,
        message="COD collected by delivery",
    )
    current_domain.repository_for(PaymentRecord).add(record)
    return record


def record_admin_override(order, admin_id: str) -> PaymentRecord:
    record = _load_or_open(order)
    record.provider = PaymentRecord.provider_for(order.payment_method)
    record.record(
        payment_status=order.payment_status,
        message=f"Payment status set to {order.payment_status} by admin {admin_id}",
    )
    current_domain.repository_for(PaymentRecord).add(record)
    return record


def delete_record(order_id: str) -> bool:
    """Remove the ledger record for an order. Returns False if none existed."""
    repo = current_domain.repository_for(PaymentRecord)
    try:
        record = repo.get(order_id)
    except ObjectNotFoundError:
        return False
    repo._dao.delete(record)
    return True


def list_records(payment_status: str | None = None) -> list[PaymentRecord]:
    query = current_domain.repository_for(PaymentRecord)._dao.query
    if payment_status:
        query = query.filter(payment_status=payment_status)
    return query.order_by("-last_updated_at").all().items


def summarize_records() -> dict:
    """Count and total ledger records by payment status and by payment method."""
    summary: dict[str, dict] = {"by_status": {}, "by_method": {}}
    for record in list_records():
        for group, key in (("by_status", record.payment_status), ("by_method", record.payment_method)):
            bucket = summary[group].setdefault(key, {"count": 0, "total_amount": 0.0})
            bucket["count"] += 1
            bucket["total_amount"] = round(bucket["total_amount"] + (record.amount or 0.0), 2)
    return summary
