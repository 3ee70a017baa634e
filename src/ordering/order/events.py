"""Domain events for the Order aggregate.

Events are versioned, immutable facts raised by the aggregate and persisted
when the unit of work commits.
"""

from protean.fields import DateTime, Float, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A buyer placed an order at checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    payment_method = String(required=True)
    total_amount = Float(required=True)
    currency = String(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentConfirmed:
    """The order's payment became PAID (gateway, cash collection or admin)."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_ref = String()
    source = String(required=True)  # gateway, cod, admin
    amount = Float(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentFailed:
    """The gateway reported a failed, cancelled or charged-back payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_ref = String()
    status_code = String()
    failed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new fulfilment status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    actor = String(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class DeliveryAssigned:
    """An administrator assigned the order to a delivery actor."""

    __version__ = 1

    order_id = Identifier(required=True)
    assigned_to = Identifier(required=True)
    assigned_by = String(required=True)
    assigned_at = DateTime(required=True)


@ordering.event(part_of="Order")
class CashCollected:
    """Cash for a cash-on-delivery order was collected."""

    __version__ = 1

    order_id = Identifier(required=True)
    collected_by = String(required=True)
    amount = Float(required=True)
    collected_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentStatusOverridden:
    """An administrator manually set the payment status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_payment_status = String(required=True)
    payment_status = String(required=True)
    order_status = String(required=True)
    admin_id = String(required=True)
    overridden_at = DateTime(required=True)
