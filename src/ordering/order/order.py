"""Order aggregate (CQRS) — the buyer's purchase and its payment/fulfilment state.

Three independent writers mutate an Order: the gateway webhook, delivery
staff and administrators. There is no lock between them; consistency comes
from the rules enforced here:

- Gateway writes are idempotent and monotonic: once PAID (or REFUNDED) the
  payment status never moves again through a notification.
- Delivery writes follow the fulfilment graph below and never touch the
  payment status, except through cash collection on COD orders.
- Admin overrides may set any payment status, including regressing PAID.

Fulfilment graph (forward only):
    PENDING → CONFIRMED → PROCESSING → SHIPPED → OUT_FOR_DELIVERY → DELIVERED
    PENDING → PROCESSING, ASSIGNED → {CONFIRMED, PROCESSING}, CONFIRMED → SHIPPED
    any non-terminal → CANCELLED (admin only)
    ASSIGNED is entered only through assign_to, never by a status update.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import InvalidAmount, InvalidOrder, InvalidTransition
from ordering.gateway.signature import to_money
from ordering.order.events import (
    CashCollected,
    DeliveryAssigned,
    OrderPlaced,
    OrderStatusChanged,
    PaymentConfirmed,
    PaymentFailed,
    PaymentStatusOverridden,
)

GATEWAY_ACTOR = "gateway"

# Largest total a Float column carries to the cent without drift
MAX_ORDER_TOTAL = Decimal("9999999999.99")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(Enum):
    GATEWAY = "GATEWAY"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"


class NotificationOutcome(Enum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"  # redelivery or pending report, nothing to do
    REJECTED = "rejected"  # would undo a settled payment or an admin decision


_DELIVERY_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.PROCESSING},
    OrderStatus.ASSIGNED: {OrderStatus.CONFIRMED, OrderStatus.PROCESSING},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.SHIPPED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.OUT_FOR_DELIVERY},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Payment states a gateway notification can no longer move
_SETTLED_PAYMENT_STATUSES = {PaymentStatus.PAID, PaymentStatus.REFUNDED}

# Fulfilment states a gateway outcome may still act on
_AWAITING_PAYMENT = {OrderStatus.PENDING, OrderStatus.ASSIGNED}
_CANCELLABLE_ON_FAILURE = {OrderStatus.PENDING, OrderStatus.ASSIGNED, OrderStatus.CONFIRMED}

_DEFAULT_ORDER_STATUS_FOR_PAYMENT = {
    PaymentStatus.PAID: OrderStatus.CONFIRMED,
    PaymentStatus.FAILED: OrderStatus.CANCELLED,
}


def can_transition(current: OrderStatus, target: OrderStatus, by_admin: bool = False) -> bool:
    """Return whether the fulfilment graph allows ``current`` → ``target``."""
    if target == OrderStatus.CANCELLED:
        return by_admin and current not in _TERMINAL_STATUSES
    return target in _DELIVERY_TRANSITIONS[current]


def default_order_status_for(payment_status: PaymentStatus) -> OrderStatus:
    return _DEFAULT_ORDER_STATUS_FOR_PAYMENT.get(payment_status, OrderStatus.PENDING)


def _parse(enum_cls, raw, field):
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidTransition(
            f"Invalid {field} {raw!r}; expected one of: {allowed}",
            field=field,
            value=str(raw),
        ) from None


def parse_order_status(raw) -> OrderStatus:
    return _parse(OrderStatus, raw, "order status")


def parse_payment_status(raw) -> PaymentStatus:
    return _parse(PaymentStatus, raw, "payment status")


def parse_payment_method(raw) -> PaymentMethod:
    return _parse(PaymentMethod, raw, "payment method")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class AddressSnapshot:
    """Shipping and contact details captured at checkout time.

    Never re-read from the address book: it is where this order goes,
    regardless of later changes on the buyer's account.
    """

    full_name = String(max_length=200)
    address = String(max_length=500)
    city = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=100)
    phone = String(max_length=40)
    email = String(max_length=254)
    notes = String(max_length=1000)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """A cart line frozen at checkout: price and title are never re-read."""

    product_ref = String(required=True, max_length=100)
    title = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


@ordering.entity(part_of="Order")
class StatusChange:
    """One entry of the append-only status history."""

    sequence = Integer(required=True, min_value=1)
    status = String(required=True, max_length=50)
    actor = String(required=True, max_length=255)
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    items = HasMany(OrderLine)
    address = ValueObject(AddressSnapshot)
    order_status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(
        choices=PaymentStatus,
        default=PaymentStatus.PENDING.value,
    )
    total_amount = Float(required=True)
    currency = String(max_length=3, default="LKR")
    gateway_payment_ref = String(max_length=255, default="")
    payer_ref = String(max_length=255)
    assigned_to = Identifier()
    status_history = HasMany(StatusChange)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_be_positive(self):
        if self.total_amount is None or self.total_amount <= 0:
            raise ValidationError({"total_amount": ["Order total must be a positive amount"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id: str,
        items_data: list[dict],
        address_data: dict | None,
        total_amount,
        currency: str,
        payment_method: PaymentMethod,
    ):
        """Create an order in PENDING/PENDING from a checkout snapshot.

        Args:
            customer_id: The buyer placing the order.
            items_data: List of dicts with product_ref, title, unit_price, quantity.
            address_data: Dict of AddressSnapshot fields (may be empty).
            total_amount: Declared total; must be a positive number.
            currency: ISO currency code of the total.
            payment_method: GATEWAY or CASH_ON_DELIVERY.
        """
        total = to_money(total_amount)
        if total <= 0:
            raise InvalidAmount("Order total must be a positive amount", amount=str(total_amount))
        if total > MAX_ORDER_TOTAL:
            raise InvalidAmount(
                f"Order total exceeds the maximum of {MAX_ORDER_TOTAL}",
                amount=str(total_amount),
            )
        if not items_data:
            raise InvalidOrder("Cannot place an order without items")

        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            address=AddressSnapshot(**address_data) if address_data else None,
            order_status=OrderStatus.PENDING.value,
            payment_method=payment_method.value,
            payment_status=PaymentStatus.PENDING.value,
            total_amount=float(total),
            currency=currency,
            gateway_payment_ref="",
            created_at=now,
            updated_at=now,
        )
        for item in items_data:
            order.add_items(OrderLine(**item))
        order._record_status(OrderStatus.PENDING, actor=str(customer_id), at=now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                payment_method=payment_method.value,
                total_amount=float(total),
                currency=currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def history(self) -> list:
        """Status history in the order it was appended."""
        return sorted(self.status_history or [], key=lambda change: change.sequence)

    def _record_status(self, status: OrderStatus, actor: str, at: datetime) -> None:
        self.add_status_history(
            StatusChange(
                sequence=len(self.status_history or []) + 1,
                status=status.value,
                actor=actor,
                changed_at=at,
            )
        )

    def _move_to(self, target: OrderStatus, actor: str, at: datetime) -> None:
        previous = self.order_status
        self.order_status = target.value
        self.updated_at = at
        self._record_status(target, actor=actor, at=at)
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                actor=actor,
                changed_at=at,
            )
        )

    def _cancelled_by_gateway(self) -> bool:
        history = self.history
        if not history:
            return False
        last = history[-1]
        return last.status == OrderStatus.CANCELLED.value and last.actor == GATEWAY_ACTOR

    # -------------------------------------------------------------------
    # Gateway notifications
    # -------------------------------------------------------------------
    def apply_gateway_outcome(
        self,
        outcome: PaymentStatus,
        payment_ref: str | None = None,
        payer_ref: str | None = None,
        status_code: str = "",
    ) -> NotificationOutcome:
        """Apply a verified gateway notification to the order.

        Safe under redelivery: a repeated outcome changes nothing, and a
        settled payment (PAID or REFUNDED) is never walked backward. A PAID
        outcome re-opens an order only when the gateway itself cancelled it.
        """
        current = PaymentStatus(self.payment_status)

        if current in _SETTLED_PAYMENT_STATUSES:
            if outcome == current:
                return NotificationOutcome.UNCHANGED
            return NotificationOutcome.REJECTED

        if outcome == PaymentStatus.PENDING or outcome == current:
            return NotificationOutcome.UNCHANGED

        status = OrderStatus(self.order_status)
        reopen = False
        if outcome == PaymentStatus.PAID and current == PaymentStatus.FAILED:
            if status == OrderStatus.CANCELLED:
                # Only a cancellation caused by an earlier failed notification
                # may be undone; an admin's FAILED stands.
                if not self._cancelled_by_gateway():
                    return NotificationOutcome.REJECTED
                reopen = True

        now = datetime.now(UTC)
        if payment_ref:
            self.gateway_payment_ref = payment_ref
        if payer_ref:
            self.payer_ref = payer_ref
        self.payment_status = outcome.value
        self.updated_at = now

        if outcome == PaymentStatus.PAID:
            if status in _AWAITING_PAYMENT or reopen:
                self._move_to(OrderStatus.CONFIRMED, actor=GATEWAY_ACTOR, at=now)
            self.raise_(
                PaymentConfirmed(
                    order_id=str(self.id),
                    payment_ref=self.gateway_payment_ref,
                    source=GATEWAY_ACTOR,
                    amount=self.total_amount,
                    confirmed_at=now,
                )
            )
        else:
            if status in _CANCELLABLE_ON_FAILURE:
                self._move_to(OrderStatus.CANCELLED, actor=GATEWAY_ACTOR, at=now)
            self.raise_(
                PaymentFailed(
                    order_id=str(self.id),
                    payment_ref=self.gateway_payment_ref,
                    status_code=status_code,
                    failed_at=now,
                )
            )
        return NotificationOutcome.APPLIED

    # -------------------------------------------------------------------
    # Delivery-side transitions
    # -------------------------------------------------------------------
    def advance_status(self, target: OrderStatus, actor_id: str, by_admin: bool = False) -> None:
        """Move along the fulfilment graph. CANCELLED is reserved for admins."""
        current = OrderStatus(self.order_status)
        if not can_transition(current, target, by_admin=by_admin):
            raise InvalidTransition(
                f"Cannot transition from {current.value} to {target.value}",
                order_id=str(self.id),
                current=current.value,
                target=target.value,
            )
        self._move_to(target, actor=actor_id, at=datetime.now(UTC))

    def assign_to(self, delivery_actor_id: str, admin_id: str) -> None:
        current = OrderStatus(self.order_status)
        if current in _TERMINAL_STATUSES:
            raise InvalidTransition(
                f"Cannot assign an order in {current.value} state",
                order_id=str(self.id),
                current=current.value,
            )

        now = datetime.now(UTC)
        self.assigned_to = delivery_actor_id
        self.updated_at = now
        if current == OrderStatus.PENDING:
            self._move_to(OrderStatus.ASSIGNED, actor=admin_id, at=now)

        self.raise_(
            DeliveryAssigned(
                order_id=str(self.id),
                assigned_to=delivery_actor_id,
                assigned_by=admin_id,
                assigned_at=now,
            )
        )

    def collect_cash(self, actor_id: str) -> bool:
        """Record cash collected for a COD order.

        Returns False when the order was already paid (idempotent no-op).
        """
        if PaymentMethod(self.payment_method) != PaymentMethod.CASH_ON_DELIVERY:
            raise InvalidTransition(
                "Not a cash-on-delivery order",
                order_id=str(self.id),
                payment_method=self.payment_method,
            )
        if PaymentStatus(self.payment_status) == PaymentStatus.PAID:
            return False

        status = OrderStatus(self.order_status)
        if status == OrderStatus.CANCELLED:
            raise InvalidTransition(
                "Cannot collect cash for a cancelled order",
                order_id=str(self.id),
            )

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.PAID.value
        self.updated_at = now
        if status in _AWAITING_PAYMENT:
            self._move_to(OrderStatus.CONFIRMED, actor=actor_id, at=now)

        self.raise_(
            CashCollected(
                order_id=str(self.id),
                collected_by=actor_id,
                amount=self.total_amount,
                collected_at=now,
            )
        )
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                payment_ref=self.gateway_payment_ref,
                source="cod",
                amount=self.total_amount,
                confirmed_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Admin overrides
    # -------------------------------------------------------------------
    def override_payment(
        self,
        payment_status: PaymentStatus,
        admin_id: str,
        order_status: OrderStatus | None = None,
    ) -> None:
        """Set the payment status directly; may regress a PAID payment."""
        target = order_status or default_order_status_for(payment_status)
        previous_payment = self.payment_status
        now = datetime.now(UTC)

        self.payment_status = payment_status.value
        self.updated_at = now
        if OrderStatus(self.order_status) != target:
            self._move_to(target, actor=admin_id, at=now)

        self.raise_(
            PaymentStatusOverridden(
                order_id=str(self.id),
                previous_payment_status=previous_payment,
                payment_status=payment_status.value,
                order_status=self.order_status,
                admin_id=admin_id,
                overridden_at=now,
            )
        )
