"""Gateway status codes and their payment outcome.

    2  success      → PAID
    0  pending      → PENDING
   -1  cancelled    → FAILED
   -2  failed       → FAILED
   -3  chargedback  → FAILED

Anything else, including garbage, is treated as FAILED.
"""

from ordering.order.order import PaymentStatus

SUCCESS = "2"
PENDING = "0"
CANCELLED = "-1"
FAILED = "-2"
CHARGEDBACK = "-3"


def payment_status_for(status_code) -> PaymentStatus:
    code = str(status_code).strip() if status_code is not None else ""
    if code == SUCCESS:
        return PaymentStatus.PAID
    if code == PENDING:
        return PaymentStatus.PENDING
    return PaymentStatus.FAILED
