"""Gateway checkout and notification signatures (PayHere MD5 scheme).

    secret_digest = UPPER(MD5(merchant_secret))
    checkout      = UPPER(MD5(merchant_id + order_id + amount + currency + secret_digest))
    notification  = UPPER(MD5(merchant_id + order_id + amount + currency + status_code + secret_digest))

The amount is hashed as a string with exactly two decimals. Any formatting
drift between the signer and the gateway invalidates every signature.
"""

import hashlib
import hmac
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ordering.errors import InvalidAmount

_CENTS = Decimal("0.01")


def to_money(amount) -> Decimal:
    """Parse an amount into a two-decimal Decimal (half-up)."""
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f"Amount {amount!r} is not a number", amount=str(amount)) from None
    if not value.is_finite():
        raise InvalidAmount(f"Amount {amount!r} is not a finite number", amount=str(amount))
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_amount(amount) -> str:
    """Return ``amount`` as the two-decimal string the gateway hashes."""
    return f"{to_money(amount):.2f}"


def digest(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest().upper()


def compute_checkout_signature(
    merchant_id: str,
    order_id: str,
    amount,
    currency: str,
    secret: str,
) -> str:
    raw = f"{merchant_id}{order_id}{format_amount(amount)}{currency}{digest(secret)}"
    return digest(raw)


def compute_notification_signature(
    merchant_id: str,
    order_id: str,
    amount,
    currency: str,
    status_code: str,
    secret: str,
) -> str:
    # Notifications are hashed over the amount exactly as the gateway sent it
    amount_str = amount if isinstance(amount, str) else format_amount(amount)
    raw = f"{merchant_id}{order_id}{amount_str}{currency}{status_code}{digest(secret)}"
    return digest(raw)


def verify_notification_signature(
    merchant_id: str,
    order_id: str,
    amount,
    currency: str,
    status_code: str,
    secret: str,
    candidate_signature: str | None,
) -> bool:
    if not candidate_signature:
        return False
    expected = compute_notification_signature(merchant_id, order_id, amount, currency, status_code, secret)
    return hmac.compare_digest(expected, str(candidate_signature).strip().upper())
