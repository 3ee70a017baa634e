"""Domain error taxonomy for the ordering context.

Every error carries a stable machine-readable ``kind`` and the HTTP status the
request boundary maps it to. ``context`` holds structured fields for logging.
"""


class OrderingError(Exception):
    kind = "ordering_error"
    status_code = 400

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    @property
    def public_message(self) -> str:
        return self.message


class AuthenticationFailure(OrderingError):
    """A gateway notification failed signature or merchant verification."""

    kind = "authentication_failure"
    status_code = 400


class OrderNotFound(OrderingError):
    kind = "not_found"
    status_code = 404


class InvalidTransition(OrderingError):
    """A status graph violation or an unknown enum value."""

    kind = "invalid_transition"
    status_code = 400


class InvalidAmount(InvalidTransition):
    kind = "invalid_amount"
    status_code = 400


class Forbidden(OrderingError):
    kind = "forbidden"
    status_code = 403


class ConfigurationError(OrderingError):
    """Merchant credentials or gateway URLs are missing.

    Operator-facing: the detailed message is logged, buyers only ever see
    ``public_message``.
    """

    kind = "configuration_error"
    status_code = 500

    @property
    def public_message(self) -> str:
        return "Payment service is temporarily unavailable"


class InvalidOrder(InvalidTransition):
    """The checkout snapshot cannot become an order (e.g. no items)."""

    kind = "invalid_order"
    status_code = 400
