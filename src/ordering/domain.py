"""Ordering bounded context — order and payment lifecycle.

Owns the Order aggregate, the payment ledger, the signed gateway checkout,
webhook reconciliation, delivery-side transitions and admin overrides.
Both aggregates are standard CQRS aggregates (not event sourced).
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
