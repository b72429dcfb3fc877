"""Groupbuy bounded context: shared group orders and their delivery.

Lets several users pool the contents of their personal carts into one
shared order, keeps the order's totals and participant limits consistent,
drives the order through confirmation and delivery, and tracks the rider
along the generated route, notifying participants as the rider gets close.

Personal carts, the product catalog and stop geocoding are external
collaborators reached through ports (see ``groupbuy.cart``).
"""

import structlog
from protean.domain import Domain

groupbuy = Domain(name="groupbuy")

logger = structlog.get_logger(__name__)
