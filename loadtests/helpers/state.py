"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state. State tracks ids
returned by creation endpoints so follow-up operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class GroupOrderState:
    """Tracks one simulated shared order from creation to delivery."""

    creator_id: str | None = None
    order_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    member_ids: list[str] = field(default_factory=list)
    rider_id: str | None = None
    participant_ids: list[str] = field(default_factory=list)
