"""Single writer per order.

Every command that reads an order, decides, and writes it back runs while
holding that order's lock, so two joins racing for the last free slot are
applied one after the other and the second one sees the first. The lock
spans the whole ``process`` call (load, decide, persist, and the event
handlers that run on commit). Different orders never share a lock.

A lock is released once its order is delivered or deleted.
"""

import threading

import structlog
from protean import handle
from protean.utils.globals import current_domain

from groupbuy.domain import groupbuy
from groupbuy.shared_order.events import SharedOrderDeleted, SharedOrderDelivered
from groupbuy.shared_order.shared_order import SharedOrder

logger = structlog.get_logger(__name__)

_registry_lock = threading.Lock()
_order_locks: dict[str, threading.RLock] = {}


def lock_for(order_id) -> threading.RLock:
    """Return the lock owned by ``order_id``, creating it on first use."""
    key = str(order_id)
    with _registry_lock:
        lock = _order_locks.get(key)
        if lock is None:
            lock = _order_locks[key] = threading.RLock()
        return lock


def forget(order_id) -> None:
    """Drop the lock of an order that no longer exists."""
    with _registry_lock:
        _order_locks.pop(str(order_id), None)


def process_serialized(command, order_id=None):
    """Process ``command`` synchronously under its order's lock.

    ``order_id`` defaults to ``command.order_id``. Commands that are not
    scoped to an existing order are processed directly.
    """
    key = order_id or getattr(command, "order_id", None)
    if key is None:
        return current_domain.process(command, asynchronous=False)

    with lock_for(key):
        logger.debug("Processing order command", order_id=str(key), command=type(command).__name__)
        return current_domain.process(command, asynchronous=False)


def reset_locks() -> None:
    with _registry_lock:
        _order_locks.clear()


@groupbuy.event_handler(part_of=SharedOrder)
class OrderLockReleaseHandler:
    @handle(SharedOrderDelivered)
    def on_shared_order_delivered(self, event: SharedOrderDelivered) -> None:
        forget(event.order_id)

    @handle(SharedOrderDeleted)
    def on_shared_order_deleted(self, event: SharedOrderDeleted) -> None:
        forget(event.order_id)
