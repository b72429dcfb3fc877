"""Cart store and catalog registry.

Provides singleton access to the configured adapters. The in-memory
adapters are used by default; others are selected with the
CART_ADAPTER and CATALOG_ADAPTER environment variables.
"""

import os

_cart_store = None
_catalog = None


def get_cart_store():
    """Return the configured cart store adapter (singleton)."""
    global _cart_store
    if _cart_store is None:
        adapter = os.environ.get("CART_ADAPTER", "memory")
        if adapter == "memory":
            from groupbuy.cart.memory import InMemoryCartStore

            _cart_store = InMemoryCartStore()
        else:
            raise ValueError(f"Unknown cart adapter: {adapter}")
    return _cart_store


def get_catalog():
    """Return the configured catalog adapter (singleton)."""
    global _catalog
    if _catalog is None:
        adapter = os.environ.get("CATALOG_ADAPTER", "memory")
        if adapter == "memory":
            from groupbuy.cart.memory import InMemoryCatalog

            _catalog = InMemoryCatalog()
        else:
            raise ValueError(f"Unknown catalog adapter: {adapter}")
    return _catalog


def reset_adapters():
    """Drop the cart store and catalog singletons (useful for testing)."""
    global _cart_store, _catalog
    _cart_store = None
    _catalog = None
