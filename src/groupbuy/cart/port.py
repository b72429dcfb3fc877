"""Cart and catalog ports: the personal cart store and product catalog.

Both live outside the group-order context. Domain code programs against
these interfaces; adapters are swapped via configuration.
"""

from abc import ABC, abstractmethod


class CartStorePort(ABC):
    """Per-user mapping of product -> pending quantity."""

    @abstractmethod
    def list_items(self, user_id: str) -> list[dict]:
        """Return the user's pending lines.

        Returns:
            list of dicts with keys: product_id, quantity
        """
        ...

    @abstractmethod
    def clear(self, user_id: str) -> None:
        """Remove every line from the user's cart."""
        ...

    @abstractmethod
    def remove(self, user_id: str, product_id: str, quantity: int) -> int:
        """Take up to ``quantity`` of a product out of the cart.

        A line that drops to zero is deleted.

        Returns:
            the quantity of that product left in the cart
        """
        ...

    @abstractmethod
    def restore_or_add(self, user_id: str, product_id: str, quantity: int) -> int:
        """Add ``quantity`` of a product, merging with an existing line.

        Returns:
            the resulting quantity of that product in the cart
        """
        ...


class CatalogPort(ABC):
    """Read-only product lookup."""

    @abstractmethod
    def get_product(self, product_id: str) -> dict | None:
        """Look up a product.

        Returns:
            dict with keys: product_id, name, price, unit, in_stock; or None
        """
        ...
