"""In-memory cart store and catalog for development and tests."""

import threading

from groupbuy.cart.port import CartStorePort, CatalogPort


class InMemoryCartStore(CartStorePort):
    def __init__(self):
        self._carts: dict[str, dict[str, int]] = {}
        self._lock = threading.Lock()

    def list_items(self, user_id: str) -> list[dict]:
        with self._lock:
            lines = dict(self._carts.get(str(user_id), {}))
        return [{"product_id": product_id, "quantity": quantity} for product_id, quantity in lines.items()]

    def clear(self, user_id: str) -> None:
        with self._lock:
            self._carts.pop(str(user_id), None)

    def restore_or_add(self, user_id: str, product_id: str, quantity: int) -> int:
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        with self._lock:
            cart = self._carts.setdefault(str(user_id), {})
            cart[str(product_id)] = cart.get(str(product_id), 0) + quantity
            return cart[str(product_id)]

    def remove(self, user_id: str, product_id: str, quantity: int) -> int:
        with self._lock:
            cart = self._carts.get(str(user_id), {})
            left = max(cart.get(str(product_id), 0) - quantity, 0)
            if left:
                cart[str(product_id)] = left
            else:
                cart.pop(str(product_id), None)
            if not cart:
                self._carts.pop(str(user_id), None)
            return left

    def quantity_of(self, user_id: str, product_id: str) -> int:
        with self._lock:
            return self._carts.get(str(user_id), {}).get(str(product_id), 0)

    def reset(self):
        with self._lock:
            self._carts.clear()


class InMemoryCatalog(CatalogPort):
    def __init__(self):
        self._products: dict[str, dict] = {}

    def add_product(self, product_id: str, name: str, price: float, unit: str = "pc", in_stock: bool = True) -> dict:
        product = {
            "product_id": str(product_id),
            "name": name,
            "price": float(price),
            "unit": unit,
            "in_stock": in_stock,
        }
        self._products[str(product_id)] = product
        return product

    def get_product(self, product_id: str) -> dict | None:
        product = self._products.get(str(product_id))
        return dict(product) if product else None

    def reset(self):
        self._products.clear()
