"""Price a user's personal cart against the catalog.

Prices are read once, here, and frozen into the group order's line items.
Lines whose product no longer exists in the catalog are left out.
"""

import structlog

from groupbuy.cart import get_cart_store, get_catalog

logger = structlog.get_logger(__name__)


def round_money(amount: float) -> float:
    return round(float(amount), 2)


def price_cart(user_id: str) -> tuple[list[dict], float]:
    """Return ``(lines, total)`` for the user's cart.

    Each line is a dict with product_id, quantity, unit_price and price
    (unit_price x quantity).
    """
    catalog = get_catalog()
    lines = []
    for entry in get_cart_store().list_items(user_id):
        product = catalog.get_product(entry["product_id"])
        if product is None:
            logger.warning(
                "Cart line skipped, product not in catalog",
                user_id=str(user_id),
                product_id=entry["product_id"],
            )
            continue
        unit_price = float(product["price"])
        lines.append(
            {
                "product_id": str(entry["product_id"]),
                "quantity": int(entry["quantity"]),
                "unit_price": unit_price,
                "price": round_money(unit_price * int(entry["quantity"])),
            }
        )

    total = round_money(sum(line["price"] for line in lines))
    return lines, total
