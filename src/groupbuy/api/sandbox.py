"""Sandbox endpoints for seeding the in-memory catalog and carts (non-production only).

The catalog and personal carts are external collaborators. When the
in-memory adapters are configured, these endpoints let manual testers and
load tests put products and cart lines in place over HTTP.
"""

import os

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from groupbuy.cart import get_cart_store, get_catalog
from groupbuy.cart.memory import InMemoryCartStore, InMemoryCatalog

sandbox_router = APIRouter(prefix="/sandbox", tags=["sandbox"])


class ProductRequest(BaseModel):
    product_id: str
    name: str
    price: float = Field(ge=0)
    unit: str = "pc"


class CartLineRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


class CartLineSchema(BaseModel):
    product_id: str
    quantity: int


class CartResponse(BaseModel):
    user_id: str
    items: list[CartLineSchema]


def _require_sandbox():
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Sandbox endpoints not available in production")


@sandbox_router.post("/products", status_code=201)
async def add_product(body: ProductRequest) -> dict:
    _require_sandbox()
    catalog = get_catalog()
    if not isinstance(catalog, InMemoryCatalog):
        raise HTTPException(status_code=400, detail="Product seeding only available for the in-memory catalog")
    return catalog.add_product(body.product_id, body.name, body.price, unit=body.unit)


@sandbox_router.post("/carts/{user_id}/items", response_model=CartResponse)
async def add_cart_line(user_id: str, body: CartLineRequest) -> CartResponse:
    _require_sandbox()
    cart = get_cart_store()
    if not isinstance(cart, InMemoryCartStore):
        raise HTTPException(status_code=400, detail="Cart seeding only available for the in-memory cart store")
    cart.restore_or_add(user_id, body.product_id, body.quantity)
    return CartResponse(user_id=user_id, items=cart.list_items(user_id))


@sandbox_router.get("/carts/{user_id}", response_model=CartResponse)
async def view_cart(user_id: str) -> CartResponse:
    _require_sandbox()
    return CartResponse(user_id=user_id, items=get_cart_store().list_items(user_id))
