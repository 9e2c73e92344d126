from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from .product_normalizer import Product


class ChatRequest(BaseModel):
    """Request payload for chat API."""
    message: str = Field(..., description="Free-text shopping request")


class ProductPayload(BaseModel):
    """Product as rendered by the front-end."""
    id: str
    name: str
    img: str
    price: str
    link: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductPayload":
        return cls(id=product.id, name=product.name, img=product.image, price=product.price, link=product.link)


class ChatResponse(BaseModel):
    """Response payload returned by the chat API."""
    reply: str
    products: List[ProductPayload]


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    catalog_account: str
    selection_mode: str
    model: str
