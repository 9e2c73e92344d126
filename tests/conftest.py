"""Shared fixtures: settings and raw VTEX record builders."""

import os

import pytest

# The app module builds its clients at import time.
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("VTEX_ACCOUNT", "acme")

from shopping_assistant.config import Settings  # noqa: E402


@pytest.fixture()
def settings():
    return Settings(gemini_api_key="test-key", vtex_account="acme")


def _seller(price=100.0, quantity=5, seller_id="1"):
    offer = {"Price": price, "ListPrice": price, "AvailableQuantity": quantity}
    return {"sellerId": seller_id, "sellerName": "Seller " + seller_id, "commertialOffer": offer}


def _record(
    product_id="1",
    name="Producto",
    sellers=None,
    images=("https://img.example/1.jpg",),
    link_text="producto",
    items=True,
):
    record = {"productId": product_id, "productName": name, "linkText": link_text}
    if items:
        record["items"] = [
            {
                "itemId": product_id + "-sku",
                "images": [{"imageUrl": url} for url in images],
                "sellers": [_seller()] if sellers is None else sellers,
            }
        ]
    else:
        record["items"] = []
    return record


@pytest.fixture()
def seller():
    return _seller


@pytest.fixture()
def raw_record():
    return _record
