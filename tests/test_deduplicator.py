"""Deduplication keeps first position and last values."""

from shopping_assistant.deduplicator import dedupe
from shopping_assistant.product_normalizer import Product


def _product(product_id, price="$1,00", name=None):
    return Product(
        id=product_id,
        name=name or f"Producto {product_id}",
        image="https://img.example/x.jpg",
        price=price,
        link=f"/p{product_id}/p",
    )


def test_unique_products_pass_through_in_order():
    products = [_product("a"), _product("b"), _product("c")]

    assert dedupe(products) == products


def test_later_duplicate_values_win_at_first_position():
    first = _product("a", price="$1,00")
    middle = _product("b")
    later = _product("a", price="$2,00", name="Producto A actualizado")

    result = dedupe([first, middle, later])

    assert [product.id for product in result] == ["a", "b"]
    assert result[0] == later


def test_dedupe_is_idempotent():
    products = [_product("a"), _product("b"), _product("a", price="$9,00"), _product("c"), _product("b")]

    once = dedupe(products)

    assert dedupe(once) == once


def test_empty_input():
    assert dedupe([]) == []
