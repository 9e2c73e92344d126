"""Typed parsing of sparse catalog records."""

from shopping_assistant.catalog_records import CatalogRecord


def test_sparse_record_parses_without_errors():
    record = CatalogRecord.from_raw(
        {
            "productId": 123,
            "productName": "  Yerba Mate  ",
            "items": [
                {
                    "images": "not-a-list",
                    "sellers": [
                        None,
                        {"sellerId": "1", "commertialOffer": None},
                        {"sellerId": "2", "commertialOffer": {"Price": "99.5", "AvailableQuantity": "3"}},
                    ],
                },
                "garbage",
            ],
        }
    )

    assert record.product_id == "123"
    assert record.product_name == "Yerba Mate"
    assert record.link_text is None
    assert len(record.items) == 1
    item = record.first_item()
    assert item.first_image_url() is None
    assert [seller.seller_id for seller in item.sellers] == ["1", "2"]
    assert item.sellers[0].offer is None
    assert item.sellers[0].price is None
    assert item.in_stock_seller().seller_id == "2"
    assert item.in_stock_seller().price == 99.5
    assert record.in_stock


def test_absent_collections_become_empty():
    record = CatalogRecord.from_raw({"productId": "1"})

    assert record.items == ()
    assert record.first_item() is None
    assert record.first_image_url() is None
    assert not record.in_stock


def test_blank_image_urls_are_skipped():
    record = CatalogRecord.from_raw(
        {"items": [{"images": [{"imageUrl": " "}, {"imageUrl": "https://img/2.jpg"}], "sellers": []}]}
    )

    assert record.first_image_url() == "https://img/2.jpg"


def test_non_numeric_quantity_is_out_of_stock():
    record = CatalogRecord.from_raw(
        {"items": [{"sellers": [{"commertialOffer": {"Price": 1, "AvailableQuantity": "n/a"}}]}]}
    )

    assert not record.in_stock
    assert record.first_item().first_seller().price == 1.0


def test_non_finite_numbers_are_absent():
    record = CatalogRecord.from_raw(
        {"items": [{"sellers": [{"commertialOffer": {"Price": "NaN", "AvailableQuantity": float("inf")}}]}]}
    )

    seller = record.first_item().first_seller()
    assert seller.price is None
    assert seller.offer.available_quantity is None
    assert not record.in_stock
