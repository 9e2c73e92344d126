"""Typed view of the sparse product records returned by the VTEX catalog search.

A raw record looks roughly like::

    {"productId": "123", "productName": "...", "linkText": "slug",
     "items": [{"images": [{"imageUrl": "..."}],
                "sellers": [{"sellerId": "1",
                             "commertialOffer": {"Price": 10.5, "AvailableQuantity": 3}}]}]}

Any nested collection can be empty or missing, and scalar fields can be null or of an
unexpected type. Parsing never raises: absent values become None or an empty tuple,
and each accessor returns None when there is nothing to return.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


def _has_value(value: Any) -> bool:
    # Treat None and whitespace-only strings as absent.
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _as_text(value: Any) -> Optional[str]:
    if not _has_value(value):
        return None
    if isinstance(value, (dict, list)):
        return None
    return str(value).strip()


def _as_number(value: Any) -> Optional[float]:
    # Numbers may arrive as numeric strings; booleans, NaN and infinities are not prices.
    if isinstance(value, bool) or not _has_value(value):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def _as_dict_list(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


@dataclass(frozen=True)
class CommercialOffer:
    """Price and stock for one seller."""
    price: Optional[float] = None
    available_quantity: Optional[float] = None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["CommercialOffer"]:
        if not isinstance(raw, dict):
            return None
        return cls(
            price=_as_number(raw.get("Price")),
            available_quantity=_as_number(raw.get("AvailableQuantity")),
        )


@dataclass(frozen=True)
class CatalogSeller:
    seller_id: Optional[str] = None
    offer: Optional[CommercialOffer] = None

    @property
    def in_stock(self) -> bool:
        """True when the seller reports a strictly positive available quantity."""
        if self.offer is None or self.offer.available_quantity is None:
            return False
        return self.offer.available_quantity > 0

    @property
    def price(self) -> Optional[float]:
        return self.offer.price if self.offer is not None else None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "CatalogSeller":
        return cls(
            seller_id=_as_text(raw.get("sellerId")),
            offer=CommercialOffer.from_raw(raw.get("commertialOffer")),
        )


@dataclass(frozen=True)
class CatalogItem:
    """One SKU of a product: its images and the sellers offering it."""
    image_urls: Tuple[str, ...] = ()
    sellers: Tuple[CatalogSeller, ...] = ()

    def first_image_url(self) -> Optional[str]:
        return self.image_urls[0] if self.image_urls else None

    def first_seller(self) -> Optional[CatalogSeller]:
        return self.sellers[0] if self.sellers else None

    def in_stock_seller(self) -> Optional[CatalogSeller]:
        """Purpose: Return the first seller with positive available quantity.
        Inputs/Outputs: No inputs; output is a CatalogSeller or None.
        Side Effects / State: None.
        Dependencies: CatalogSeller.in_stock.
        Failure Modes: None; returns None when every seller is out of stock.
        If Removed: Stock checks and seller selection cannot prefer in-stock offers.
        Testing Notes: Mixed sellers should return the first with quantity > 0.
        """
        # Scan sellers in backend order.
        for seller in self.sellers:
            if seller.in_stock:
                return seller
        return None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "CatalogItem":
        image_urls = []
        for image in _as_dict_list(raw.get("images")):
            url = _as_text(image.get("imageUrl"))
            if url:
                image_urls.append(url)
        sellers = [CatalogSeller.from_raw(seller) for seller in _as_dict_list(raw.get("sellers"))]
        return cls(
            image_urls=tuple(image_urls),
            sellers=tuple(sellers),
        )


@dataclass(frozen=True)
class CatalogRecord:
    """Normalized view of one product record with the raw backing dict."""
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    link_text: Optional[str] = None
    items: Tuple[CatalogItem, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def first_item(self) -> Optional[CatalogItem]:
        return self.items[0] if self.items else None

    def first_image_url(self) -> Optional[str]:
        item = self.first_item()
        return item.first_image_url() if item is not None else None

    @property
    def in_stock(self) -> bool:
        """Stock is judged on the first item only."""
        item = self.first_item()
        return item is not None and item.in_stock_seller() is not None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "CatalogRecord":
        """Purpose: Build a CatalogRecord from a raw catalog JSON object.
        Inputs/Outputs: Input is a decoded JSON dict; output is a CatalogRecord.
        Side Effects / State: None; the raw dict is kept by reference.
        Dependencies: CatalogItem.from_raw and the coercion helpers above.
        Failure Modes: None; malformed nested values are treated as absent.
        If Removed: Selection and normalization would read untyped nested dicts.
        Testing Notes: Missing items/images/sellers produce empty tuples.
        """
        # Coerce top-level scalars and parse every dict-shaped item.
        items = [CatalogItem.from_raw(item) for item in _as_dict_list(raw.get("items"))]
        return cls(
            product_id=_as_text(raw.get("productId")),
            product_name=_as_text(raw.get("productName")),
            link_text=_as_text(raw.get("linkText")),
            items=tuple(items),
            raw=raw,
        )
