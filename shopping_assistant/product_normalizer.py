from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .catalog_records import CatalogItem, CatalogRecord, CatalogSeller
from .config import Settings
from .pricing import PriceFormatter

logger = logging.getLogger("shopping_assistant.normalizer")


@dataclass(frozen=True)
class Product:
    """Compact product returned to the caller."""
    id: str
    name: str
    image: str
    price: str
    link: str


class ProductNormalizer:
    """Maps catalog records onto Product using the deployment's formatting options."""

    def __init__(self, settings: Settings) -> None:
        self._formatter = PriceFormatter(settings.price_locale, settings.price_currency)
        self._unavailable_label = settings.price_unavailable_label
        self._placeholder_image = settings.placeholder_image_url
        self._storefront_url = settings.storefront_url.rstrip("/")

    def choose_seller(self, item: CatalogItem) -> Optional[CatalogSeller]:
        """First in-stock seller, else the first seller listed, else None."""
        seller = item.in_stock_seller()
        if seller is not None:
            return seller
        return item.first_seller()

    def format_price(self, seller: Optional[CatalogSeller]) -> str:
        if seller is None or seller.price is None:
            return self._unavailable_label
        return self._formatter.format(seller.price)

    def build_link(self, slug: Optional[str]) -> str:
        if not slug:
            return "#"
        path = f"/{slug.strip('/')}/p"
        if self._storefront_url:
            return self._storefront_url + path
        return path

    def normalize(self, record: CatalogRecord) -> Optional[Product]:
        """Purpose: Convert one catalog record into the output Product shape.
        Inputs/Outputs: Input is a CatalogRecord; output is a Product, or None when the
            record has no items.
        Side Effects / State: Debug log when a record is dropped.
        Dependencies: PriceFormatter, choose_seller, build_link.
        Failure Modes: None raised; missing image, sellers, price or slug fall back to
            the placeholder image, the unavailable label, and "#" respectively.
        If Removed: Raw catalog payloads would leak to the caller.
        Testing Notes: Items without sellers still produce a Product with the label.
        """
        # Only a record without items is unusable.
        item = record.first_item()
        if item is None:
            logger.debug("normalizer dropped record product_id=%s reason=no_items", record.product_id)
            return None

        image = item.first_image_url() or self._placeholder_image
        seller = self.choose_seller(item)
        return Product(
            id=record.product_id or "",
            name=record.product_name or "",
            image=image,
            price=self.format_price(seller),
            link=self.build_link(record.link_text),
        )
