from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .catalog_records import CatalogRecord


@dataclass(frozen=True)
class Candidate:
    """Ranking view of a record during best-match selection."""
    record: CatalogRecord
    is_preferred_brand: bool
    price: Optional[float]
    in_stock: bool


def is_preferred_brand(record: CatalogRecord, preferred_brand: str) -> bool:
    """Case-insensitive substring match of the brand token against the product name."""
    token = (preferred_brand or "").strip().casefold()
    if not token or not record.product_name:
        return False
    return token in record.product_name.casefold()


def build_candidate(record: CatalogRecord, preferred_brand: str) -> Candidate:
    item = record.first_item()
    seller = item.in_stock_seller() if item is not None else None
    return Candidate(
        record=record,
        is_preferred_brand=is_preferred_brand(record, preferred_brand),
        price=seller.price if seller is not None else None,
        in_stock=seller is not None,
    )


def select_best(records: Sequence[CatalogRecord], preferred_brand: str = "") -> Optional[CatalogRecord]:
    """Purpose: Pick the single best in-stock record among a term's results.
    Inputs/Outputs: Inputs are the records for one term and the preferred-brand token;
        output is the chosen CatalogRecord or None.
    Side Effects / State: None; pure ranking over an in-memory sequence.
    Dependencies: build_candidate, CatalogRecord stock accessors.
    Failure Modes: None; empty input or all records out of stock return None.
    If Removed: Single-best selection mode cannot reduce per-term results.
    Testing Notes: A preferred-brand in-stock record must win regardless of input order;
        ties keep input order.
    """
    # Drop out-of-stock records, then stable-sort preferred brand first.
    candidates: List[Candidate] = [build_candidate(record, preferred_brand) for record in records]
    in_stock = [candidate for candidate in candidates if candidate.in_stock]
    if not in_stock:
        return None
    ranked = sorted(in_stock, key=lambda candidate: 0 if candidate.is_preferred_brand else 1)
    return ranked[0].record
