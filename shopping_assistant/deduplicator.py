from __future__ import annotations

from typing import Dict, Iterable, List

from .product_normalizer import Product


def dedupe(products: Iterable[Product]) -> List[Product]:
    """Purpose: Collapse products to one entry per id.
    Inputs/Outputs: Input is an iterable of Product; output is a list unique by id.
    Side Effects / State: None; pure function.
    Dependencies: Relies on dict insertion order.
    Failure Modes: None.
    If Removed: The same product found by two terms is shown twice.
    Testing Notes: A repeated id keeps its first position but takes the later values;
        applying dedupe twice changes nothing.
    """
    # Re-assigning an existing key updates the value without moving it.
    by_id: Dict[str, Product] = {}
    for product in products:
        by_id[product.id] = product
    return list(by_id.values())
