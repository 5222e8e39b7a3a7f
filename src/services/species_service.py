"""Species performance rollup."""

from __future__ import annotations

from typing import Dict, List, Sequence

from models.analytics import SpeciesPerformance
from models.records import OrderRecord


def rank_species(orders: Sequence[OrderRecord]) -> List[SpeciesPerformance]:
    """
    Group orders by exact species name and rank by total value.

    The full ranking is returned; ties on value fall back to the species name
    so the order never depends on input order. Truncation is left to callers.
    """
    totals: Dict[str, Dict[str, float]] = {}
    for order in orders:
        bucket = totals.setdefault(
            order.species, {"order_count": 0, "total_quantity": 0, "total_value": 0.0}
        )
        bucket["order_count"] += 1
        bucket["total_quantity"] += order.quantity
        bucket["total_value"] += order.total_value

    ranked = sorted(totals.items(), key=lambda item: (-item[1]["total_value"], item[0]))
    return [
        SpeciesPerformance(
            species=species,
            order_count=int(stats["order_count"]),
            total_quantity=int(stats["total_quantity"]),
            total_value=stats["total_value"],
        )
        for species, stats in ranked
    ]
