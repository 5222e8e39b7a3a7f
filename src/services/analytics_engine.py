"""
Customer relationship analytics engine.

`compute_analytics` is a pure function of a customer's history and a
reference instant. Each stage (normalize -> summary / credentials / species
/ timeline -> warnings) only reads its inputs, so concurrent computations
need no coordination and identical inputs give identical snapshots.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence

from models.analytics import CustomerAnalytics, InvoiceSnapshot, OrderSnapshot
from models.records import InvoiceRecord, OrderRecord
from services.credential_service import evaluate_credentials
from services.record_normalizer import normalize_history
from services.species_service import rank_species
from services.summary_service import compute_summary, performance_by_period
from services.timeline_service import build_timeline
from services.warning_service import DEFAULT_TIMELINE_WINDOW, synthesize_warnings

DEFAULT_RECENT_LIMIT = 10

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _reference_instant(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def recent_orders(orders: Sequence[OrderRecord], limit: int) -> List[OrderSnapshot]:
    """Newest orders first; undated orders trail, ties keep id order."""
    by_id = sorted(orders, key=lambda order: order.id)
    newest_first = sorted(
        by_id,
        key=lambda order: (order.order_date is not None, order.order_date or _EPOCH),
        reverse=True,
    )
    return [
        OrderSnapshot(
            id=order.id,
            order_number=order.order_number,
            species=order.species,
            strain=order.strain,
            order_date=order.order_date,
            shipment_status=order.shipment_status.value,
            quality_flag=order.quality_flag.value,
            total_value=order.total_value,
            quantity=order.quantity,
            shipment_date=order.shipment_date,
            shipped_date=order.shipped_date,
        )
        for order in newest_first[: max(limit, 0)]
    ]


def recent_invoices(invoices: Sequence[InvoiceRecord], limit: int) -> List[InvoiceSnapshot]:
    by_id = sorted(invoices, key=lambda invoice: invoice.id)
    newest_first = sorted(
        by_id,
        key=lambda invoice: (invoice.issued_date is not None, invoice.issued_date or _EPOCH),
        reverse=True,
    )
    return [
        InvoiceSnapshot(
            id=invoice.id,
            amount=invoice.amount,
            currency=invoice.currency,
            status=invoice.status.value,
            issued_date=invoice.issued_date,
            paid_date=invoice.paid_date,
        )
        for invoice in newest_first[: max(limit, 0)]
    ]


def compute_analytics(
    customer_id: str,
    orders: Optional[Iterable[Any]] = None,
    invoices: Optional[Iterable[Any]] = None,
    credentials: Optional[Iterable[Any]] = None,
    audit_entries: Optional[Iterable[Any]] = None,
    now: Optional[datetime] = None,
    *,
    recent_orders_limit: int = DEFAULT_RECENT_LIMIT,
    recent_invoices_limit: int = DEFAULT_RECENT_LIMIT,
    top_species_limit: Optional[int] = None,
    warning_timeline_window: int = DEFAULT_TIMELINE_WINDOW,
) -> CustomerAnalytics:
    """
    Build the complete analytics snapshot for one customer.

    Rows may be raw stored mappings or already-normalized records. Missing
    sources (e.g. no audit log) are treated as empty. `now` defaults to the
    current UTC time; pass it explicitly for reproducible output.
    """
    reference = _reference_instant(now)
    history = normalize_history(orders, invoices, credentials, audit_entries)

    summary = compute_summary(history.orders, history.invoices, reference)
    credential_status = evaluate_credentials(history.credentials, reference)
    species = rank_species(history.orders)
    if top_species_limit is not None:
        species = species[: max(top_species_limit, 0)]
    timeline = build_timeline(
        history.orders,
        history.invoices,
        history.credentials,
        history.audit_entries,
        reference,
    )
    warnings = synthesize_warnings(
        summary,
        credential_status,
        timeline,
        history.invoices,
        timeline_window=warning_timeline_window,
    )

    return CustomerAnalytics(
        customer_id=str(customer_id),
        summary=summary,
        performance_by_period=tuple(performance_by_period(history.orders)),
        top_species=tuple(species),
        recent_orders=tuple(recent_orders(history.orders, recent_orders_limit)),
        recent_invoices=tuple(recent_invoices(history.invoices, recent_invoices_limit)),
        credential_status=credential_status,
        timeline=tuple(timeline),
        warnings=tuple(warnings),
    )
