"""
Summary calculator.

Aggregate KPIs over a customer's orders and invoices, the quarterly
performance rollup, and the retention-risk classification. Day counts are
whole UTC calendar days.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from models.analytics import AnalyticsSummary, PeriodPerformance, RetentionRisk
from models.records import InvoiceRecord, InvoiceStatus, OrderRecord, QualityFlag, ShipmentStatus

OPEN_SHIPMENT_STATUSES = frozenset({ShipmentStatus.PENDING, ShipmentStatus.PROBLEM})
OUTSTANDING_INVOICE_STATUSES = frozenset({InvoiceStatus.PENDING, InvoiceStatus.OVERDUE})

# Retention thresholds, relative to the customer's own cadence or absolute.
HIGH_CADENCE_MULTIPLIER = 2.0
MEDIUM_CADENCE_MULTIPLIER = 1.5
HIGH_ABSOLUTE_DAYS = 180
MEDIUM_ABSOLUTE_DAYS = 90
QUARTER_DAYS = 90


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole calendar days from earlier to later (negative if reversed)."""
    return (later.date() - earlier.date()).days


def classify_retention_risk(
    total_orders: int,
    days_since_last_order: Optional[int],
    average_days_between_orders: Optional[float],
) -> RetentionRisk:
    """First matching rule wins: high, then medium, else low."""
    if total_orders == 0 or days_since_last_order is None:
        return RetentionRisk.HIGH

    if average_days_between_orders is not None:
        if days_since_last_order > HIGH_CADENCE_MULTIPLIER * average_days_between_orders:
            return RetentionRisk.HIGH
    elif days_since_last_order > HIGH_ABSOLUTE_DAYS:
        return RetentionRisk.HIGH

    if (
        average_days_between_orders is not None
        and days_since_last_order > MEDIUM_CADENCE_MULTIPLIER * average_days_between_orders
    ):
        return RetentionRisk.MEDIUM
    if days_since_last_order > MEDIUM_ABSOLUTE_DAYS:
        return RetentionRisk.MEDIUM

    return RetentionRisk.LOW


def _average_gap(order_dates: Sequence[datetime]) -> Optional[float]:
    if len(order_dates) < 2:
        return None
    gaps = [days_between(prev, cur) for prev, cur in zip(order_dates, order_dates[1:])]
    return sum(gaps) / len(gaps)


def compute_summary(
    orders: Sequence[OrderRecord],
    invoices: Sequence[InvoiceRecord],
    now: datetime,
) -> AnalyticsSummary:
    """Build the KPI block; orders are expected sorted ascending by date."""
    total_orders = len(orders)
    total_value = sum(order.total_value for order in orders)
    average_order_value = total_value / total_orders if total_orders else 0.0

    order_dates = sorted(order.order_date for order in orders if order.order_date is not None)
    last_order_date = order_dates[-1] if order_dates else None
    days_since_last_order = days_between(last_order_date, now) if last_order_date else None
    average_days_between_orders = _average_gap(order_dates)

    order_frequency_per_quarter = None
    if total_orders >= 2 and order_dates:
        span_days = days_between(order_dates[0], order_dates[-1])
        if span_days > 0:
            order_frequency_per_quarter = total_orders / (span_days / QUARTER_DAYS)

    outstanding = [inv for inv in invoices if inv.status in OUTSTANDING_INVOICE_STATUSES]

    return AnalyticsSummary(
        total_orders=total_orders,
        total_value=total_value,
        average_order_value=average_order_value,
        last_order_date=last_order_date,
        days_since_last_order=days_since_last_order,
        average_days_between_orders=average_days_between_orders,
        order_frequency_per_quarter=order_frequency_per_quarter,
        open_shipment_count=sum(
            1 for order in orders if order.shipment_status in OPEN_SHIPMENT_STATUSES
        ),
        open_issues_count=sum(1 for order in orders if order.quality_flag != QualityFlag.OK),
        outstanding_invoice_value=sum(inv.amount for inv in outstanding),
        outstanding_invoice_count=len(outstanding),
        retention_risk=classify_retention_risk(
            total_orders, days_since_last_order, average_days_between_orders
        ),
    )


def quarter_label(moment: datetime) -> str:
    return f"{moment.year:04d}-Q{(moment.month - 1) // 3 + 1}"


def performance_by_period(orders: Sequence[OrderRecord]) -> List[PeriodPerformance]:
    """Quarterly order value rollup, most recent quarter first."""
    buckets: Dict[str, List[OrderRecord]] = {}
    for order in orders:
        if order.order_date is None:
            continue
        buckets.setdefault(quarter_label(order.order_date), []).append(order)

    periods = []
    for label in sorted(buckets, reverse=True):
        bucket = buckets[label]
        total = sum(order.total_value for order in bucket)
        periods.append(
            PeriodPerformance(
                period=label,
                total_value=total,
                order_count=len(bucket),
                average_value=total / len(bucket),
            )
        )
    return periods
