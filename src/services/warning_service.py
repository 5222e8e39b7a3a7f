"""Warning synthesis over the assembled snapshot parts."""

from __future__ import annotations

from typing import List, Sequence

from models.analytics import (
    AnalyticsSummary,
    AnalyticsWarning,
    CredentialStatus,
    RetentionRisk,
    Severity,
    TimelineEvent,
    TimelineEventType,
)
from models.records import InvoiceRecord, InvoiceStatus, ShipmentStatus
from services.credential_service import EXPIRING_WINDOW_DAYS

DEFAULT_TIMELINE_WINDOW = 20


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def synthesize_warnings(
    summary: AnalyticsSummary,
    credential_status: CredentialStatus,
    timeline: Sequence[TimelineEvent],
    invoices: Sequence[InvoiceRecord] = (),
    timeline_window: int = DEFAULT_TIMELINE_WINDOW,
) -> List[AnalyticsWarning]:
    """
    Emit coded warnings.

    Rules are evaluated in a fixed order and the result is then stably
    sorted by descending severity, so critical warnings lead and equal
    severities keep rule order.
    """
    warnings: List[AnalyticsWarning] = []

    if summary.retention_risk == RetentionRisk.HIGH:
        if summary.days_since_last_order is None:
            detail = "No orders on record"
        else:
            detail = f"Last order {summary.days_since_last_order} days ago"
        warnings.append(
            AnalyticsWarning(
                code="RETENTION_RISK_HIGH",
                message=f"{detail}; customer is at high risk of churning",
                severity=Severity.CRITICAL,
            )
        )
    elif summary.retention_risk == RetentionRisk.MEDIUM:
        warnings.append(
            AnalyticsWarning(
                code="RETENTION_RISK_MEDIUM",
                message=(
                    f"Last order {summary.days_since_last_order} days ago; "
                    "ordering cadence is slipping"
                ),
                severity=Severity.WARNING,
            )
        )

    if credential_status.expiring > 0:
        warnings.append(
            AnalyticsWarning(
                code="CREDENTIAL_EXPIRING",
                message=(
                    f"{_plural(credential_status.expiring, 'credential')} expiring "
                    f"within {EXPIRING_WINDOW_DAYS} days"
                ),
                severity=Severity.WARNING,
            )
        )
    if credential_status.expired > 0:
        warnings.append(
            AnalyticsWarning(
                code="CREDENTIAL_EXPIRED",
                message=f"{_plural(credential_status.expired, 'credential')} expired",
                severity=Severity.CRITICAL,
            )
        )

    overdue = [invoice for invoice in invoices if invoice.status == InvoiceStatus.OVERDUE]
    if summary.outstanding_invoice_count > 0 and overdue:
        warnings.append(
            AnalyticsWarning(
                code="INVOICES_OVERDUE",
                message=(
                    f"{_plural(len(overdue), 'invoice')} overdue; "
                    f"{summary.outstanding_invoice_value:,.2f} outstanding"
                ),
                severity=Severity.WARNING,
            )
        )

    if summary.open_issues_count > 0:
        warnings.append(
            AnalyticsWarning(
                code="QUALITY_ISSUES_OPEN",
                message=f"{_plural(summary.open_issues_count, 'order')} with open quality issues",
                severity=Severity.WARNING,
            )
        )

    problem_orders = {
        event.related_id
        for event in timeline[: max(timeline_window, 0)]
        if event.type in (TimelineEventType.ORDER, TimelineEventType.SHIPMENT)
        and (event.metadata or {}).get("shipmentStatus") == ShipmentStatus.PROBLEM.value
    }
    if problem_orders:
        warnings.append(
            AnalyticsWarning(
                code="SHIPMENT_ISSUES",
                message=f"{_plural(len(problem_orders), 'recent order')} with shipment problems",
                severity=Severity.WARNING,
            )
        )

    return sorted(warnings, key=lambda warning: -warning.severity.rank)
