"""
Warning synthesizer tests.

Run with: pytest tests/unit/test_warning_service.py -v
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src to path to simulate Lambda environment
SRC_PATH = Path(__file__).parent.parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from models.analytics import (  # noqa: E402
    AnalyticsSummary,
    CredentialStatus,
    RetentionRisk,
    Severity,
    TimelineEvent,
    TimelineEventType,
)
from models.records import InvoiceRecord, InvoiceStatus  # noqa: E402
from services.warning_service import synthesize_warnings  # noqa: E402

NOW = datetime(2024, 3, 10, tzinfo=timezone.utc)


def _summary(**overrides) -> AnalyticsSummary:
    fields = {
        "total_orders": 4,
        "total_value": 4000.0,
        "average_order_value": 1000.0,
        "last_order_date": NOW - timedelta(days=5),
        "days_since_last_order": 5,
        "average_days_between_orders": 10.0,
        "retention_risk": RetentionRisk.LOW,
    }
    fields.update(overrides)
    return AnalyticsSummary(**fields)


def _order_event(order_id: str, days_ago: int, shipment_status: str) -> TimelineEvent:
    return TimelineEvent(
        id=f"order:{order_id}",
        type=TimelineEventType.ORDER,
        timestamp=NOW - timedelta(days=days_ago),
        title=f"Order {order_id} placed",
        related_id=order_id,
        metadata={"shipmentStatus": shipment_status},
    )


def _codes(warnings):
    return [warning.code for warning in warnings]


def test_healthy_customer_has_no_warnings():
    assert synthesize_warnings(_summary(), CredentialStatus(), []) == []


def test_high_retention_risk_is_critical():
    warnings = synthesize_warnings(
        _summary(total_orders=0, days_since_last_order=None, retention_risk=RetentionRisk.HIGH),
        CredentialStatus(),
        [],
    )
    assert _codes(warnings) == ["RETENTION_RISK_HIGH"]
    assert warnings[0].severity == Severity.CRITICAL
    assert "No orders" in warnings[0].message


def test_medium_retention_risk_is_a_warning():
    warnings = synthesize_warnings(
        _summary(days_since_last_order=16, retention_risk=RetentionRisk.MEDIUM),
        CredentialStatus(),
        [],
    )
    assert _codes(warnings) == ["RETENTION_RISK_MEDIUM"]
    assert warnings[0].severity == Severity.WARNING


def test_credential_warnings():
    status = CredentialStatus(total=3, valid=1, expiring=1, expired=1)
    warnings = synthesize_warnings(_summary(), status, [])

    # Critical first, then rule order.
    assert _codes(warnings) == ["CREDENTIAL_EXPIRED", "CREDENTIAL_EXPIRING"]
    assert [warning.severity for warning in warnings] == [Severity.CRITICAL, Severity.WARNING]


def test_overdue_invoices_need_an_overdue_status():
    summary = _summary(outstanding_invoice_count=1, outstanding_invoice_value=100.0)
    pending_only = [InvoiceRecord(id="i-1", amount=100, status=InvoiceStatus.PENDING)]
    overdue = [InvoiceRecord(id="i-1", amount=100, status=InvoiceStatus.OVERDUE)]

    assert synthesize_warnings(summary, CredentialStatus(), [], pending_only) == []
    warnings = synthesize_warnings(summary, CredentialStatus(), [], overdue)
    assert _codes(warnings) == ["INVOICES_OVERDUE"]
    assert warnings[0].severity == Severity.WARNING


def test_quality_issues_open():
    warnings = synthesize_warnings(_summary(open_issues_count=2), CredentialStatus(), [])
    assert _codes(warnings) == ["QUALITY_ISSUES_OPEN"]
    assert warnings[0].message.startswith("2 orders")


def test_shipment_issues_only_within_window():
    timeline = [_order_event(f"o-{i}", i, "delivered") for i in range(3)]
    timeline.append(_order_event("o-old", 50, "problem"))

    assert synthesize_warnings(_summary(), CredentialStatus(), timeline, timeline_window=3) == []
    warnings = synthesize_warnings(_summary(), CredentialStatus(), timeline, timeline_window=4)
    assert _codes(warnings) == ["SHIPMENT_ISSUES"]


def test_severity_then_rule_order():
    summary = _summary(
        total_orders=0,
        days_since_last_order=None,
        retention_risk=RetentionRisk.HIGH,
        open_issues_count=1,
        outstanding_invoice_count=1,
    )
    status = CredentialStatus(total=2, expiring=1, expired=1)
    invoices = [InvoiceRecord(id="i", amount=5, status=InvoiceStatus.OVERDUE)]
    timeline = [_order_event("o-1", 1, "problem")]

    warnings = synthesize_warnings(summary, status, timeline, invoices)
    assert _codes(warnings) == [
        "RETENTION_RISK_HIGH",
        "CREDENTIAL_EXPIRED",
        "CREDENTIAL_EXPIRING",
        "INVOICES_OVERDUE",
        "QUALITY_ISSUES_OPEN",
        "SHIPMENT_ISSUES",
    ]


def test_inputs_are_not_mutated():
    summary = _summary(open_issues_count=1)
    status = CredentialStatus(total=1, expired=1)
    timeline = [_order_event("o-1", 1, "problem")]
    before = (summary.model_dump(), status.model_dump(), [e.model_dump() for e in timeline])

    synthesize_warnings(summary, status, timeline)

    assert before == (summary.model_dump(), status.model_dump(), [e.model_dump() for e in timeline])
