"""
End-to-end tests for the pure analytics engine.

Run with: pytest tests/unit/test_analytics_engine.py -v
"""

import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src to path to simulate Lambda environment
SRC_PATH = Path(__file__).parent.parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from models.analytics import RetentionRisk, TimelineEventType  # noqa: E402
from services.analytics_engine import compute_analytics  # noqa: E402


class TestZeroHistory:
    def test_empty_snapshot(self, now):
        analytics = compute_analytics("cust-empty", [], [], [], None, now)

        assert analytics.summary.total_orders == 0
        assert analytics.summary.average_order_value == 0
        assert analytics.summary.last_order_date is None
        assert analytics.summary.retention_risk == RetentionRisk.HIGH
        assert analytics.credential_status.total == 0
        assert analytics.timeline == ()
        assert analytics.top_species == ()
        assert analytics.performance_by_period == ()
        assert "RETENTION_RISK_HIGH" in [warning.code for warning in analytics.warnings]

    def test_all_sources_omitted(self, now):
        analytics = compute_analytics("cust-empty", now=now)
        assert analytics.customer_id == "cust-empty"
        assert analytics.summary.retention_risk == RetentionRisk.HIGH


class TestFullHistory:
    def test_aggregated_snapshot(self, now, order_rows, invoice_rows, credential_rows, audit_rows):
        analytics = compute_analytics(
            "cust-001", order_rows, invoice_rows, credential_rows, audit_rows, now
        )

        assert analytics.summary.total_orders == 3
        assert analytics.summary.total_value == pytest.approx(12000.5)
        assert analytics.summary.outstanding_invoice_count == 1
        assert analytics.summary.outstanding_invoice_value == pytest.approx(2500.0)
        assert analytics.summary.open_shipment_count == 2
        assert analytics.summary.open_issues_count == 1
        assert analytics.credential_status.expired == 1
        assert analytics.credential_status.valid == 1
        assert [species.species for species in analytics.top_species] == [
            "Penaeus vannamei",
            "Penaeus monodon",
        ]
        assert analytics.recent_orders[0].order_number == "PO-001"
        assert analytics.recent_invoices[0].id == "inv-1"
        assert len(analytics.timeline) > 0
        assert TimelineEventType.AUDIT in {event.type for event in analytics.timeline}

        codes = [warning.code for warning in analytics.warnings]
        assert codes == ["CREDENTIAL_EXPIRED", "QUALITY_ISSUES_OPEN", "SHIPMENT_ISSUES"]

    def test_limits(self, now, order_rows, invoice_rows):
        analytics = compute_analytics(
            "cust-001",
            order_rows,
            invoice_rows,
            now=now,
            recent_orders_limit=2,
            recent_invoices_limit=1,
            top_species_limit=1,
        )
        assert [order.id for order in analytics.recent_orders] == ["order-1", "order-2"]
        assert [invoice.id for invoice in analytics.recent_invoices] == ["inv-1"]
        assert len(analytics.top_species) == 1

    def test_undated_orders_trail_recent_orders(self, now, order_rows):
        rows = order_rows + [{"id": "order-0", "order_number": "PO-000", "order_date": "garbage"}]
        analytics = compute_analytics("cust-001", rows, now=now)
        assert analytics.recent_orders[-1].id == "order-0"
        assert analytics.summary.total_orders == 4

    def test_naive_now_is_treated_as_utc(self, order_rows):
        aware = compute_analytics("c", order_rows, now=datetime(2024, 3, 10, tzinfo=timezone.utc))
        naive = compute_analytics("c", order_rows, now=datetime(2024, 3, 10))
        assert aware == naive


class TestDeterminism:
    def test_repeated_runs_are_byte_identical(
        self, now, order_rows, invoice_rows, credential_rows, audit_rows
    ):
        first = compute_analytics("cust-001", order_rows, invoice_rows, credential_rows, audit_rows, now)
        second = compute_analytics(
            "cust-001",
            list(reversed(order_rows)),
            list(reversed(invoice_rows)),
            list(reversed(credential_rows)),
            audit_rows,
            now,
        )
        assert first.to_json() == second.to_json()

    def test_json_contract(self, now, order_rows, invoice_rows, credential_rows):
        body = json.loads(
            compute_analytics("cust-001", order_rows, invoice_rows, credential_rows, now=now).to_json()
        )

        assert set(body) == {
            "customerId",
            "summary",
            "performanceByPeriod",
            "topSpecies",
            "recentOrders",
            "recentInvoices",
            "credentialStatus",
            "timeline",
            "warnings",
        }
        assert body["summary"]["lastOrderDate"] == "2024-02-20T00:00:00Z"
        assert body["summary"]["totalValue"] == pytest.approx(12000.5)
        assert body["credentialStatus"]["nextExpiryDate"] == "2024-12-31T00:00:00Z"
        assert body["timeline"][0]["relatedEntity"] == "invoice"


class TestAlwaysProducesOutput:
    @pytest.mark.parametrize(
        "orders, invoices, credentials, audit_entries",
        [
            ([{"id": "x"}], [], [], []),
            ([{"id": "x", "order_date": None, "total_value": None, "quantity": "abc"}], [], [], []),
            ([], [{"id": "i", "amount": "oops", "issued_date": "never"}], [], []),
            ([], [], [{"type": None, "expiry_date": "2024-13-45"}], []),
            ([], [], [], [{"entity_id": None, "timestamp": "soon"}]),
            ([None, 42, "row"], [{}], [{}], [{}]),
        ],
    )
    def test_anomalous_rows_never_raise(self, now, orders, invoices, credentials, audit_entries):
        analytics = compute_analytics("cust-odd", orders, invoices, credentials, audit_entries, now)
        assert analytics.customer_id == "cust-odd"
        status = analytics.credential_status
        assert status.total == len(status.credentials)
        assert status.valid + status.expiring + status.expired == status.total

    def test_far_future_and_past_dates(self, now):
        analytics = compute_analytics(
            "cust-edge",
            [
                {"id": "a", "order_number": "A", "order_date": "0001-01-02"},
                {"id": "b", "order_number": "B", "order_date": now + timedelta(days=3)},
            ],
            now=now,
        )
        assert analytics.summary.days_since_last_order == -3
        assert analytics.summary.retention_risk == RetentionRisk.LOW
