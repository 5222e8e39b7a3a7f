"""
Pytest configuration to ensure paths are set up correctly for tests.

This allows imports like `from services import analytics_engine` to work
when running tests, simulating the Lambda environment where code
is deployed from the src/ directory.
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import boto3
import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add src/ to sys.path if missing.

    The src/ directory is added to simulate Lambda's import behavior,
    where the deployment package root is src/.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_str = str(repo_root / "src")
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Ensure boto3 has offline-friendly defaults so tests do not require AWS access.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("ENVIRONMENT", "dev")

# Create a default boto3 session so clients do not error during import.
boto3.setup_default_session(region_name="eu-west-2")

NOW = datetime(2024, 3, 10, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Reference instant shared by the analytics tests."""
    return NOW


@pytest.fixture
def order_rows():
    """Stored order rows for one shrimp hatchery customer (snake_case columns)."""
    return [
        {
            "id": "order-1",
            "order_number": "PO-001",
            "order_date": "2024-02-20",
            "shipment_status": "pending",
            "quality_flag": "ok",
            "total_value": "4000.17",
            "quantity": 2000,
            "species": "Penaeus vannamei",
            "strain": "Line A",
            "shipment_date": "2024-02-25",
            "shipped_date": None,
        },
        {
            "id": "order-2",
            "order_number": "PO-002",
            "order_date": "2024-01-18",
            "shipment_status": "problem",
            "quality_flag": "critical_issue",
            "total_value": "3999.99",
            "quantity": 1800,
            "species": "Penaeus vannamei",
            "strain": "Line B",
            "shipment_date": "2024-01-25",
            "shipped_date": "2024-01-30",
        },
        {
            "id": "order-3",
            "order_number": "PO-003",
            "order_date": "2023-12-10",
            "shipment_status": "delivered",
            "quality_flag": "ok",
            "total_value": "4000.34",
            "quantity": 1700,
            "species": "Penaeus monodon",
            "strain": None,
            "shipment_date": "2023-12-18",
            "shipped_date": "2023-12-20",
        },
    ]


@pytest.fixture
def invoice_rows():
    return [
        {
            "id": "inv-1",
            "amount": "2500.00",
            "currency": "USD",
            "status": "pending",
            "issued_date": "2024-02-22",
            "paid_date": None,
        },
        {
            "id": "inv-0",
            "amount": "3999.99",
            "currency": "USD",
            "status": "paid",
            "issued_date": "2024-01-18",
            "paid_date": "2024-02-01",
        },
    ]


@pytest.fixture
def credential_rows():
    return [
        {
            "type": "license",
            "number": "LIC-001",
            "issued_date": "2024-01-01",
            "expiry_date": "2024-12-31",
        },
        {
            "type": "permit",
            "number": "PER-002",
            "issued_date": "2023-01-15",
            "expiry_date": "2024-01-15",
        },
    ]


@pytest.fixture
def audit_rows():
    return [
        {
            "id": "audit-1",
            "entity_type": "customer",
            "entity_id": "cust-001",
            "action": "update",
            "user_id": "user-1",
            "changes": {"field": "status", "previous": "paused", "current": "active"},
            "timestamp": "2024-02-15T10:00:00Z",
        }
    ]
