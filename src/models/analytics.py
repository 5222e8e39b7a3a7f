"""Pydantic models for the customer analytics snapshot."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RetentionRisk(str, Enum):
    """How overdue the customer is relative to their own ordering cadence."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CredentialState(str, Enum):
    VALID = "valid"
    EXPIRING = "expiring"
    EXPIRED = "expired"


class Severity(str, Enum):
    """Severity shared by timeline events and warnings."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.CRITICAL: 2}


class TimelineEventType(str, Enum):
    ORDER = "order"
    SHIPMENT = "shipment"
    INVOICE = "invoice"
    PAYMENT = "payment"
    CREDENTIAL = "credential"
    NOTE = "note"
    AUDIT = "audit"


class SnapshotModel(BaseModel):
    """Immutable base serialising with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AnalyticsSummary(SnapshotModel):
    """Headline KPIs and the retention classification."""

    total_orders: int
    total_value: float
    average_order_value: float
    last_order_date: Optional[datetime] = None
    days_since_last_order: Optional[int] = None
    average_days_between_orders: Optional[float] = None
    order_frequency_per_quarter: Optional[float] = None
    open_shipment_count: int = 0
    open_issues_count: int = 0
    outstanding_invoice_value: float = 0.0
    outstanding_invoice_count: int = 0
    retention_risk: RetentionRisk


class PeriodPerformance(SnapshotModel):
    period: str
    total_value: float
    order_count: int
    average_value: float


class SpeciesPerformance(SnapshotModel):
    species: str
    order_count: int
    total_quantity: int
    total_value: float


class OrderSnapshot(SnapshotModel):
    id: str
    order_number: str
    species: str
    strain: Optional[str] = None
    order_date: Optional[datetime] = None
    shipment_status: str
    quality_flag: str
    total_value: float
    quantity: int
    shipment_date: Optional[datetime] = None
    shipped_date: Optional[datetime] = None


class InvoiceSnapshot(SnapshotModel):
    id: str
    amount: float
    currency: str
    status: str
    issued_date: Optional[datetime] = None
    paid_date: Optional[datetime] = None


class CredentialSummary(SnapshotModel):
    """Per-credential assessment at the reference instant."""

    id: Optional[str] = None
    type: str
    number: Optional[str] = None
    status: CredentialState
    issued_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    days_until_expiry: Optional[int] = None


class CredentialStatus(SnapshotModel):
    total: int = 0
    valid: int = 0
    expiring: int = 0
    expired: int = 0
    next_expiry_date: Optional[datetime] = None
    credentials: Tuple[CredentialSummary, ...] = ()


class TimelineEvent(SnapshotModel):
    """One source record placed on the unified chronological axis."""

    id: str
    type: TimelineEventType
    timestamp: datetime
    title: str
    description: Optional[str] = None
    related_id: Optional[str] = None
    related_entity: Optional[str] = None
    severity: Severity = Severity.INFO
    metadata: Optional[Dict[str, Any]] = None


class AnalyticsWarning(SnapshotModel):
    code: str
    message: str
    severity: Severity = Severity.WARNING


class CustomerAnalytics(SnapshotModel):
    """Complete derived snapshot for one customer at one instant."""

    customer_id: str
    summary: AnalyticsSummary
    performance_by_period: Tuple[PeriodPerformance, ...] = ()
    top_species: Tuple[SpeciesPerformance, ...] = ()
    recent_orders: Tuple[OrderSnapshot, ...] = ()
    recent_invoices: Tuple[InvoiceSnapshot, ...] = ()
    credential_status: CredentialStatus = Field(default_factory=CredentialStatus)
    timeline: Tuple[TimelineEvent, ...] = ()
    warnings: Tuple[AnalyticsWarning, ...] = ()

    def to_json(self) -> str:
        """Serialise with camelCase keys and ISO-8601 timestamps."""
        return self.model_dump_json(by_alias=True)
