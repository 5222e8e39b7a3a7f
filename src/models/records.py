"""Normalized customer history records consumed by the analytics engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ShipmentStatus(str, Enum):
    """Fulfilment progress of an order."""

    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    PROBLEM = "problem"


class QualityFlag(str, Enum):
    """Quality outcome reported for a delivered batch."""

    OK = "ok"
    MINOR_ISSUE = "minor_issue"
    CRITICAL_ISSUE = "critical_issue"


class InvoiceStatus(str, Enum):
    """Billing state of an invoice."""

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class AuditAction(str, Enum):
    """Mutation recorded in the audit log."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class OrderRecord(BaseModel):
    """Single broodstock order with parsed dates and numeric amounts."""

    model_config = ConfigDict(frozen=True)

    id: str
    order_number: str
    order_date: Optional[datetime] = None
    species: str = "Unknown"
    strain: Optional[str] = None
    quantity: int = 0
    total_value: float = 0.0
    shipment_status: ShipmentStatus = ShipmentStatus.PENDING
    quality_flag: QualityFlag = QualityFlag.OK
    shipment_date: Optional[datetime] = None
    shipped_date: Optional[datetime] = None


class InvoiceRecord(BaseModel):
    """Invoice issued to the customer."""

    model_config = ConfigDict(frozen=True)

    id: str
    amount: float = 0.0
    currency: str = "USD"
    status: InvoiceStatus = InvoiceStatus.PENDING
    issued_date: Optional[datetime] = None
    paid_date: Optional[datetime] = None


class CredentialRecord(BaseModel):
    """Compliance artifact (license, permit, certificate, registration)."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    type: str
    number: Optional[str] = None
    issued_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None

    @property
    def source_id(self) -> str:
        """Stable identifier even when the stored credential has no id."""
        if self.id:
            return self.id
        if self.number:
            return f"{self.type}-{self.number}"
        issued = self.issued_date.date().isoformat() if self.issued_date else "undated"
        expires = self.expiry_date.date().isoformat() if self.expiry_date else "open"
        return f"{self.type}-unnumbered-{issued}-{expires}"


class AuditEntryRecord(BaseModel):
    """Audit log row touching the customer or one of its orders."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    entity_type: str
    entity_id: str
    action: AuditAction = AuditAction.UPDATE
    timestamp: Optional[datetime] = None
    actor: Optional[str] = None
    changes: Dict[str, Any] = Field(default_factory=dict)

    @property
    def source_id(self) -> str:
        if self.id:
            return self.id
        stamp = self.timestamp.isoformat() if self.timestamp else "undated"
        return f"{self.entity_type}-{self.entity_id}-{self.action.value}-{stamp}"


@dataclass(frozen=True)
class NormalizedHistory:
    """The four record sequences for one customer, each sorted by its date."""

    orders: Tuple[OrderRecord, ...] = field(default_factory=tuple)
    invoices: Tuple[InvoiceRecord, ...] = field(default_factory=tuple)
    credentials: Tuple[CredentialRecord, ...] = field(default_factory=tuple)
    audit_entries: Tuple[AuditEntryRecord, ...] = field(default_factory=tuple)
