"""
Timeline builder.

Maps every source record onto one chronological axis. Events are ordered
newest first; equal timestamps fall back to a fixed type priority and then
to the source record id, so two runs over the same history always agree on
both order and event ids.
"""

from __future__ import annotations

from datetime import datetime
from functools import cmp_to_key
from typing import Dict, List, Optional, Sequence

from models.analytics import (
    CredentialState,
    Severity,
    TimelineEvent,
    TimelineEventType,
)
from models.records import (
    AuditEntryRecord,
    CredentialRecord,
    InvoiceRecord,
    InvoiceStatus,
    OrderRecord,
    QualityFlag,
    ShipmentStatus,
)
from services.credential_service import classify_credential

# Lower index wins a timestamp tie.
TYPE_PRIORITY: Dict[TimelineEventType, int] = {
    TimelineEventType.PAYMENT: 0,
    TimelineEventType.INVOICE: 1,
    TimelineEventType.SHIPMENT: 2,
    TimelineEventType.ORDER: 3,
    TimelineEventType.CREDENTIAL: 4,
    TimelineEventType.AUDIT: 5,
    TimelineEventType.NOTE: 6,
}


def event_id(event_type: TimelineEventType, source_id: str) -> str:
    return f"{event_type.value}:{source_id}"


def compare_events(left: TimelineEvent, right: TimelineEvent) -> int:
    """Total order: timestamp desc, type priority asc, source id asc, event id asc."""
    if left.timestamp != right.timestamp:
        return -1 if left.timestamp > right.timestamp else 1
    left_rank, right_rank = TYPE_PRIORITY[left.type], TYPE_PRIORITY[right.type]
    if left_rank != right_rank:
        return -1 if left_rank < right_rank else 1
    left_key = (left.related_id or "", left.id)
    right_key = (right.related_id or "", right.id)
    if left_key != right_key:
        return -1 if left_key < right_key else 1
    return 0


def _order_severity(order: OrderRecord) -> Severity:
    if order.quality_flag == QualityFlag.CRITICAL_ISSUE:
        return Severity.CRITICAL
    if order.quality_flag == QualityFlag.MINOR_ISSUE:
        return Severity.WARNING
    if order.shipment_status == ShipmentStatus.PROBLEM:
        return Severity.WARNING
    return Severity.INFO


def order_events(order: OrderRecord) -> List[TimelineEvent]:
    events = []
    metadata = {
        "species": order.species,
        "strain": order.strain,
        "quantity": order.quantity,
        "totalValue": order.total_value,
        "shipmentStatus": order.shipment_status.value,
        "qualityFlag": order.quality_flag.value,
    }
    if order.order_date is not None:
        events.append(
            TimelineEvent(
                id=event_id(TimelineEventType.ORDER, order.id),
                type=TimelineEventType.ORDER,
                timestamp=order.order_date,
                title=f"Order {order.order_number} placed",
                description=f"{order.quantity} x {order.species}",
                related_id=order.id,
                related_entity="order",
                severity=_order_severity(order),
                metadata=metadata,
            )
        )
    if order.shipped_date is not None:
        events.append(
            TimelineEvent(
                id=event_id(TimelineEventType.SHIPMENT, order.id),
                type=TimelineEventType.SHIPMENT,
                timestamp=order.shipped_date,
                title=f"Order {order.order_number} shipped",
                description=f"Shipment status: {order.shipment_status.value}",
                related_id=order.id,
                related_entity="order",
                severity=(
                    Severity.WARNING
                    if order.shipment_status == ShipmentStatus.PROBLEM
                    else Severity.INFO
                ),
                metadata={"shipmentStatus": order.shipment_status.value},
            )
        )
    return events


def invoice_events(invoice: InvoiceRecord) -> List[TimelineEvent]:
    """Issue and payment events; a same-day payment absorbs the issue event."""
    events = []
    metadata = {
        "amount": invoice.amount,
        "currency": invoice.currency,
        "status": invoice.status.value,
    }
    paid_same_day = (
        invoice.paid_date is not None
        and invoice.issued_date is not None
        and invoice.paid_date.date() == invoice.issued_date.date()
    )
    if invoice.issued_date is not None and not paid_same_day:
        events.append(
            TimelineEvent(
                id=event_id(TimelineEventType.INVOICE, invoice.id),
                type=TimelineEventType.INVOICE,
                timestamp=invoice.issued_date,
                title=f"Invoice {invoice.id} issued",
                description=f"{invoice.amount:,.2f} {invoice.currency} ({invoice.status.value})",
                related_id=invoice.id,
                related_entity="invoice",
                severity=(
                    Severity.WARNING if invoice.status == InvoiceStatus.OVERDUE else Severity.INFO
                ),
                metadata=metadata,
            )
        )
    if invoice.paid_date is not None:
        events.append(
            TimelineEvent(
                id=event_id(TimelineEventType.PAYMENT, invoice.id),
                type=TimelineEventType.PAYMENT,
                timestamp=invoice.paid_date,
                title=f"Invoice {invoice.id} paid",
                description=f"{invoice.amount:,.2f} {invoice.currency}",
                related_id=invoice.id,
                related_entity="invoice",
                severity=Severity.INFO,
                metadata=metadata,
            )
        )
    return events


_CREDENTIAL_SEVERITY = {
    CredentialState.EXPIRED: Severity.CRITICAL,
    CredentialState.EXPIRING: Severity.WARNING,
    CredentialState.VALID: Severity.INFO,
}


def credential_event(credential: CredentialRecord, now: datetime) -> Optional[TimelineEvent]:
    state, days_until_expiry = classify_credential(credential, now)
    if state == CredentialState.EXPIRED:
        timestamp = credential.expiry_date
    else:
        timestamp = credential.issued_date or credential.expiry_date
    if timestamp is None:
        return None

    label = f"{credential.type.title()} {credential.number or ''}".strip()
    if state == CredentialState.EXPIRED:
        title = f"{label} expired"
    elif state == CredentialState.EXPIRING:
        title = f"{label} expiring in {days_until_expiry} days"
    else:
        title = f"{label} on file"

    return TimelineEvent(
        id=event_id(TimelineEventType.CREDENTIAL, credential.source_id),
        type=TimelineEventType.CREDENTIAL,
        timestamp=timestamp,
        title=title,
        description=(
            f"Expires {credential.expiry_date.date().isoformat()}"
            if credential.expiry_date
            else "No expiry date"
        ),
        related_id=credential.source_id,
        related_entity="credential",
        severity=_CREDENTIAL_SEVERITY[state],
        metadata={"status": state.value, "daysUntilExpiry": days_until_expiry},
    )


def audit_event(entry: AuditEntryRecord) -> Optional[TimelineEvent]:
    if entry.timestamp is None:
        return None
    metadata = {"entityId": entry.entity_id, "action": entry.action.value}
    if entry.actor:
        metadata["actor"] = entry.actor
    if entry.changes:
        metadata["changes"] = entry.changes
    return TimelineEvent(
        id=event_id(TimelineEventType.AUDIT, entry.source_id),
        type=TimelineEventType.AUDIT,
        timestamp=entry.timestamp,
        title=f"{entry.entity_type.title()} {entry.action.value}d",
        description=f"by {entry.actor}" if entry.actor else None,
        related_id=entry.source_id,
        related_entity=entry.entity_type,
        severity=Severity.INFO,
        metadata=metadata,
    )


def build_timeline(
    orders: Sequence[OrderRecord],
    invoices: Sequence[InvoiceRecord],
    credentials: Sequence[CredentialRecord],
    audit_entries: Sequence[AuditEntryRecord],
    now: datetime,
) -> List[TimelineEvent]:
    """Merge every dated source record into one newest-first event list."""
    events: List[TimelineEvent] = []
    for order in orders:
        events.extend(order_events(order))
    for invoice in invoices:
        events.extend(invoice_events(invoice))
    for credential in credentials:
        event = credential_event(credential, now)
        if event is not None:
            events.append(event)
    for entry in audit_entries:
        event = audit_event(entry)
        if event is not None:
            events.append(event)
    return sorted(events, key=cmp_to_key(compare_events))
