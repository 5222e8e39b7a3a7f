"""
Record normalizer.

Turns raw stored rows for one customer into typed, date-parsed records.
Rows come straight from the database (snake_case columns) or from API
payloads (camelCase keys); both are accepted. Bad values degrade to
"unknown" instead of aborting the snapshot.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from dateutil.parser import parse as dateutil_parse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from models.records import (
    AuditAction,
    AuditEntryRecord,
    CredentialRecord,
    InvoiceRecord,
    InvoiceStatus,
    NormalizedHistory,
    OrderRecord,
    QualityFlag,
    ShipmentStatus,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)
R = TypeVar("R", bound=BaseModel)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

# Two defaults that differ in every field dateutil can fill in; a value that
# parses differently against them is missing a component.
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def parse_datetime(value: Any, field: str = "date") -> Optional[datetime]:
    """Parse a stored date/timestamp into an aware UTC datetime, or None."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            first, second = (
                dateutil_parse(str(value), default=default) for default in _FILL_DEFAULTS
            )
        except (TypeError, ValueError, OverflowError):
            logger.warning(
                "Unparseable date treated as absent",
                extra={"field": field, "value": str(value)},
            )
            return None
        if first.date() != second.date():
            logger.warning(
                "Partial date treated as absent",
                extra={"field": field, "value": str(value)},
            )
            return None
        parsed = first
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _float(value: Any) -> float:
    if value in (None, ""):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def _int(value: Any) -> int:
    if value in (None, ""):
        return 0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0
    return int(result) if math.isfinite(result) else 0


def _text(value: Any) -> Optional[str]:
    if value in (None, ""):
        return None
    return str(value)


def _enum(enum_cls: Type[E], value: Any, default: E, field: str) -> E:
    if value in (None, ""):
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        logger.warning(
            "Unknown enum value replaced with default",
            extra={"field": field, "value": str(value), "default": default.value},
        )
        return default


def _get(row: Mapping[str, Any], snake: str, camel: Optional[str] = None) -> Any:
    """Look a column up by its stored name, then by its API name."""
    if snake in row:
        return row[snake]
    if camel and camel in row:
        return row[camel]
    return None


def _required_id(row: Mapping[str, Any]) -> str:
    value = row["id"]
    if value in (None, ""):
        raise KeyError("id")
    return str(value)


def _sort_key(moment: Optional[datetime], identifier: str) -> Tuple[datetime, str]:
    # Undated rows first, so "last element" is always the newest dated one.
    return (moment or _EPOCH, identifier)


def normalize_order(row: Mapping[str, Any]) -> OrderRecord:
    return OrderRecord(
        id=_required_id(row),
        order_number=_text(_get(row, "order_number", "orderNumber")) or _required_id(row),
        order_date=parse_datetime(_get(row, "order_date", "orderDate"), "order_date"),
        species=_text(_get(row, "species")) or "Unknown",
        strain=_text(_get(row, "strain")),
        quantity=_int(_get(row, "quantity")),
        total_value=_float(_get(row, "total_value", "totalValue")),
        shipment_status=_enum(
            ShipmentStatus,
            _get(row, "shipment_status", "shipmentStatus"),
            ShipmentStatus.PENDING,
            "shipment_status",
        ),
        quality_flag=_enum(
            QualityFlag, _get(row, "quality_flag", "qualityFlag"), QualityFlag.OK, "quality_flag"
        ),
        shipment_date=parse_datetime(_get(row, "shipment_date", "shipmentDate"), "shipment_date"),
        shipped_date=parse_datetime(_get(row, "shipped_date", "shippedDate"), "shipped_date"),
    )


def normalize_invoice(row: Mapping[str, Any]) -> InvoiceRecord:
    return InvoiceRecord(
        id=_required_id(row),
        amount=_float(_get(row, "amount")),
        currency=_text(_get(row, "currency")) or "USD",
        status=_enum(InvoiceStatus, _get(row, "status"), InvoiceStatus.PENDING, "invoice_status"),
        issued_date=parse_datetime(_get(row, "issued_date", "issuedDate"), "issued_date"),
        paid_date=parse_datetime(_get(row, "paid_date", "paidDate"), "paid_date"),
    )


def normalize_credential(row: Mapping[str, Any]) -> CredentialRecord:
    return CredentialRecord(
        id=_text(_get(row, "id")),
        type=_text(_get(row, "type")) or "credential",
        number=_text(_get(row, "number")),
        issued_date=parse_datetime(_get(row, "issued_date", "issuedDate"), "issued_date"),
        expiry_date=parse_datetime(_get(row, "expiry_date", "expiryDate"), "expiry_date"),
    )


def normalize_audit_entry(row: Mapping[str, Any]) -> AuditEntryRecord:
    changes = _get(row, "changes")
    return AuditEntryRecord(
        id=_text(_get(row, "id")),
        entity_type=_text(_get(row, "entity_type", "entityType")) or "customer",
        entity_id=_text(_get(row, "entity_id", "entityId")),
        action=_enum(AuditAction, _get(row, "action"), AuditAction.UPDATE, "audit_action"),
        timestamp=parse_datetime(_get(row, "timestamp"), "timestamp"),
        actor=_text(_get(row, "actor") or _get(row, "user_id", "userId")),
        changes=changes if isinstance(changes, dict) else {},
    )


def _normalize_all(
    rows: Optional[Iterable[Any]],
    record_cls: Type[R],
    converter,
    kind: str,
) -> List[R]:
    records: List[R] = []
    for row in rows or ():
        if isinstance(row, record_cls):
            records.append(row)
            continue
        try:
            records.append(converter(row))
        except (KeyError, TypeError, PydanticValidationError) as exc:
            logger.warning("Skipping malformed row", extra={"kind": kind, "error": str(exc)})
    return records


def normalize_history(
    orders: Optional[Iterable[Any]] = None,
    invoices: Optional[Iterable[Any]] = None,
    credentials: Optional[Iterable[Any]] = None,
    audit_entries: Optional[Iterable[Any]] = None,
) -> NormalizedHistory:
    """Normalize every source for one customer, each sorted ascending by date."""
    order_records = _normalize_all(orders, OrderRecord, normalize_order, "order")
    invoice_records = _normalize_all(invoices, InvoiceRecord, normalize_invoice, "invoice")
    credential_records = _normalize_all(
        credentials, CredentialRecord, normalize_credential, "credential"
    )
    audit_records = _normalize_all(
        audit_entries, AuditEntryRecord, normalize_audit_entry, "audit"
    )

    return NormalizedHistory(
        orders=tuple(sorted(order_records, key=lambda o: _sort_key(o.order_date, o.id))),
        invoices=tuple(sorted(invoice_records, key=lambda i: _sort_key(i.issued_date, i.id))),
        credentials=tuple(
            sorted(credential_records, key=lambda c: _sort_key(c.expiry_date, c.source_id))
        ),
        audit_entries=tuple(
            sorted(audit_records, key=lambda a: _sort_key(a.timestamp, a.source_id))
        ),
    )
