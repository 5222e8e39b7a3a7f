"""Read-only queries resolving a customer id to its raw history rows."""

import json
from typing import Any, Dict, List, Optional

from repositories.postgres_repo import PostgresRepository


class CustomerHistoryRepository(PostgresRepository):
    """Fetches the rows the analytics engine consumes, one source per call."""

    def get_customer(self, customer_id: str) -> Optional[dict]:
        return self.fetch_one(
            """
            SELECT id, name, status, credentials
            FROM customers
            WHERE id = :customer_id
            """,
            {"customer_id": customer_id},
        )

    def get_orders(self, customer_id: str) -> List[Dict[str, Any]]:
        return self.fetch_all(
            """
            SELECT o.id, o.order_number, o.order_date, o.species, o.strain,
                   o.quantity, o.total_value, o.shipment_status, o.quality_flag,
                   o.shipment_date, o.shipped_date
            FROM orders o
            WHERE o.customer_id = :customer_id
            ORDER BY o.order_date ASC, o.id ASC
            """,
            {"customer_id": customer_id},
        )

    def get_invoices(self, customer_id: str) -> List[Dict[str, Any]]:
        return self.fetch_all(
            """
            SELECT i.id, i.amount, i.currency, i.status, i.issued_date, i.paid_date
            FROM invoices i
            WHERE i.customer_id = :customer_id
            ORDER BY i.issued_date ASC, i.id ASC
            """,
            {"customer_id": customer_id},
        )

    def get_audit_entries(self, customer_id: str) -> List[Dict[str, Any]]:
        """Audit rows for the customer itself and for any of its orders."""
        return self.fetch_all(
            """
            SELECT a.id, a.entity_type, a.entity_id, a.action, a.user_id,
                   a.changes, a.timestamp
            FROM audit_logs a
            WHERE (a.entity_type = 'customer' AND a.entity_id = :customer_id)
               OR (a.entity_type = 'order' AND a.entity_id IN (
                    SELECT CAST(o.id AS TEXT) FROM orders o WHERE o.customer_id = :customer_id
               ))
            ORDER BY a.timestamp ASC, a.id ASC
            """,
            {"customer_id": customer_id},
        )

    @staticmethod
    def credentials_from_customer(customer: dict) -> List[Dict[str, Any]]:
        """Credentials live in a JSONB column; drivers may hand back text."""
        raw = customer.get("credentials")
        if raw in (None, ""):
            return []
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                return []
        return [entry for entry in raw if isinstance(entry, dict)] if isinstance(raw, list) else []
