"""
Customer Analytics Service.

Resolves a customer id to its order, invoice, credential and audit rows in
PostgreSQL and hands them to the pure analytics engine. Snapshots are never
cached: each request recomputes from the current rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from config.settings import AnalyticsSettings
from models.analytics import CustomerAnalytics
from repositories.connection import get_db_engine
from repositories.customer_history_repo import CustomerHistoryRepository
from services.analytics_engine import compute_analytics
from utils.error_handling import ServiceUnavailableError
from utils.logging_config import get_logger

logger = get_logger(__name__)


class CustomerAnalyticsService:
    """Service for customer analytics snapshots."""

    def __init__(
        self,
        repository: Optional[CustomerHistoryRepository] = None,
        settings: Optional[AnalyticsSettings] = None,
    ):
        self.settings = settings or AnalyticsSettings.from_environment()
        if repository is None:
            engine = get_db_engine()
            repository = CustomerHistoryRepository(engine) if engine is not None else None
        self.repository = repository

    def get_customer_analytics(
        self, customer_id: str, now: Optional[datetime] = None
    ) -> Optional[CustomerAnalytics]:
        """
        Build the analytics snapshot for one customer.

        Returns None for an unknown customer. Failures reading the customer,
        orders or invoices propagate; a failing audit log only drops the
        audit events from the timeline.
        """
        if self.repository is None:
            raise ServiceUnavailableError("Customer database is not configured")

        customer = self.repository.get_customer(customer_id)
        if not customer:
            return None

        orders = self.repository.get_orders(customer_id)
        invoices = self.repository.get_invoices(customer_id)
        credentials = CustomerHistoryRepository.credentials_from_customer(customer)
        try:
            audit_entries = self.repository.get_audit_entries(customer_id)
        except SQLAlchemyError as exc:
            logger.warning(
                "Audit log unavailable; continuing without audit events",
                extra={"customer_id": customer_id, "error": str(exc)},
            )
            audit_entries = []

        analytics = compute_analytics(
            customer_id,
            orders,
            invoices,
            credentials,
            audit_entries,
            now,
            recent_orders_limit=self.settings.recent_orders_limit,
            recent_invoices_limit=self.settings.recent_invoices_limit,
            top_species_limit=self.settings.top_species_limit,
            warning_timeline_window=self.settings.warning_timeline_window,
        )
        logger.info(
            "Customer analytics computed",
            extra={
                "customer_id": customer_id,
                "total_orders": analytics.summary.total_orders,
                "retention_risk": analytics.summary.retention_risk.value,
                "timeline_events": len(analytics.timeline),
                "warnings": [warning.code for warning in analytics.warnings],
            },
        )
        return analytics
