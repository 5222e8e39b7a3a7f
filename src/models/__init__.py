"""Pydantic models for customer history records and analytics snapshots."""

from models.analytics import (  # noqa: F401
    AnalyticsSummary,
    AnalyticsWarning,
    CredentialState,
    CredentialStatus,
    CredentialSummary,
    CustomerAnalytics,
    InvoiceSnapshot,
    OrderSnapshot,
    PeriodPerformance,
    RetentionRisk,
    Severity,
    SpeciesPerformance,
    TimelineEvent,
    TimelineEventType,
)
from models.records import (  # noqa: F401
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
