"""Handler for GET /customers/{id}/analytics."""

import json
from typing import Optional

from utils.error_handling import AppError, NotFoundError, to_response
from utils.logging_config import get_logger
from utils.validators import ensure_present

logger = get_logger(__name__)

# Lazy-loaded service to avoid import-time DB connections
_analytics_service: Optional["CustomerAnalyticsService"] = None


def _get_analytics_service():
    """Lazy-load CustomerAnalyticsService."""
    global _analytics_service
    if _analytics_service is None:
        from services.customer_analytics_service import CustomerAnalyticsService
        _analytics_service = CustomerAnalyticsService()
    return _analytics_service


def _customer_id_from_event(event) -> Optional[str]:
    path_params = event.get("pathParameters") or {}
    query_params = event.get("queryStringParameters") or {}
    customer_id = path_params.get("id") or query_params.get("customer_id")
    if customer_id:
        return customer_id

    # Router-level invocations only carry the raw path: /customers/{id}/analytics
    http = (event.get("requestContext") or {}).get("http") or {}
    path = http.get("path") or ""
    parts = [part for part in path.split("/") if part]
    if len(parts) == 3 and parts[0] == "customers" and parts[2] == "analytics":
        return parts[1]
    return None


def lambda_handler(event, context):
    """Return the analytics snapshot for one customer."""
    customer_id = _customer_id_from_event(event)
    try:
        ensure_present(customer_id, "customer_id")
        analytics = _get_analytics_service().get_customer_analytics(customer_id)
        if analytics is None:
            raise NotFoundError("Customer not found")
    except AppError as exc:
        logger.info(
            "Customer analytics request rejected",
            extra={"customer_id": customer_id, "status_code": exc.status_code},
        )
        return to_response(exc)
    except Exception:
        logger.exception("Customer analytics failed", extra={"customer_id": customer_id})
        return {
            "statusCode": 500,
            "headers": {"Content-Type": "application/json"},
            "body": json.dumps({"message": "Failed to compute customer analytics"}),
        }

    logger.info("Customer analytics served", extra={"customer_id": customer_id})
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": analytics.to_json(),
    }
