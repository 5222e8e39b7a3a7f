"""Analytics stages and the database-backed analytics service.

The engine stages are pure; only customer_analytics_service touches the
database, and handlers import it lazily to avoid import-time connections.
"""
