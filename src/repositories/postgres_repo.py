"""PostgreSQL repository using SQLAlchemy Core."""

from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine


class PostgresRepository:
    """Thin wrapper to keep SQL organized and parameterized."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def fetch_one(self, query: str, params: dict) -> Optional[dict]:
        """Execute a SELECT and return one row as dict."""
        stmt = text(query)
        with self.engine.connect() as conn:
            row = conn.execute(stmt, params).fetchone()
            return dict(row._mapping) if row else None

    def fetch_all(self, query: str, params: dict) -> List[Dict[str, Any]]:
        """Execute a SELECT and return every row as a dict."""
        stmt = text(query)
        with self.engine.connect() as conn:
            return [dict(row._mapping) for row in conn.execute(stmt, params)]
