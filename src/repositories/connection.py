"""
Database connection resolution for the customer history store.

The URL comes from DATABASE_URL, or is assembled from an RDS secret named by
DB_SECRET_ARN. One pooled engine is shared across warm invocations.
"""

import json
import os
from typing import Optional, Union

import boto3
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.pool import QueuePool

from utils.logging_config import get_logger

logger = get_logger(__name__)

_engine: Optional[Engine] = None


def database_url_from_secret(secret_arn: str) -> Optional[URL]:
    """Assemble a psycopg2 URL from the host/username/password fields of an RDS secret."""
    try:
        client = boto3.client("secretsmanager")
        payload = json.loads(client.get_secret_value(SecretId=secret_arn)["SecretString"])
    except Exception as exc:
        logger.warning(
            "Customer history secret unavailable",
            extra={"secret_arn": secret_arn, "error": str(exc)},
        )
        return None

    if not (payload.get("host") and payload.get("username") and payload.get("password")):
        logger.warning("Customer history secret is incomplete", extra={"secret_arn": secret_arn})
        return None
    return URL.create(
        "postgresql+psycopg2",
        username=payload["username"],
        password=payload["password"],
        host=payload["host"],
        port=int(payload.get("port") or 5432),
        database=payload.get("dbname") or "postgres",
    )


def resolve_database_url() -> Optional[Union[str, URL]]:
    url = os.environ.get("DATABASE_URL")
    if url:
        return url
    secret_arn = os.environ.get("DB_SECRET_ARN")
    if secret_arn:
        return database_url_from_secret(secret_arn)
    return None


def get_db_engine() -> Optional[Engine]:
    """Return the shared engine, or None when no database is configured."""
    global _engine
    if _engine is None:
        url = resolve_database_url()
        if url is None:
            logger.warning("No customer history database configured")
            return None
        _engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=1,
            max_overflow=2,
            pool_pre_ping=True,
            pool_recycle=300,
        )
    return _engine
