"""
Environment-specific configuration settings.

Defaults suit development; production gets wider recent-activity windows.
"""

from dataclasses import dataclass
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class AnalyticsSettings:
    """Knobs for snapshot presentation limits."""

    # Environment
    environment: str = "dev"
    log_level: str = "INFO"

    # Snapshot sizes
    recent_orders_limit: int = 10
    recent_invoices_limit: int = 10
    top_species_limit: int = 5

    # Number of newest timeline events scanned for shipment warnings
    warning_timeline_window: int = 20

    @classmethod
    def from_environment(cls) -> "AnalyticsSettings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        log_level = os.environ.get("LOG_LEVEL", "INFO").upper()

        # Production overrides
        if env == "prod":
            return cls(
                environment="prod",
                log_level=log_level,
                recent_orders_limit=_env_int("RECENT_ORDERS_LIMIT", 20),
                recent_invoices_limit=_env_int("RECENT_INVOICES_LIMIT", 20),
                top_species_limit=_env_int("TOP_SPECIES_LIMIT", 10),
                warning_timeline_window=_env_int("WARNING_TIMELINE_WINDOW", 20),
            )

        return cls(
            environment=env,
            log_level=log_level,
            recent_orders_limit=_env_int("RECENT_ORDERS_LIMIT", cls.recent_orders_limit),
            recent_invoices_limit=_env_int("RECENT_INVOICES_LIMIT", cls.recent_invoices_limit),
            top_species_limit=_env_int("TOP_SPECIES_LIMIT", cls.top_species_limit),
            warning_timeline_window=_env_int(
                "WARNING_TIMELINE_WINDOW", cls.warning_timeline_window
            ),
        )
