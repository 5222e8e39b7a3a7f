"""Structured logger setup shared across Lambdas."""

import logging

from pythonjsonlogger import jsonlogger

from config.settings import AnalyticsSettings


def get_logger(name: str) -> logging.Logger:
    """
    Configure a JSON logger once and reuse it.

    The level comes from AnalyticsSettings.log_level so noisy normalizer
    warnings can be silenced per environment.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        "%(levelname)s %(name)s %(message)s %(asctime)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    level_name = AnalyticsSettings.from_environment().log_level
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    logger.propagate = False
    return logger
