"""Structured logging helpers."""

from __future__ import annotations

import logging

import structlog

SERVICE_NAME = "servicefinder"


def _add_service_name(_, __, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )
    structlog.configure(
        processors=[
            _add_service_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()

__all__ = ["SERVICE_NAME", "configure_logging", "logger"]
