"""
Shared logging configuration for the remote config engine.
"""

import sys
import structlog
import logging
import uuid
from typing import Any, Dict, Iterator, Optional
from contextlib import contextmanager
from contextvars import ContextVar

# Context variables for correlation IDs
evaluation_id_var: ContextVar[Optional[str]] = ContextVar('evaluation_id', default=None)
template_version_var: ContextVar[Optional[str]] = ContextVar('template_version', default=None)


def configure_logging(service_name: str, log_level: str = "info", renderer: str = "json") -> None:
    """Configure structured logging for a service."""

    final_renderer = (
        structlog.dev.ConsoleRenderer()
        if renderer == "console"
        else structlog.processors.JSONRenderer()
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _service_context_adder(service_name),
            add_correlation_context,
            final_renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def _service_context_adder(service_name: str):
    def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Add service context to log events."""
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service_context


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add correlation context to log events."""
    evaluation_id = evaluation_id_var.get()
    if evaluation_id:
        event_dict["evaluation_id"] = evaluation_id

    template_version = template_version_var.get()
    if template_version:
        event_dict["template_version"] = template_version

    return event_dict


def set_evaluation_id(evaluation_id: Optional[str] = None) -> str:
    """Set evaluation ID in context."""
    if evaluation_id is None:
        evaluation_id = str(uuid.uuid4())
    evaluation_id_var.set(evaluation_id)
    return evaluation_id


def set_template_version(template_version: Optional[str]):
    """Set the version of the template being evaluated."""
    template_version_var.set(template_version)


@contextmanager
def evaluation_scope(template_version: Optional[str] = None,
                     evaluation_id: Optional[str] = None) -> Iterator[str]:
    """Bind correlation context for one evaluation and restore it on exit."""
    if evaluation_id is None:
        evaluation_id = str(uuid.uuid4())
    evaluation_token = evaluation_id_var.set(evaluation_id)
    version_token = template_version_var.set(template_version)
    try:
        yield evaluation_id
    finally:
        template_version_var.reset(version_token)
        evaluation_id_var.reset(evaluation_token)


def clear_context():
    """Clear all context variables."""
    evaluation_id_var.set(None)
    template_version_var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
