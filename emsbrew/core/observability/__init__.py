from .audit import audit_event, close_audit_handlers
from .logging_setup import configure_logging

__all__ = ["audit_event", "close_audit_handlers", "configure_logging"]
