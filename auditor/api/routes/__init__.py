from .audit_logs import create_audit_log_router

__all__ = ["create_audit_log_router"]
