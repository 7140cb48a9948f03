"""Audit log read endpoint"""

from typing import Any, Dict, List

from fastapi import APIRouter

from auditor.infrastructure.audit.reader import LogReader
from auditor.infrastructure.logging import get_logger

logger = get_logger(__name__)


def create_audit_log_router(reader: LogReader) -> APIRouter:
    router = APIRouter(tags=["audit"])

    @router.get(
        "/audit-log",
        response_model=List[Dict[str, Any]],
        summary="Read audit log",
        description="All records from the active audit files, newest first",
    )
    async def read_audit_log() -> List[Dict[str, Any]]:
        logs = await reader.read_logs()
        logger.debug("audit_log_read", count=len(logs))
        return logs

    return router
