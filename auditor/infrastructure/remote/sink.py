"""Remote HTTP sink for audit records"""

import asyncio
import json
from typing import Any, Dict, Optional, Set

import httpx

from auditor.core.models import RemoteConfig
from auditor.core.process_config import ProcessConfig
from auditor.core.types import Payload
from auditor.infrastructure.exceptions import RemoteDeliveryError


class RemoteSink:
    """POSTs records to an external collector with bearer auth.

    Delivery is best effort: one attempt, no retry, failures are logged.
    Inside a running event loop the request is scheduled as a task and the
    caller does not wait for it.
    """

    def __init__(
        self,
        config: ProcessConfig,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.transport = transport
        self.async_transport = async_transport
        self._pending: Set[asyncio.Task] = set()

    @property
    def remote(self) -> Optional[RemoteConfig]:
        options = self.config.options
        return options.remote if options is not None else None

    @property
    def pending(self) -> Set[asyncio.Task]:
        return self._pending

    def build_request(self, remote: RemoteConfig, payload: Payload) -> Dict[str, Any]:
        return {
            "url": remote.url,
            "headers": {
                "Authorization": f"Bearer {remote.token}",
                "Content-Type": "application/json",
            },
            "content": json.dumps(payload, default=str),
        }

    def send(self, payload: Payload) -> None:
        remote = self.remote
        if remote is None:
            self.config.logger.warning("audit_remote_not_configured")
            return

        request = self.build_request(remote, payload)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(self._send_async(remote, request))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            return

        try:
            with httpx.Client(timeout=remote.timeout_seconds, transport=self.transport) as client:
                response = client.post(**request)
            self._check_response(response)
        except (httpx.HTTPError, RemoteDeliveryError) as e:
            self._log_failure(remote, e)

    async def _send_async(self, remote: RemoteConfig, request: Dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=remote.timeout_seconds, transport=self.async_transport
            ) as client:
                response = await client.post(**request)
            self._check_response(response)
        except Exception as e:
            # Detached task, so no dispatcher error boundary above it
            self._log_failure(remote, e)

    async def drain(self) -> None:
        """Wait for in-flight deliveries; called by ``Audit.aclose``"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _check_response(self, response: httpx.Response) -> None:
        if response.status_code >= 400:
            raise RemoteDeliveryError(
                f"Remote sink returned status {response.status_code}",
                status_code=response.status_code,
            )

    def _log_failure(self, remote: RemoteConfig, error: Exception) -> None:
        self.config.logger.error(
            "audit_remote_delivery_failed",
            url=remote.url,
            status_code=getattr(error, "status_code", None),
            error=str(error),
        )
