"""ServiceControlService — start, stop, restart and query the app's unit."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from appctl.domain.errors import AppctlError, FieldMissing
from appctl.services.base import BaseService
from appctl.services.result import ServiceResult

if TYPE_CHECKING:
    from appctl.config.settings import AppSettings
    from appctl.domain.ports import ServiceController

logger = logging.getLogger(__name__)

ACTIONS = ("start", "stop", "restart", "status")


class ServiceControlService(BaseService):
    """Drive the unit named by the manifest's ``service_name``."""

    def __init__(
        self,
        settings: AppSettings,
        controller: ServiceController | None = None,
    ) -> None:
        super().__init__(settings)
        if controller is None:
            from appctl.infrastructure.systemd import SystemdController

            controller = SystemdController()
        self._controller = controller

    def _service_name(self) -> str:
        name = self.manifest.service_name
        if not name:
            raise FieldMissing("service_name", str(self._settings.manifest_file))
        return name

    def control(self, action: str) -> ServiceResult:
        """Run *action* (one of :data:`ACTIONS`) against the service."""
        op = f"service_{action}"
        if action not in ACTIONS:
            raise ValueError(f"Unknown service action: {action}")
        try:
            service = self._service_name()
            manifest = self.manifest
            data: dict[str, Any] = {
                "project": manifest.name,
                "version": manifest.version,
                "service": service,
            }
            if action != "status":
                logger.info(
                    "Managing service '%s' for project '%s' (v%s) - action: %s",
                    service,
                    manifest.name,
                    manifest.version,
                    action,
                )
                getattr(self._controller, action)(service)
            data["active"] = self._controller.is_active(service)
        except AppctlError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data=data)
