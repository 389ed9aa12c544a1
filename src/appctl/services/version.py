"""VersionService — report the deployed project's name and version."""

from __future__ import annotations

from appctl.domain.errors import AppctlError
from appctl.services.base import BaseService
from appctl.services.result import ServiceResult


class VersionService(BaseService):
    def show(self) -> ServiceResult:
        op = "version"
        try:
            manifest = self.manifest
        except AppctlError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "name": manifest.name,
                "version": manifest.version,
                "service_name": manifest.service_name,
            },
        )
