"""BaseService — abstract foundation for all appctl services.

Every service receives the global :class:`AppSettings` at construction
time and reads the project manifest lazily, so a missing manifest is
reported through the same ServiceResult channel as any other failure.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from appctl.config.manifest import read_manifest
from appctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from appctl.config.manifest import ProjectManifest
    from appctl.config.settings import AppSettings
    from appctl.domain.errors import AppctlError

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class VersionService(BaseService):
            def show(self) -> ServiceResult:
                try:
                    manifest = self.manifest
                except AppctlError as exc:
                    return self._failure("version", exc)
                ...
    """

    def __init__(self, settings: AppSettings) -> None:
        self._settings = settings
        self._manifest: ProjectManifest | None = None

    @property
    def manifest(self) -> ProjectManifest:
        """The project manifest (read on first access)."""
        if self._manifest is None:
            self._manifest = read_manifest(self._settings.manifest_file)
        return self._manifest

    @staticmethod
    def _failure(
        op: str,
        exc: AppctlError,
        *,
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Convert a domain error into a failed ServiceResult."""
        logger.debug("%s failed: %s (%s)", op, exc.message, exc.code)
        return ServiceResult(
            ok=False,
            op=op,
            data=data or {},
            warnings=warnings or [],
            error=ServiceError.from_exception(exc),
        )
