"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: All service-layer methods return ServiceResult.
The CLI consumes this type and maps ``error.exit_code`` to the process
exit status, so calling automation can branch on the cause.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from appctl.domain.errors import EXIT_ERROR, EXIT_OK, AppctlError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)
    exit_code: int = EXIT_ERROR

    @classmethod
    def from_exception(cls, exc: AppctlError) -> ServiceError:
        return cls(
            code=exc.code,
            message=exc.message,
            detail=dict(exc.detail),
            exit_code=exc.exit_code,
        )


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded (a user abort is a success).
        op: Name of the operation (e.g. ``"refresh"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @property
    def exit_code(self) -> int:
        if self.ok:
            return EXIT_OK
        return self.error.exit_code if self.error else EXIT_ERROR
