"""Tests for ServiceControlService."""

from __future__ import annotations

from pathlib import Path

import pytest

from appctl.config.settings import AppSettings
from appctl.domain.errors import CommandFailed
from appctl.services.service_control import ServiceControlService
from tests.conftest import FakeServices


class TestServiceControl:
    def test_start(self, app_settings: AppSettings) -> None:
        services = FakeServices()
        result = ServiceControlService(app_settings, services).control("start")
        assert result.ok
        assert result.op == "service_start"
        assert services.calls == [("start", "app.service")]
        assert result.data["active"] is True

    def test_stop(self, app_settings: AppSettings) -> None:
        services = FakeServices(active={"app.service"})
        result = ServiceControlService(app_settings, services).control("stop")
        assert result.ok
        assert result.data["active"] is False

    def test_restart_is_stop_then_start(self, app_settings: AppSettings) -> None:
        services = FakeServices(active={"app.service"})
        result = ServiceControlService(app_settings, services).control("restart")
        assert result.ok
        assert services.calls == [("stop", "app.service"), ("start", "app.service")]

    def test_status_does_not_mutate(self, app_settings: AppSettings) -> None:
        services = FakeServices(active={"app.service"})
        result = ServiceControlService(app_settings, services).control("status")
        assert result.ok
        assert services.calls == []
        assert result.data == {
            "project": "app",
            "version": "1.0.0",
            "service": "app.service",
            "active": True,
        }

    def test_unknown_action(self, app_settings: AppSettings) -> None:
        with pytest.raises(ValueError, match="Unknown service action"):
            ServiceControlService(app_settings, FakeServices()).control("reload")

    def test_missing_service_name(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('name = "a"\nversion = "1"\n', encoding="utf-8")
        services = FakeServices()
        result = ServiceControlService(
            AppSettings.from_cli(project_dir=tmp_path), services
        ).control("start")
        assert not result.ok
        assert result.error is not None
        assert result.error.detail["field"] == "service_name"
        assert services.calls == []

    def test_systemctl_failure(self, app_settings: AppSettings) -> None:
        class Failing(FakeServices):
            def start(self, name: str) -> None:
                raise CommandFailed(["sudo", "systemctl", "start", name], "denied", 1)

        result = ServiceControlService(app_settings, Failing()).control("start")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "COMMAND_FAILED"
