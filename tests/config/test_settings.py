"""Tests for AppSettings and RefreshSettings — default → env → flag layering."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from appctl.config.settings import (
    DEFAULT_BLOCK_MARKERS,
    AppSettings,
    RefreshSettings,
    split_colon_list,
)


class TestSplitColonList:
    def test_drops_empty_tokens(self) -> None:
        assert split_colon_list("a::b:") == ("a", "b")

    def test_empty_string(self) -> None:
        assert split_colon_list("") == ()

    def test_order_preserved(self) -> None:
        assert split_colon_list(".z:.a:.m") == (".z", ".a", ".m")


class TestRefreshDefaults:
    def test_all_defaults(self) -> None:
        settings = RefreshSettings.from_cli()
        assert settings.branch == "main"
        assert settings.allow_dev_refresh is False
        assert settings.block_markers == DEFAULT_BLOCK_MARKERS
        assert ".dev_workspace" in settings.block_markers
        assert settings.require_markers == ()
        assert settings.block_path_patterns == ("Development",)
        assert settings.require_remote_host is None
        assert settings.stash_before_refresh is True
        assert settings.service is None
        assert settings.non_interactive is False

    def test_frozen(self) -> None:
        settings = RefreshSettings.from_cli()
        with pytest.raises(Exception):
            settings.branch = "other"  # type: ignore[misc]


class TestRefreshPrecedence:
    @pytest.mark.parametrize(
        ("field", "env_name", "env_value", "flag_value", "env_expected", "flag_expected"),
        [
            ("branch", "BRANCH", "develop", "release", "develop", "release"),
            ("allow_dev_refresh", "ALLOW_DEV_REFRESH", "1", False, True, False),
            ("block_markers", "BLOCK_MARKERS", ".a:.b", ".c", (".a", ".b"), (".c",)),
            ("require_markers", "REQUIRE_MARKERS", ".deployment", ".prod", (".deployment",), (".prod",)),
            ("block_path_patterns", "BLOCK_PATH_PATTERNS", "dev", "sandbox", ("dev",), ("sandbox",)),
            ("require_remote_host", "REQUIRE_REMOTE_HOST", "github.com", "gitlab.com", "github.com", "gitlab.com"),
            ("stash_before_refresh", "STASH_BEFORE_REFRESH", "0", "1", False, True),
        ],
    )
    def test_env_over_default_and_flag_over_env(
        self,
        monkeypatch: pytest.MonkeyPatch,
        field: str,
        env_name: str,
        env_value: str,
        flag_value: object,
        env_expected: object,
        flag_expected: object,
    ) -> None:
        default = getattr(RefreshSettings.from_cli(), field)
        monkeypatch.setenv(env_name, env_value)

        from_env = getattr(RefreshSettings.from_cli(), field)
        from_flag = getattr(RefreshSettings.from_cli(**{field: flag_value}), field)

        assert from_env == env_expected
        assert from_env != default
        assert from_flag == flag_expected

    def test_none_flag_lets_env_through(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BRANCH", "develop")
        settings = RefreshSettings.from_cli(branch=None)
        assert settings.branch == "develop"

    def test_empty_env_counts_as_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCK_PATH_PATTERNS", "")
        settings = RefreshSettings.from_cli()
        assert settings.block_path_patterns == ("Development",)

    def test_separator_only_env_empties_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCK_MARKERS", ":")
        settings = RefreshSettings.from_cli()
        assert settings.block_markers == ()

    def test_empty_flag_empties_list(self) -> None:
        settings = RefreshSettings.from_cli(block_path_patterns="")
        assert settings.block_path_patterns == ()

    def test_service_not_read_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERVICE", "unrelated.service")
        monkeypatch.setenv("NON_INTERACTIVE", "1")
        settings = RefreshSettings.from_cli()
        assert settings.service is None
        assert settings.non_interactive is False

    def test_invalid_bool_env_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ALLOW_DEV_REFRESH", "maybe")
        with pytest.raises(ValidationError):
            RefreshSettings.from_cli()

    def test_blank_branch_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RefreshSettings.from_cli(branch="  ")


class TestAppSettings:
    def test_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        settings = AppSettings.from_cli()
        assert settings.project_dir == tmp_path
        assert settings.manifest_file == tmp_path / "pyproject.toml"
        assert settings.verbose is False

    def test_relative_manifest_resolves_against_project_dir(self, tmp_path: Path) -> None:
        settings = AppSettings.from_cli(project_dir=tmp_path, manifest_path=Path("meta.toml"))
        assert settings.manifest_file == tmp_path / "meta.toml"

    def test_absolute_manifest(self, tmp_path: Path) -> None:
        manifest = tmp_path / "elsewhere" / "pyproject.toml"
        settings = AppSettings.from_cli(project_dir=tmp_path, manifest_path=manifest)
        assert settings.manifest_file == manifest

    def test_env_prefix(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APPCTL_VERBOSE", "true")
        settings = AppSettings.from_cli(project_dir=tmp_path)
        assert settings.verbose is True

    def test_flag_overrides_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APPCTL_QUIET", "false")
        settings = AppSettings.from_cli(project_dir=tmp_path, quiet=True)
        assert settings.quiet is True
