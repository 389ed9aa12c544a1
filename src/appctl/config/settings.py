"""Layered settings — CLI flags, env vars, and code defaults in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click (``None`` means "not given")
  2. Env vars     — ``APPCTL_*`` for global flags, unprefixed for refresh
  3. Code defaults — baked into the models below

Both settings objects are frozen and resolved once per invocation; nothing
re-reads the environment after construction.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    EnvSettingsSource,
    NoDecode,
    PydanticBaseSettingsSource,
)

from appctl.config.manifest import MANIFEST_FILENAME

DEFAULT_BLOCK_MARKERS: tuple[str, ...] = (".dev_workspace", ".development", ".local_dev")
DEFAULT_BLOCK_PATH_PATTERNS: tuple[str, ...] = ("Development",)
DEFAULT_STOP_GRACE_SECONDS = 3.0

LIST_SEPARATOR = ":"

# Colon-separated lists arrive from env and flags as raw strings.
ColonList = Annotated[tuple[str, ...], NoDecode]


def split_colon_list(value: str) -> tuple[str, ...]:
    """Split ``a::b:`` into ``("a", "b")`` — empty tokens are dropped."""
    return tuple(token for token in value.split(LIST_SEPARATOR) if token)


def _drop_unset(flags: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in flags.items() if value is not None}


class AppSettings(BaseSettings):
    """Global CLI settings, stored on the root ``AppContext``.

    Attributes:
        project_dir: Directory holding the deployed application.
        manifest_path: Explicit manifest path; defaults to
            ``<project_dir>/pyproject.toml``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "APPCTL_",
        "env_ignore_empty": True,
    }

    project_dir: Path = Field(default_factory=Path.cwd)
    manifest_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    @property
    def manifest_file(self) -> Path:
        """Absolute path of the manifest to read."""
        if self.manifest_path is None:
            return self.project_dir / MANIFEST_FILENAME
        if self.manifest_path.is_absolute():
            return self.manifest_path
        return self.project_dir / self.manifest_path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings)

    @classmethod
    def from_cli(cls, **cli_flags: Any) -> AppSettings:
        """Construct settings from CLI flags, skipping flags that were not given."""
        return cls(**_drop_unset(cli_flags))


# Refresh fields that only come from flags (or the manifest), never from env.
_FLAG_ONLY_FIELDS = frozenset({"service", "non_interactive"})


class RefreshEnvSource(EnvSettingsSource):
    """Unprefixed env source that ignores flag-only fields.

    ``SERVICE`` and ``NON_INTERACTIVE`` are far too generic to pick up from
    an operator's shell.
    """

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        if field_name in _FLAG_ONLY_FIELDS:
            return None, field_name, False
        return super().get_field_value(field, field_name)


class RefreshSettings(BaseSettings):
    """Resolved configuration for one refresh run.

    Env names match the field names upper-cased (``BRANCH``,
    ``ALLOW_DEV_REFRESH``, ``BLOCK_MARKERS``, ``REQUIRE_MARKERS``,
    ``BLOCK_PATH_PATTERNS``, ``REQUIRE_REMOTE_HOST``,
    ``STASH_BEFORE_REFRESH``, ``STOP_GRACE_SECONDS``). An empty env var
    counts as unset.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "",
        "env_ignore_empty": True,
    }

    branch: str = "main"
    allow_dev_refresh: bool = False
    block_markers: ColonList = DEFAULT_BLOCK_MARKERS
    require_markers: ColonList = ()
    block_path_patterns: ColonList = DEFAULT_BLOCK_PATH_PATTERNS
    require_remote_host: str | None = None
    stash_before_refresh: bool = True
    stop_grace_seconds: float = Field(default=DEFAULT_STOP_GRACE_SECONDS, ge=0)

    service: str | None = None
    non_interactive: bool = False

    @field_validator("block_markers", "require_markers", "block_path_patterns", mode="before")
    @classmethod
    def _parse_colon_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return split_colon_list(value)
        return value

    @field_validator("branch")
    @classmethod
    def _branch_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("branch must not be empty")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Flags first, then the filtered env source; no dotenv or secrets."""
        return (init_settings, RefreshEnvSource(settings_cls))

    @classmethod
    def from_cli(cls, **cli_flags: Any) -> RefreshSettings:
        """Construct settings from refresh flags; ``None`` lets env/defaults show through."""
        return cls(**_drop_unset(cli_flags))
