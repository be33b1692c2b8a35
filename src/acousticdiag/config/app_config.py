"""Default application paths and configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .catalog import DEFAULT_CATALOG_FILE, Catalog, load_catalog
from .runtime import DiagConfig, load_config

DEFAULT_DATA_ROOT = Path("~/.acousticdiag")


@dataclass
class AppPaths:
    """
    Commonly used paths for the application.

    ``ACOUSTICDIAG_DATA_ROOT`` overrides the default ``~/.acousticdiag``
    folder so tests and alternate installs can store files elsewhere.
    """

    data_root: Path = field(default=None)  # type: ignore[assignment]
    history_file: Path = field(init=False)
    settings_file: Path = field(init=False)
    config_file: Path = field(init=False)
    catalog_file: Path = DEFAULT_CATALOG_FILE

    def __post_init__(self) -> None:
        if self.data_root is None:
            env_data_root = os.environ.get("ACOUSTICDIAG_DATA_ROOT")
            if env_data_root:
                self.data_root = Path(env_data_root).expanduser()
            else:
                self.data_root = DEFAULT_DATA_ROOT.expanduser()
        else:
            self.data_root = Path(self.data_root).expanduser()

        self.history_file = self.data_root / "history.json"
        self.settings_file = self.data_root / "settings.yaml"
        self.config_file = self.data_root / "config.yaml"

    def ensure(self) -> None:
        """Create directories if they do not yet exist."""
        self.data_root.mkdir(parents=True, exist_ok=True)


@dataclass
class AppConfig:
    """In-memory configuration snapshot used by the GUI and headless runs."""

    paths: AppPaths = field(default_factory=AppPaths)
    runtime: DiagConfig = field(default_factory=DiagConfig)
    catalog: Catalog = field(default_factory=tuple)

    @classmethod
    def load(
        cls,
        *,
        config_path: str | Path | None = None,
        paths: AppPaths | None = None,
    ) -> "AppConfig":
        paths = paths or AppPaths()
        runtime = load_config(config_path if config_path is not None else paths.config_file)
        catalog = load_catalog(paths.catalog_file)
        return cls(paths=paths, runtime=runtime, catalog=catalog)


__all__ = ["AppPaths", "AppConfig", "DEFAULT_DATA_ROOT"]
