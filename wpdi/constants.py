"""Settings for the dependency installer, read from the environment."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_PLUGINS_DIR = "wp-content/plugins"
DEFAULT_DATA_DIR = "data"
DEFAULT_DIRECTORY_API = "https://api.wordpress.org/plugins/info/1.2/"

_TRUE_VALUES = ("1", "true", "yes", "on")


def _resolve(path: str) -> Path:
    """Resolve relative paths against the project root."""
    p = Path(path)
    return p if p.is_absolute() else (PROJECT_ROOT / p).resolve()


@dataclass
class InstallerSettings:
    """Where the host site lives and how the installer talks to it."""

    plugins_dir: Path
    data_dir: Path
    manifest_paths: List[Path] = field(default_factory=list)
    can_manage_plugins: bool = True
    dismiss_days: int = 7
    http_timeout: float = 30
    directory_api: str = DEFAULT_DIRECTORY_API

    @property
    def state_file(self) -> Path:
        return self.data_dir / "plugin_state.json"

    @property
    def transients_file(self) -> Path:
        return self.data_dir / "transients.json"

    @property
    def dismissals_file(self) -> Path:
        return self.data_dir / "dismissals.json"

    @classmethod
    def from_env(cls) -> "InstallerSettings":
        manifest_paths_env = os.getenv("WPDI_MANIFEST_PATHS", "")
        manifest_paths = [_resolve(p.strip()) for p in manifest_paths_env.split(":") if p.strip()]

        return cls(
            plugins_dir=_resolve(os.getenv("WPDI_PLUGINS_DIR", DEFAULT_PLUGINS_DIR)),
            data_dir=_resolve(os.getenv("WPDI_DATA_DIR", DEFAULT_DATA_DIR)),
            manifest_paths=manifest_paths,
            can_manage_plugins=os.getenv("WPDI_CAN_MANAGE_PLUGINS", "true").lower() in _TRUE_VALUES,
            dismiss_days=int(os.getenv("WPDI_DISMISS_DAYS", "7")),
            http_timeout=float(os.getenv("WPDI_HTTP_TIMEOUT", "30")),
            directory_api=os.getenv("WPDI_DIRECTORY_API", DEFAULT_DIRECTORY_API),
        )
