"""
Health Grid Configuration

Settings shared by the API server and the CLI scripts. Defaults can be
overridden with HEALTH_GRID_* environment variables:

    HEALTH_GRID_DATA          path to the grid JSON (nodes/edges/sequences)
    HEALTH_GRID_MODE          "sequence" (stepped playback) or "neighbor"
    HEALTH_GRID_INTERVAL_MS   delay between reveal steps
    HEALTH_GRID_HOST / HEALTH_GRID_PORT
    HEALTH_GRID_LOG_LEVEL / HEALTH_GRID_LOG_FILE
"""

import os
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

REVEAL_INTERVAL_MS = 800
DEFAULT_PORT = 8085


class RevealMode(str, Enum):
    """Reveal policy applied when an entity is selected."""
    NEIGHBOR = "neighbor"
    SEQUENCE = "sequence"


def _project_root() -> Path:
    return Path(__file__).parent.parent


def default_data_path() -> Path:
    return _project_root() / "data" / "examples" / "health_grid.json"


class GridSettings(BaseModel):
    data_path: str = Field(default_factory=lambda: str(default_data_path()))
    mode: RevealMode = RevealMode.SEQUENCE
    reveal_interval_ms: int = Field(default=REVEAL_INTERVAL_MS, gt=0)
    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def resolved_data_path(self) -> Path:
        """Resolve data_path relative to the project root."""
        p = Path(self.data_path).expanduser()
        if p.is_absolute():
            return p
        return _project_root() / p

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GridSettings":
        """Build settings from HEALTH_GRID_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        overrides = {}
        for key, field_name in (
            ("HEALTH_GRID_DATA", "data_path"),
            ("HEALTH_GRID_MODE", "mode"),
            ("HEALTH_GRID_INTERVAL_MS", "reveal_interval_ms"),
            ("HEALTH_GRID_HOST", "host"),
            ("HEALTH_GRID_PORT", "port"),
            ("HEALTH_GRID_LOG_LEVEL", "log_level"),
            ("HEALTH_GRID_LOG_FILE", "log_file"),
        ):
            if env.get(key):
                overrides[field_name] = env[key]
        return cls(**overrides)
