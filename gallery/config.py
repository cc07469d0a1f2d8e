"""Runtime configuration read from the environment.

Environment variables:
    STORAGE_PATH: Root directory of the photo collections (default
        './uploads').
    MUSIC_STORAGE_PATH: Root directory of the music collections (default
        './uploads-music').
    HOST: Interface to bind (default '0.0.0.0').
    PORT: Listening port (default 9090).
    LOG_LEVEL: Logging level name (default 'INFO').
    CORS_ORIGINS: Comma separated list of allowed origins (default '*').
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_STORAGE_PATH = "./uploads"
DEFAULT_MUSIC_STORAGE_PATH = "./uploads-music"
DEFAULT_PORT = 9090


@dataclass(frozen=True)
class Settings:
    """Process-wide settings; built once at startup and never mutated."""

    storage_path: Path = field(default_factory=lambda: Path(DEFAULT_STORAGE_PATH).resolve())
    music_storage_path: Path = field(default_factory=lambda: Path(DEFAULT_MUSIC_STORAGE_PATH).resolve())
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = env.get("CORS_ORIGINS", "*")
        return cls(
            storage_path=Path(env.get("STORAGE_PATH", DEFAULT_STORAGE_PATH)).resolve(),
            music_storage_path=Path(env.get("MUSIC_STORAGE_PATH", DEFAULT_MUSIC_STORAGE_PATH)).resolve(),
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", DEFAULT_PORT)),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
        )
