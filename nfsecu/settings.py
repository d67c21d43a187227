from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

PACKAGE_DIR = Path(__file__).resolve().parent
PROMPT_SOURCE = PACKAGE_DIR / "prompt" / "PENTEST.md"
BUILD_CONTEXT = PACKAGE_DIR / "docker"
DOCKERFILE = BUILD_CONTEXT / "Dockerfile"

PROMPT_FILENAME = "PENTEST.md"


def _env_str(environ: Mapping[str, str], name: str, default: str) -> str:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_bool(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    # Runtime
    image_name: str = "nicefox-secu:latest"
    container_name: str = "nicefox-secu"
    dockerfile: Path = DOCKERFILE
    build_context: Path = BUILD_CONTEXT

    # Installed prompt
    home_dir: Path = Path.home() / ".nicefox-secu"
    prompt_source: Path = PROMPT_SOURCE

    # Safety knobs
    # Building pulls a large base image; allow turning it off on shared hosts.
    allow_build: bool = True

    log_level: str = "WARNING"

    @property
    def prompt_destination(self) -> Path:
        return self.home_dir / PROMPT_FILENAME


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from the environment.

    Environment variables:
      - NFSECU_IMAGE / NFSECU_CONTAINER
      - NFSECU_HOME (defaults to ~/.nicefox-secu)
      - NFSECU_ALLOW_BUILD=false to refuse building the image
      - NFSECU_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
    """
    env = os.environ if environ is None else environ
    defaults = Settings()
    home = _env_str(env, "NFSECU_HOME", "")
    return Settings(
        image_name=_env_str(env, "NFSECU_IMAGE", defaults.image_name),
        container_name=_env_str(env, "NFSECU_CONTAINER", defaults.container_name),
        home_dir=Path(home).expanduser() if home else defaults.home_dir,
        allow_build=_env_bool(env, "NFSECU_ALLOW_BUILD", defaults.allow_build),
        log_level=_env_str(env, "NFSECU_LOG_LEVEL", defaults.log_level).upper(),
    )
