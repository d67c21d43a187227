from __future__ import annotations

import re
import shutil
from pathlib import Path

from .errors import DocumentInstallFailed
from .events import log_event
from .models import InstallationTarget
from .settings import Settings

TARGET_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)

# Presence of any of these in the working directory means the agent can
# read the application's source next to the live target.
SOURCE_MANIFESTS: tuple[str, ...] = (
    "package.json",
    "requirements.txt",
    "pyproject.toml",
    "setup.py",
    "Pipfile",
    "Gemfile",
    "composer.json",
    "go.mod",
    "Cargo.toml",
    "pom.xml",
    "build.gradle",
    "build.gradle.kts",
    "mix.exs",
)


def is_target_url(arg: str | None) -> bool:
    return bool(arg) and TARGET_URL_RE.match(arg.strip()) is not None


def detect_source(cwd: Path) -> str | None:
    """Return the first project manifest found in ``cwd``, if any."""
    for name in SOURCE_MANIFESTS:
        if (cwd / name).is_file():
            return name
    return None


def build_context_prefix(url: str, source_manifest: str | None) -> str:
    """Context block written above the prompt for an external target."""
    if source_manifest:
        source_line = f"Source code: available ({source_manifest} found in working directory)"
    else:
        source_line = "Source code: not available (black-box testing only)"
    lines = [
        "# Engagement context",
        "",
        f"- Target: {url}",
        "- Mode: production (non-destructive scanning only)",
        f"- {source_line}",
        "",
        "Before running any scan, ask the operator to confirm they hold written",
        f"authorization to test {url}. Do not continue without that confirmation.",
        "",
        "---",
        "",
        "",
    ]
    return "\n".join(lines)


def installation_target(settings: Settings, context_prefix: str = "") -> InstallationTarget:
    return InstallationTarget(
        source_path=settings.prompt_source,
        destination_dir=settings.home_dir,
        destination_path=settings.prompt_destination,
        context_prefix=context_prefix,
    )


def install_document(install: InstallationTarget) -> Path:
    """Write the prompt to its destination, replacing whatever was there.

    Without a context prefix the source is copied byte for byte.
    """
    dest = install.destination_path
    try:
        install.destination_dir.mkdir(parents=True, exist_ok=True)
        if install.context_prefix:
            body = install.source_path.read_text(encoding="utf-8")
            dest.write_text(install.context_prefix + body, encoding="utf-8")
        else:
            shutil.copyfile(install.source_path, dest)
    except OSError as e:
        log_event("ERROR", "Prompt installation failed", destination=str(dest), error=str(e))
        raise DocumentInstallFailed(
            f"Could not install the prompt to {dest}: {e}",
            hint=f"Check that {install.destination_dir} is writable, then run again.",
        ) from e
    log_event("INFO", "Prompt installed", destination=str(dest), with_context=bool(install.context_prefix))
    return dest
