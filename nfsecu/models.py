from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ContainerState(str, Enum):
    ABSENT = "absent"
    STOPPED_EXISTS = "stopped"
    RUNNING = "running"


class ImageState(str, Enum):
    MISSING = "missing"
    PRESENT = "present"


class Outcome(str, Enum):
    """How a successful reconcile ended."""

    READY = "ready"
    DECLINED = "declined"  # operator chose not to build the image


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one container runtime call.

    Adapters return this instead of raising so the reconciler only ever
    compares ``output`` against the expected name.
    """

    ok: bool
    output: str = ""
    error: str = ""

    @classmethod
    def success(cls, output: str = "") -> CommandResult:
        return cls(ok=True, output=(output or "").strip())

    @classmethod
    def failure(cls, error: str) -> CommandResult:
        return cls(ok=False, error=(error or "").strip())

    def matches(self, expected: str) -> bool:
        return self.ok and self.output == expected


@dataclass(frozen=True)
class RuntimeTarget:
    image_name: str
    container_name: str
    creation_options: tuple[str, ...]
    dockerfile: Path
    build_context: Path


@dataclass(frozen=True)
class InstallationTarget:
    source_path: Path
    destination_dir: Path
    destination_path: Path
    context_prefix: str = ""
