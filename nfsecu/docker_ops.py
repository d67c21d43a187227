from __future__ import annotations

import os
import re
import shlex
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Sequence

import docker
from docker.errors import DockerException, NotFound

from .events import log_event
from .models import CommandResult

CONTAINER_NAME_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.\-]{0,127}$")
IMAGE_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9._\-/]{0,254}(:[A-Za-z0-9_][A-Za-z0-9_.\-]{0,127})?$")

BASE_CREATION_OPTIONS: tuple[str, ...] = (
    "--detach",
    "--tty",
    "--cap-add",
    "NET_ADMIN",
    "--cap-add",
    "NET_RAW",
)
HOST_NETWORK_OPTIONS: tuple[str, ...] = ("--network", "host")


def validate_container_name(name: str) -> None:
    if not CONTAINER_NAME_RE.match(name):
        raise ValueError(
            "Invalid container name. Use letters, numbers and _.- starting with a letter or number (max 128 chars)."
        )


def validate_image_name(image: str) -> None:
    if not IMAGE_NAME_RE.match(image):
        raise ValueError("Invalid image name. Use a lowercase repository with an optional :tag.")


def normalize_image_name(image: str) -> str:
    """Return ``image`` with an explicit tag; Docker lists untagged names as ``:latest``."""
    if ":" in image.rsplit("/", 1)[-1]:
        return image
    return f"{image}:latest"


def creation_options(platform: str | None = None) -> tuple[str, ...]:
    """Flags used to create the toolkit container on ``platform``.

    Host networking only exists for Linux containers, so it is added there
    and left out everywhere else.
    """
    platform = sys.platform if platform is None else platform
    if platform.startswith("linux"):
        return BASE_CREATION_OPTIONS + HOST_NETWORK_OPTIONS
    return BASE_CREATION_OPTIONS


def sdk_run_kwargs(options: Sequence[str]) -> dict[str, Any]:
    """Translate CLI style creation flags into ``containers.run`` kwargs."""
    kwargs: dict[str, Any] = {}
    it = iter(options)
    for flag in it:
        if flag in {"-d", "--detach"}:
            kwargs["detach"] = True
        elif flag in {"-t", "--tty"}:
            kwargs["tty"] = True
        elif flag == "--cap-add":
            kwargs.setdefault("cap_add", []).append(_flag_value(flag, it))
        elif flag in {"--network", "--net"}:
            kwargs["network_mode"] = _flag_value(flag, it)
        else:
            raise ValueError(f"Unsupported container creation flag: {flag}")
    return kwargs


def _flag_value(flag: str, it) -> str:
    try:
        return next(it)
    except StopIteration:
        raise ValueError(f"Flag {flag} expects a value") from None


def docker_start_command(container_name: str) -> str:
    return shlex.join(["docker", "start", container_name])


def docker_run_command(image: str, container_name: str, options: Sequence[str]) -> str:
    return shlex.join(["docker", "run", "--name", container_name, *options, image])


def docker_build_command(image: str, dockerfile: Path, build_context: Path) -> str:
    return shlex.join(["docker", "build", "-t", image, "-f", str(dockerfile), str(build_context)])


class ContainerRuntime(ABC):
    """What the reconciler needs from a container runtime.

    Every method returns a CommandResult. Queries put the exact matching
    name in ``output`` and leave it empty when nothing matches.
    """

    @abstractmethod
    def ping(self) -> CommandResult:
        """Check the daemon is reachable."""

    @abstractmethod
    def container_running(self, name: str) -> CommandResult:
        """Look up a running container by exact name."""

    @abstractmethod
    def container_exists(self, name: str) -> CommandResult:
        """Look up a container in any state by exact name."""

    @abstractmethod
    def start_container(self, name: str) -> CommandResult:
        """Start an existing stopped container."""

    @abstractmethod
    def create_container(self, image: str, name: str, options: Sequence[str]) -> CommandResult:
        """Create and start a new container."""

    @abstractmethod
    def image_exists(self, image: str) -> CommandResult:
        """Look up a local image by exact ``repo:tag``."""

    @abstractmethod
    def build_image(self, image: str, dockerfile: Path, build_context: Path) -> CommandResult:
        """Build ``image`` from ``dockerfile`` inside ``build_context``."""


class DockerRuntime(ContainerRuntime):
    """ContainerRuntime backed by the Docker SDK."""

    def __init__(self, client: docker.DockerClient | None = None):
        self._docker = client

    def _client(self) -> docker.DockerClient:
        if self._docker is None:
            self._docker = docker.from_env()
        return self._docker

    def ping(self) -> CommandResult:
        try:
            self._client().ping()
        except DockerException as e:
            log_event("DEBUG", "Docker ping failed", error=str(e))
            return CommandResult.failure(str(e))
        return CommandResult.success("OK")

    def _find_container(self, name: str, all_states: bool) -> CommandResult:
        try:
            found = self._client().containers.list(all=all_states, filters={"name": f"^{name}$"})
        except DockerException as e:
            return CommandResult.failure(str(e))
        # The daemon treats the filter as a regex; keep only an exact hit.
        names = [c.name for c in found]
        return CommandResult.success(name if name in names else "")

    def container_running(self, name: str) -> CommandResult:
        return self._find_container(name, all_states=False)

    def container_exists(self, name: str) -> CommandResult:
        return self._find_container(name, all_states=True)

    def start_container(self, name: str) -> CommandResult:
        try:
            self._client().containers.get(name).start()
        except NotFound:
            return CommandResult.failure(f"No such container: {name}")
        except DockerException as e:
            return CommandResult.failure(str(e))
        log_event("INFO", f"Started container {name}")
        return CommandResult.success(name)

    def create_container(self, image: str, name: str, options: Sequence[str]) -> CommandResult:
        try:
            kwargs = sdk_run_kwargs(options)
        except ValueError as e:
            return CommandResult.failure(str(e))
        try:
            container = self._client().containers.run(image, name=name, **kwargs)
        except DockerException as e:
            return CommandResult.failure(str(e))
        log_event("INFO", f"Created container {name} from image {image}", options=" ".join(options))
        return CommandResult.success(getattr(container, "name", name))

    def image_exists(self, image: str) -> CommandResult:
        try:
            images = self._client().images.list(name=image)
        except DockerException as e:
            return CommandResult.failure(str(e))
        tags = {tag for img in images for tag in (img.tags or [])}
        return CommandResult.success(image if normalize_image_name(image) in tags else "")

    def build_image(self, image: str, dockerfile: Path, build_context: Path) -> CommandResult:
        try:
            # The SDK wants the Dockerfile relative to the context.
            self._client().images.build(
                path=str(build_context),
                dockerfile=os.path.relpath(dockerfile, build_context),
                tag=image,
                rm=True,
            )
        except DockerException as e:
            return CommandResult.failure(str(e))
        log_event("INFO", f"Built image {image}")
        return CommandResult.success(image)
