from __future__ import annotations

import sys
from typing import Callable

from .confirm import Confirmer
from .docker_ops import (
    ContainerRuntime,
    creation_options,
    docker_build_command,
    docker_run_command,
    docker_start_command,
    normalize_image_name,
    validate_container_name,
    validate_image_name,
)
from .document import install_document
from .errors import (
    ContainerCreateFailed,
    ContainerStartFailed,
    ImageBuildFailed,
    ImageMissing,
    RuntimeUnavailable,
)
from .events import log_event
from .models import ContainerState, ImageState, InstallationTarget, Outcome, RuntimeTarget
from .settings import Settings

DOCKER_INSTALL_URL = "https://docs.docker.com/get-docker/"


def target_from_settings(settings: Settings, platform: str | None = None) -> RuntimeTarget:
    image_name = normalize_image_name(settings.image_name)
    validate_image_name(image_name)
    validate_container_name(settings.container_name)
    return RuntimeTarget(
        image_name=image_name,
        container_name=settings.container_name,
        creation_options=creation_options(sys.platform if platform is None else platform),
        dockerfile=settings.dockerfile,
        build_context=settings.build_context,
    )


class Reconciler:
    """Drives the container runtime and the prompt file toward the desired state.

    Stages run in order and the first failure raises a ReconcileError. Nothing
    is rolled back; running again picks up at whichever stage is still needed.
    """

    def __init__(
        self,
        runtime: ContainerRuntime,
        confirmer: Confirmer,
        allow_build: bool = True,
        on_step: Callable[[str], None] | None = None,
        on_progress: Callable[[str], None] | None = None,
    ):
        self.runtime = runtime
        self.confirmer = confirmer
        self.allow_build = allow_build
        self._on_step = on_step
        self._on_progress = on_progress

    def reconcile(self, target: RuntimeTarget, install: InstallationTarget) -> Outcome:
        self._ensure_runtime()
        if self._ensure_image(target) is None:
            return Outcome.DECLINED
        self._ensure_container(target)
        install_document(install)
        self._step("Prompt installed")
        return Outcome.READY

    def _step(self, message: str) -> None:
        if self._on_step:
            self._on_step(message)

    def _progress(self, message: str) -> None:
        if self._on_progress:
            self._on_progress(message)

    def _ensure_runtime(self) -> None:
        res = self.runtime.ping()
        if not res.ok:
            log_event("ERROR", "Docker daemon unreachable", error=res.error)
            raise RuntimeUnavailable(
                "Docker is not running.",
                hint=(
                    "Start Docker Desktop (or the Docker daemon) and try again.\n"
                    f"Install Docker: {DOCKER_INSTALL_URL}"
                ),
            )
        self._step("Docker is running")

    def image_state(self, target: RuntimeTarget) -> ImageState:
        res = self.runtime.image_exists(target.image_name)
        if not res.ok:
            log_event("WARN", "Image query failed", image=target.image_name, error=res.error)
        return ImageState.PRESENT if res.matches(target.image_name) else ImageState.MISSING

    def _ensure_image(self, target: RuntimeTarget) -> ImageState | None:
        """Return the final image state, or None when the operator declined the build."""
        if self.image_state(target) is ImageState.PRESENT:
            self._step(f"Toolkit image available ({target.image_name})")
            return ImageState.PRESENT

        build_cmd = docker_build_command(target.image_name, target.dockerfile, target.build_context)
        if not self.allow_build:
            raise ImageMissing(
                f'Toolkit image "{target.image_name}" does not exist and building is disabled.',
                hint=f"Build it manually:\n{build_cmd}",
            )

        prompt = (
            f'Toolkit image "{target.image_name}" not found. '
            "Build it now? This downloads several GB and takes a few minutes."
        )
        if not self.confirmer.confirm(prompt):
            log_event("INFO", "Image build declined", image=target.image_name)
            return None

        self._progress(f"Building image {target.image_name}...")
        res = self.runtime.build_image(target.image_name, target.dockerfile, target.build_context)
        if not res.ok:
            log_event("ERROR", "Image build failed", image=target.image_name, error=res.error)
            raise ImageBuildFailed(
                f'Failed to build image "{target.image_name}": {res.error}',
                hint=f"Try manually:\n{build_cmd}",
            )
        self._step(f"Toolkit image built ({target.image_name})")
        return ImageState.PRESENT

    def container_state(self, name: str) -> ContainerState:
        if self.runtime.container_running(name).matches(name):
            return ContainerState.RUNNING
        if self.runtime.container_exists(name).matches(name):
            return ContainerState.STOPPED_EXISTS
        return ContainerState.ABSENT

    def _ensure_container(self, target: RuntimeTarget) -> None:
        name = target.container_name
        state = self.container_state(name)
        log_event("DEBUG", "Container state resolved", container=name, state=state.value)

        if state is ContainerState.RUNNING:
            self._step(f"Toolkit container ready ({name})")
            return

        if state is ContainerState.STOPPED_EXISTS:
            self._progress(f"Starting stopped container {name}...")
            res = self.runtime.start_container(name)
            if not res.ok:
                log_event("ERROR", "Container start failed", container=name, error=res.error)
                raise ContainerStartFailed(
                    f"Failed to start container {name}: {res.error}",
                    hint=f"Try manually:\n{docker_start_command(name)}",
                )
            self._step(f"Toolkit container running ({name})")
            return

        self._progress(f"Creating container {name}...")
        res = self.runtime.create_container(target.image_name, name, target.creation_options)
        if not res.ok:
            log_event("ERROR", "Container create failed", container=name, error=res.error)
            raise ContainerCreateFailed(
                f"Failed to create container {name}: {res.error}",
                hint=f"Try manually:\n{docker_run_command(target.image_name, name, target.creation_options)}",
            )
        self._step(f"Toolkit container created ({name})")
