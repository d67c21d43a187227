from __future__ import annotations


class ReconcileError(Exception):
    """A terminal failure of one reconcile stage.

    ``hint`` holds what the operator can run by hand to retry, usually the
    exact docker command that failed.
    """

    step = "reconcile"

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class RuntimeUnavailable(ReconcileError):
    step = "runtime"


class ImageMissing(ReconcileError):
    step = "image"


class ImageBuildFailed(ReconcileError):
    step = "image"


class ContainerStartFailed(ReconcileError):
    step = "container"


class ContainerCreateFailed(ReconcileError):
    step = "container"


class DocumentInstallFailed(ReconcileError):
    step = "document"
