import os
import sys

import pytest

# Ensure project root is importable (so `import cli` and `nfsecu` work without an install)
_project_root = os.path.dirname(os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from nfsecu.docker_ops import ContainerRuntime  # noqa: E402
from nfsecu.events import configure_logging  # noqa: E402
from nfsecu.models import CommandResult, ContainerState  # noqa: E402
from nfsecu.settings import Settings  # noqa: E402

MUTATING = {"start_container", "create_container", "build_image"}


class FakeRuntime(ContainerRuntime):
    """In-memory runtime that records every call in order."""

    def __init__(
        self,
        *,
        daemon_up=True,
        image_present=True,
        state=ContainerState.ABSENT,
        fail=(),
        name="nicefox-secu",
        image="nicefox-secu:latest",
    ):
        self.daemon_up = daemon_up
        self.image_present = image_present
        self.state = state
        self.fail = set(fail)
        self.name = name
        self.image = image
        self.calls = []

    @property
    def call_names(self):
        return [c[0] for c in self.calls]

    @property
    def mutating_calls(self):
        return [c for c in self.calls if c[0] in MUTATING]

    def _failed(self, op):
        return CommandResult.failure(f"{op} exploded") if op in self.fail else None

    def ping(self):
        self.calls.append(("ping",))
        return CommandResult.success("OK") if self.daemon_up else CommandResult.failure("Cannot connect")

    def container_running(self, name):
        self.calls.append(("container_running", name))
        hit = name == self.name and self.state is ContainerState.RUNNING
        return CommandResult.success(name if hit else "")

    def container_exists(self, name):
        self.calls.append(("container_exists", name))
        hit = name == self.name and self.state is not ContainerState.ABSENT
        return CommandResult.success(name if hit else "")

    def start_container(self, name):
        self.calls.append(("start_container", name))
        failed = self._failed("start_container")
        if failed:
            return failed
        self.state = ContainerState.RUNNING
        return CommandResult.success(name)

    def create_container(self, image, name, options):
        self.calls.append(("create_container", image, name, tuple(options)))
        failed = self._failed("create_container")
        if failed:
            return failed
        self.name = name
        self.state = ContainerState.RUNNING
        return CommandResult.success(name)

    def image_exists(self, image):
        self.calls.append(("image_exists", image))
        hit = image == self.image and self.image_present
        return CommandResult.success(image if hit else "")

    def build_image(self, image, dockerfile, build_context):
        self.calls.append(("build_image", image, str(dockerfile), str(build_context)))
        failed = self._failed("build_image")
        if failed:
            return failed
        self.image = image
        self.image_present = True
        return CommandResult.success(image)


class ScriptedConfirmer:
    """Answers prompts from a fixed list and remembers what it was asked."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def confirm(self, prompt):
        self.prompts.append(prompt)
        return self.answers.pop(0) if self.answers else True


@pytest.fixture(autouse=True)
def quiet_logs():
    configure_logging("CRITICAL")


@pytest.fixture
def make_runtime():
    return FakeRuntime


@pytest.fixture
def make_confirmer():
    return ScriptedConfirmer


@pytest.fixture
def prompt_source(tmp_path):
    src = tmp_path / "src" / "PENTEST.md"
    src.parent.mkdir()
    src.write_text("# Pentest playbook\n\nRun the tools.\n", encoding="utf-8")
    return src


@pytest.fixture
def settings(tmp_path, prompt_source):
    return Settings(home_dir=tmp_path / "home" / ".nicefox-secu", prompt_source=prompt_source)


@pytest.fixture
def environ(settings):
    return {"NFSECU_HOME": str(settings.home_dir)}
