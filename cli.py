from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping

from nfsecu import __version__
from nfsecu import console as out
from nfsecu.confirm import Confirmer, ConsoleConfirmer
from nfsecu.docker_ops import ContainerRuntime, DockerRuntime
from nfsecu.document import build_context_prefix, detect_source, installation_target, is_target_url
from nfsecu.errors import ReconcileError
from nfsecu.events import configure_logging, log_event
from nfsecu.models import Outcome
from nfsecu.reconciler import Reconciler, target_from_settings
from nfsecu.settings import load_settings


def _authorization_prompt(url: str) -> str:
    return (
        f"Only test systems you own or have written permission to test. "
        f"Do you have written authorization to test {url}?"
    )


def main(
    argv: list[str] | None = None,
    *,
    runtime: ContainerRuntime | None = None,
    confirmer: Confirmer | None = None,
    cwd: Path | None = None,
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> int:
    p = argparse.ArgumentParser(
        prog="nicefox-secu",
        description="Prepare the NiceFox Secu pentest toolkit and install the agent prompt.",
    )
    p.add_argument("target", nargs="?", help="URL of a deployed target (switches to external-target mode)")
    p.add_argument("--no-build", action="store_true", help="Never build the toolkit image, fail if it is missing")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every runtime call to stderr")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = p.parse_args(argv)

    settings = load_settings(environ)
    configure_logging("DEBUG" if args.verbose else settings.log_level)
    confirmer = confirmer or ConsoleConfirmer()

    out.banner()

    try:
        target = target_from_settings(settings, platform)
    except ValueError as e:
        out.fail(f"Invalid configuration: {e}", "Check NFSECU_IMAGE and NFSECU_CONTAINER.")
        return 1

    context_prefix = ""
    if args.target and is_target_url(args.target):
        url = args.target.strip()
        if not confirmer.confirm(_authorization_prompt(url)):
            out.warn("Aborted. Nothing was changed.")
            return 0
        manifest = detect_source(cwd or Path.cwd())
        context_prefix = build_context_prefix(url, manifest)
        out.step_done(f"Target: {url}" + (f" (source: {manifest})" if manifest else " (no local source)"))
    elif args.target:
        out.warn(f"Ignoring {args.target!r}: not an http(s) URL. Using local project mode.")

    reconciler = Reconciler(
        runtime or DockerRuntime(),
        confirmer,
        allow_build=settings.allow_build and not args.no_build,
        on_step=out.step_done,
        on_progress=out.step_progress,
    )
    install = installation_target(settings, context_prefix)

    try:
        outcome = reconciler.reconcile(target, install)
    except ReconcileError as e:
        log_event("ERROR", "Bootstrap failed", step=e.step, error=e.message)
        out.fail(f"[{e.step}] {e.message}", e.hint)
        return 1

    if outcome is Outcome.DECLINED:
        out.warn("Skipped building the toolkit image. Run nicefox-secu again when you are ready.")
        return 0

    out.next_steps(str(install.destination_path))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
