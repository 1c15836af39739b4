"""Create a new project from a template repository."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from arbiter.bind.forge import run_forge
from arbiter.errors import ArbiterError, CommandError

TEMPLATE_ENV = "ARBITER_TEMPLATE"
TEMPLATE_PLACEHOLDER = "arbiter_template"
MANIFEST = "Cargo.toml"


def _template_source() -> str:
    source = os.environ.get(TEMPLATE_ENV)
    if not source:
        raise ArbiterError(f"No project template given; set {TEMPLATE_ENV}.")
    return source


def _forge(args: Sequence[str]) -> str:
    try:
        return run_forge(args)
    except CommandError as exc:
        print(f"Command failed, error: {exc.stderr}, is forge installed?")
        raise


def init_project(name: str) -> None:
    """Clone the template into ``name``, rename it and generate its bindings.

    The template is the repository named by the ``ARBITER_TEMPLATE``
    environment variable. The working directory is left inside the new
    project. Raises :class:`CommandError` when git or forge fails.
    """
    source = _template_source()
    cloned = subprocess.run(["git", "clone", source, name], check=False)
    if cloned.returncode != 0:
        print("Failed to clone the repository.")
        raise CommandError("Failed to clone the repository.")

    os.chdir(name)

    manifest = Path(MANIFEST)
    content = manifest.read_text(encoding="utf-8")
    manifest.write_text(content.replace(TEMPLATE_PLACEHOLDER, name), encoding="utf-8")

    _forge(["install"])
    _forge(
        [
            "bind",
            "--revert-strings",
            "debug",
            "-b",
            "src/bindings/",
            "--module",
            "--overwrite",
        ]
    )
    print("Note: revert strings are on")
    print(f"Your Arbiter project '{name}' has been successfully initialized!")


def remove_git() -> None:
    """Remove the ``.git`` directory from the working directory, if any."""
    shutil.rmtree(".git", ignore_errors=True)