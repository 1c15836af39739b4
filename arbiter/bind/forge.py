"""Generate contract bindings by running ``forge bind``."""

from __future__ import annotations

import os
import subprocess
import tomllib
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from arbiter.bind.config import ArbiterConfig, load_arbiter_config
from arbiter.bind.contracts import collect_contract_list, remove_unneeded_contracts
from arbiter.errors import CommandError, ConfigError

FOUNDRY_CONFIG_FILE = "foundry.toml"


@dataclass(frozen=True)
class FoundryConfig:
    """The parts of a Foundry project's settings that binding generation uses."""

    src: Path = field(default_factory=lambda: Path("src"))
    libs: tuple[Path, ...] = field(default_factory=lambda: (Path("lib"),))


def _profile_settings(data: dict[str, Any], config_file: Path) -> dict[str, Any]:
    profiles = data.get("profile", {})
    if not isinstance(profiles, dict):
        raise ConfigError(f"{config_file}: 'profile' must be a table")
    settings: dict[str, Any] = {}
    selected = os.environ.get("FOUNDRY_PROFILE", "default")
    for name in dict.fromkeys(("default", selected)):
        section = profiles.get(name, {})
        if not isinstance(section, dict):
            raise ConfigError(f"{config_file}: profile {name!r} must be a table")
        settings.update(section)
    return settings


def load_foundry_config(root: str | Path | None = None) -> FoundryConfig:
    """Read ``foundry.toml`` under ``root`` (the working directory by default).

    Paths in the result are joined to ``root``. Missing settings fall back to
    ``src`` and ``lib``.
    """
    root_path = Path.cwd() if root is None else Path(root)
    config_file = root_path / FOUNDRY_CONFIG_FILE
    settings: dict[str, Any] = {}
    if config_file.is_file():
        try:
            with config_file.open("rb") as handle:
                data = tomllib.load(handle)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"{config_file}: {exc}") from exc
        settings = _profile_settings(data, config_file)

    src = settings.get("src", "src")
    libs = settings.get("libs", ["lib"])
    if not isinstance(src, str):
        raise ConfigError(f"{config_file}: 'src' must be a string")
    if not isinstance(libs, list) or not all(isinstance(lib, str) for lib in libs):
        raise ConfigError(f"{config_file}: 'libs' must be a list of strings")
    return FoundryConfig(
        src=root_path / src,
        libs=tuple(root_path / lib for lib in libs),
    )


def _decode(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def run_forge(args: Iterable[object]) -> str:
    """Run ``forge`` with ``args`` and return what it wrote to stdout.

    Raises :class:`CommandError` carrying forge's stderr when it exits with a
    failure status, and ``OSError`` when it cannot be started at all.
    """
    command = ["forge", *(str(arg) for arg in args)]
    completed = subprocess.run(command, capture_output=True, check=False)
    if completed.returncode != 0:
        raise CommandError("Command failed", stderr=_decode(completed.stderr))
    output = _decode(completed.stdout)
    print(f"Command output: {output}")
    return output


def forge_bind() -> None:
    """Generate bindings for the project in the working directory.

    Bindings for contracts outside the project sources are removed afterwards,
    and libraries are bound too when the settings ask for submodules.
    """
    foundry_config = load_foundry_config()
    try:
        arbiter_config = load_arbiter_config()
    except ConfigError:
        arbiter_config = ArbiterConfig()

    failure: CommandError | None = None
    try:
        run_forge(
            [
                "bind",
                "--revert-strings",
                "debug",
                "-b",
                arbiter_config.bindings_path,
                "--module",
                "--overwrite",
                "--force",
            ]
        )
    except CommandError as exc:
        failure = exc
    project_contracts, _ = collect_contract_list(foundry_config.src, arbiter_config)
    if failure is not None:
        print(f"Command failed, error: {failure.stderr}, is forge installed?")
        raise failure

    remove_unneeded_contracts(arbiter_config.bindings_path, project_contracts)
    if arbiter_config.submodules:
        for lib_dir in foundry_config.libs:
            for_each_submodule(arbiter_config, lib_dir)


def for_each_submodule(arbiter_config: ArbiterConfig, lib_dir: str | Path) -> None:
    """Generate and prune bindings for every git submodule inside ``lib_dir``."""
    lib_dir = Path(lib_dir)
    if not lib_dir.is_dir():
        return
    for path in sorted(lib_dir.iterdir()):
        if path.is_dir() and (path / ".git").exists():
            print(f"Generating bindings for library: {path}")
            output_path, contracts = bindings_for_submodules(path, arbiter_config)
            if output_path is None:
                continue
            remove_unneeded_contracts(output_path, contracts)


def bindings_for_submodules(
    lib_dir: str | Path, config: ArbiterConfig
) -> tuple[Path | None, list[str]]:
    """Run ``forge bind`` for one library submodule.

    Returns the output directory and the contracts bound. The directory is
    ``None`` when the library holds no contracts; libraries that are not git
    checkouts, and ``forge-std``, are left alone.
    """
    lib_dir = Path(lib_dir)
    contracts: list[str] = []
    output_path = Path(config.bindings_path).parent
    if (
        lib_dir.is_dir()
        and (lib_dir / ".git").exists()
        and lib_dir.name != "forge-std"
    ):
        contracts, target = collect_contract_list(lib_dir, config)
        if len(contracts) <= 1:
            return None, contracts
        submodule_name = lib_dir.name.replace("-", "_")
        print(f"submodule name: {submodule_name!r}")
        output_path = output_path / f"{submodule_name}_bindings"
        print(f"output path: for submodule {submodule_name!r} is {output_path}")
        try:
            run_forge(
                [
                    "bind",
                    "--revert-strings",
                    "debug",
                    "-b",
                    output_path,
                    "-C",
                    target,
                    "--module",
                    "--overwrite",
                    "--force",
                ]
            )
        except CommandError as exc:
            print(f"Command failed, error: {exc.stderr}")
            raise
    return output_path, contracts