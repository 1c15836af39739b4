"""Decide which generated contract bindings to keep, and prune the rest."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from arbiter.bind.config import ArbiterConfig
from arbiter.bind.naming import safe_module_name

SHARED_TYPES = "shared_types"
_PRESERVED_STEMS = frozenset({"mod", "settings"})


def _contract_root(directory: Path) -> Path:
    """Return the directory holding the contract sources of ``directory``."""
    if directory.name in ("src", "contracts"):
        return directory
    for candidate in (directory / "src", directory / "contracts"):
        if candidate.is_dir():
            return candidate
    return directory


def is_test(file_path: str | Path) -> bool:
    """Return True unless the file has the ``.t`` extension."""
    return Path(file_path).suffix != ".t"


def collect_contract_list(
    directory: str | Path, settings: ArbiterConfig
) -> tuple[list[str], Path]:
    """List module names for the contracts found under ``directory``.

    Returns the names, always starting with ``shared_types``, together with
    the directory that was actually searched (``src`` or ``contracts`` when
    present).
    """
    directory = Path(directory)
    contracts = [SHARED_TYPES]
    target = directory
    if directory.is_dir():
        target = _contract_root(directory)
        for path in sorted(target.iterdir()):
            if not path.is_file():
                continue
            stem = path.stem
            if not stem.isidentifier():
                raise ValueError(f"{stem!r} is not a valid identifier")
            name = safe_module_name(stem)
            if not settings.ignore_interfaces or (
                not name.startswith("i") and not is_test(path)
            ):
                contracts.append(name)
    return contracts, target


def _keep_line(line: str, keep: set[str]) -> bool:
    stripped = line.strip()
    if stripped.startswith("//") or stripped.startswith("#"):
        return True
    if stripped.startswith("pub mod ") and stripped.endswith(";"):
        return stripped[len("pub mod ") : -1] in keep
    return False


def update_mod_file(bindings_path: str | Path, contracts_to_keep: Iterable[str]) -> None:
    """Rewrite ``mod.rs`` keeping comments and the wanted module lines only.

    The file is created empty when it does not exist yet.
    """
    mod_path = Path(bindings_path) / "mod.rs"
    keep = set(contracts_to_keep)
    try:
        content = mod_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        mod_path.touch()
        content = ""
    except (OSError, UnicodeDecodeError) as exc:
        raise OSError(f"Failed to open file: {exc}") from exc

    lines = (line.removesuffix("\r") for line in content.split("\n"))
    kept = [line for line in lines if _keep_line(line, keep)]
    try:
        mod_path.write_text("\n".join(kept), encoding="utf-8")
    except OSError as exc:
        raise OSError(f"Failed to write to file: {exc}") from exc


def remove_unneeded_contracts(
    bindings_path: str | Path, needed_contracts: Iterable[str]
) -> None:
    """Delete binding files not named in ``needed_contracts`` and update ``mod.rs``.

    Names are compared case-insensitively; ``mod`` and ``settings`` files are
    always kept. Nothing happens when ``needed_contracts`` is empty.
    """
    needed = list(needed_contracts)
    if not needed:
        return
    bindings_path = Path(bindings_path)
    if bindings_path.is_dir():
        wanted = {contract.lower() for contract in needed}
        try:
            entries = sorted(bindings_path.iterdir())
        except OSError as exc:
            raise OSError(f"Failed to read directory: {exc}") from exc
        for path in entries:
            if not path.is_file():
                continue
            stem = path.stem.lower()
            if stem in _PRESERVED_STEMS or stem in wanted:
                continue
            try:
                path.unlink()
            except OSError as exc:
                raise OSError(f"Failed to remove file: {exc}") from exc
    try:
        update_mod_file(bindings_path, needed)
    except OSError as exc:
        raise OSError(f"Failed to update mod file: {exc}") from exc