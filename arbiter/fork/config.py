"""Fork settings: which contracts and accounts to copy from a live chain."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from arbiter.errors import ArbiterError, ConfigError, DBError
from arbiter.fork.layout import digest_artifacts
from arbiter.fork.state import (
    AccountInfo,
    ContractMetadata,
    ForkedState,
    JsonRpcSource,
    StateSource,
    _checked_address,
    create_storage_layout,
)

DEFAULT_OUTPUT_DIRECTORY = "./"
DEFAULT_OUTPUT_FILENAME = "output.json"
_EXTENSIONS = (".toml", ".json")
_FETCH_FAILED = "Failed to fetch account info from the provider."


@dataclass
class ForkConfig:
    """Where to fork from and what to take."""

    provider: str
    block_number: int
    contracts_meta: dict[str, ContractMetadata] = field(default_factory=dict)
    externally_owned_accounts: dict[str, str] = field(default_factory=dict)
    output_directory: str | None = None
    output_filename: str | None = None

    def spawn_source(self) -> JsonRpcSource:
        """Return a JSON-RPC source reading at the configured block."""
        return JsonRpcSource(self.provider, self.block_number)

    def digest_config(self, source: StateSource | None = None) -> ForkedState:
        """Fetch every configured contract, its storage and the listed accounts."""
        source = self.spawn_source() if source is None else source
        state = ForkedState()
        for contract in self.contracts_meta.values():
            state.insert_account_info(contract.address, _fetch_info(source, contract.address))
            artifacts = digest_artifacts(contract.artifacts_path)
            create_storage_layout(contract, artifacts.storage_layout, state, source)
            for eoa in self.externally_owned_accounts.values():
                state.insert_account_info(eoa, _fetch_info(source, eoa))
        return state

    @property
    def output_path(self) -> Path:
        return Path(self.output_directory or DEFAULT_OUTPUT_DIRECTORY) / (
            self.output_filename or DEFAULT_OUTPUT_FILENAME
        )

    def write_to_disk(self, overwrite: bool = False, source: StateSource | None = None) -> Path:
        """Fetch the fork and write it as JSON to the output path.

        An existing file is only replaced when ``overwrite`` is set.
        """
        file_path = self.output_path
        if file_path.is_file():
            if not overwrite:
                raise ArbiterError(
                    "File already exists at output path. Please use the `--overwrite` "
                    "flag, delete it, or change the output path."
                )
            file_path.unlink()

        state = self.digest_config(source)
        raw = {
            address: [
                info.to_dict(),
                {str(slot): str(value) for slot, value in state.storage.get(address, {}).items()},
            ]
            for address, info in state.accounts.items()
        }
        disk_data = {
            "meta": {name: meta.to_dict() for name, meta in self.contracts_meta.items()},
            "raw": raw,
            "externally_owned_accounts": dict(self.externally_owned_accounts),
        }
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(json.dumps(disk_data), encoding="utf-8")
        except OSError as exc:
            raise ArbiterError(f"Error with file IO: {exc}") from exc
        print("Wrote fork data to disk.")
        return file_path


def _fetch_info(source: StateSource, address: str) -> AccountInfo:
    try:
        info = source.basic(address)
    except DBError as exc:
        raise DBError(_FETCH_FAILED) from exc
    if info is None:
        raise DBError(_FETCH_FAILED)
    return info


def _locate(path: Path) -> Path:
    if path.is_file():
        return path
    for extension in _EXTENSIONS:
        candidate = path.with_name(path.name + extension)
        if candidate.is_file():
            return candidate
    raise ConfigError(f'configuration file "{path}" not found')


def _read(path: Path) -> dict[str, Any]:
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        else:
            with path.open("rb") as handle:
                data = tomllib.load(handle)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(exc) from exc
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a table at the top level")
    return data


def _required(data: dict[str, Any], name: str, kind: type) -> Any:
    if name not in data:
        raise ConfigError(f"missing field `{name}`")
    value = data[name]
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"field `{name}` must be of type {kind.__name__}")
    return value


def _optional_str(data: dict[str, Any], name: str) -> str | None:
    value = data.get(name)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"field `{name}` must be a string")
    return value


def _parse(data: dict[str, Any]) -> ForkConfig:
    provider = _required(data, "provider", str)
    block_number = _required(data, "block_number", int)
    if block_number < 0:
        raise ConfigError("field `block_number` must not be negative")
    contracts = _required(data, "contracts", dict)
    eoas = _required(data, "externally_owned_accounts", dict)
    try:
        contracts_meta = {
            str(name): ContractMetadata.from_dict(meta) for name, meta in contracts.items()
        }
        accounts = {str(name): _checked_address(address) for name, address in eoas.items()}
    except ValueError as exc:
        raise ConfigError(exc) from exc
    return ForkConfig(
        provider=provider,
        block_number=block_number,
        contracts_meta=contracts_meta,
        externally_owned_accounts=accounts,
        output_directory=_optional_str(data, "output_directory"),
        output_filename=_optional_str(data, "output_filename"),
    )


def load_fork_config(path: str | Path) -> ForkConfig:
    """Read fork settings from a TOML or JSON file relative to the working directory.

    The extension may be left off. Output directory and file name default to
    ``./`` and ``output.json``.
    """
    fork_config = _parse(_read(_locate(Path.cwd() / path)))
    if fork_config.output_directory is None:
        print("No output path specified. Defaulting to current directory.")
        fork_config.output_directory = DEFAULT_OUTPUT_DIRECTORY
    if fork_config.output_filename is None:
        print("No output filename specified. Defaulting to `output.json.`")
        fork_config.output_filename = DEFAULT_OUTPUT_FILENAME
    return fork_config