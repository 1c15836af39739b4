"""Read compiler storage layouts and locate the storage slots of mappings."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from Crypto.Hash import keccak

from arbiter.errors import ArbiterError

WORD_SIZE = 32
_MAX_WORD = 1 << 256


def keccak256(data: bytes) -> bytes:
    """Return the Keccak-256 digest of ``data``."""
    return keccak.new(digest_bits=256, data=data).digest()


@dataclass(frozen=True)
class StorageItem:
    """One state variable in a contract's storage layout."""

    ast_id: int
    contract: str
    label: str
    offset: int
    slot: str
    type_: str


@dataclass(frozen=True)
class MappingType:
    """A mapping type from the layout's type table."""

    encoding: str
    key: str
    value: str
    label: str | None = None
    number_of_bytes: str | None = None


@dataclass(frozen=True)
class SimpleType:
    """Any non-mapping type from the layout's type table."""

    encoding: str
    label: str
    number_of_bytes: str


StorageType = MappingType | SimpleType


@dataclass
class StorageLayout:
    """State variables of a contract and the types they refer to."""

    storage: list[StorageItem] = field(default_factory=list)
    types: dict[str, StorageType] = field(default_factory=dict)


@dataclass
class Artifacts:
    """The parts of a compiler artifact that forking needs."""

    storage_layout: StorageLayout


def _json_error(message: object) -> ArbiterError:
    return ArbiterError(f"Error with serde_json: {message}")


def _field(data: Any, name: str, kind: type, where: str) -> Any:
    if not isinstance(data, dict):
        raise _json_error(f"expected an object for {where}")
    if name not in data:
        raise _json_error(f"missing field `{name}` in {where}")
    value = data[name]
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise _json_error(f"field `{name}` in {where} must be of type {kind.__name__}")
    return value


def _unsigned(data: Any, name: str, where: str) -> int:
    value = _field(data, name, int, where)
    if value < 0:
        raise _json_error(f"field `{name}` in {where} must not be negative")
    return value


def _is_optional_str(value: Any) -> bool:
    return value is None or isinstance(value, str)


def parse_storage_type(data: Any) -> StorageType:
    """Parse one entry of a layout's type table, trying a mapping first."""
    if not isinstance(data, dict):
        raise _json_error("expected an object for a storage type")
    if all(isinstance(data.get(key), str) for key in ("encoding", "key", "value")) and all(
        _is_optional_str(data.get(key)) for key in ("label", "numberOfBytes")
    ):
        return MappingType(
            encoding=data["encoding"],
            key=data["key"],
            value=data["value"],
            label=data.get("label"),
            number_of_bytes=data.get("numberOfBytes"),
        )
    if all(isinstance(data.get(key), str) for key in ("encoding", "label", "numberOfBytes")):
        return SimpleType(
            encoding=data["encoding"],
            label=data["label"],
            number_of_bytes=data["numberOfBytes"],
        )
    raise _json_error("data did not match any variant of untagged enum StorageType")


def _parse_item(data: Any) -> StorageItem:
    where = "storage item"
    return StorageItem(
        ast_id=_unsigned(data, "astId", where),
        contract=_field(data, "contract", str, where),
        label=_field(data, "label", str, where),
        offset=_unsigned(data, "offset", where),
        slot=_field(data, "slot", str, where),
        type_=_field(data, "type", str, where),
    )


def parse_artifacts(data: Any) -> Artifacts:
    """Build :class:`Artifacts` from a decoded compiler artifact."""
    layout = _field(data, "storageLayout", dict, "artifacts")
    storage = _field(layout, "storage", list, "storageLayout")
    types = _field(layout, "types", dict, "storageLayout")
    return Artifacts(
        storage_layout=StorageLayout(
            storage=[_parse_item(item) for item in storage],
            types={str(name): parse_storage_type(kind) for name, kind in types.items()},
        )
    )


def digest_artifacts(path: str | Path) -> Artifacts:
    """Read a compiler artifact JSON file and return its storage layout."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ArbiterError(f"Error with file IO: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise _json_error(exc) from exc
    return parse_artifacts(data)


def mapping_slot(key: str, key_size: int, slot: int) -> int:
    """Return the storage slot of ``key`` in the mapping stored at ``slot``.

    ``key`` is hex (an optional ``0x`` is allowed); it is left-padded with
    ``32 - key_size`` zero bytes before hashing it with the 32-byte slot.
    """
    if not 0 <= key_size <= WORD_SIZE:
        raise ValueError(f"key size {key_size} is outside 0..{WORD_SIZE}")
    if not 0 <= slot < _MAX_WORD:
        raise ValueError(f"slot {slot} does not fit in 256 bits")
    digits = key[2:] if key[:2].lower() == "0x" else key
    key_bytes = bytes.fromhex(digits)
    preimage = bytes(WORD_SIZE - key_size) + key_bytes + slot.to_bytes(WORD_SIZE, "big")
    return int.from_bytes(keccak256(preimage), "big")