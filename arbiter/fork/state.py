"""Account state pulled from a live chain, and the source it comes from."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Protocol

import requests

from arbiter.errors import ArbiterError, DBError
from arbiter.fork.layout import (
    MappingType,
    SimpleType,
    StorageLayout,
    StorageType,
    keccak256,
    mapping_slot,
)

_MAX_WORD = 1 << 256
_NESTED_MAPPING = "Only handling one map deep for now. A map of a map was found and ignored."


def _checked_address(address: str) -> str:
    """Return ``address`` as lower-case ``0x`` hex, validating its length."""
    if not isinstance(address, str):
        raise ValueError(f"address must be a string, not {type(address).__name__}")
    digits = address[2:] if address[:2].lower() == "0x" else address
    if len(digits) != 40:
        raise ValueError(f"invalid address {address!r}: expected 20 bytes of hex")
    try:
        bytes.fromhex(digits)
    except ValueError as exc:
        raise ValueError(f"invalid address {address!r}: {exc}") from exc
    return "0x" + digits.lower()


def _check_word(value: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < _MAX_WORD:
        raise ValueError(f"{what} {value!r} is not a 256-bit unsigned integer")
    return value


@dataclass
class ContractMetadata:
    """A contract to fork: where it lives, its artifact and the mapping keys to fetch."""

    address: str
    artifacts_path: str
    mappings: dict[str, list[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.address = _checked_address(self.address)

    @classmethod
    def from_dict(cls, data: Any) -> ContractMetadata:
        if not isinstance(data, dict):
            raise ValueError("contract metadata must be a table")
        artifacts_path = data.get("artifacts_path")
        if not isinstance(artifacts_path, str):
            raise ValueError("contract metadata needs a string `artifacts_path`")
        mappings = data.get("mappings", {})
        if not isinstance(mappings, dict) or not all(
            isinstance(keys, list) and all(isinstance(key, str) for key in keys)
            for keys in mappings.values()
        ):
            raise ValueError("`mappings` must map labels to lists of hex keys")
        return cls(
            address=data.get("address"),
            artifacts_path=artifacts_path,
            mappings={str(label): list(keys) for label, keys in mappings.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "artifacts_path": self.artifacts_path,
            "mappings": {label: list(keys) for label, keys in self.mappings.items()},
        }


@dataclass(frozen=True)
class AccountInfo:
    """Balance, nonce and code of one account."""

    balance: int = 0
    nonce: int = 0
    code: bytes = b""

    @property
    def code_hash(self) -> bytes:
        return keccak256(self.code)

    def to_dict(self) -> dict[str, Any]:
        return {
            "balance": hex(self.balance),
            "nonce": self.nonce,
            "code_hash": "0x" + self.code_hash.hex(),
            "code": "0x" + self.code.hex(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccountInfo:
        balance = data.get("balance", 0)
        code = str(data.get("code", ""))
        return cls(
            balance=int(balance, 16) if isinstance(balance, str) else int(balance),
            nonce=int(data.get("nonce", 0)),
            code=bytes.fromhex(code[2:] if code[:2].lower() == "0x" else code),
        )


@dataclass
class ForkedState:
    """Accounts and storage slots collected from a chain."""

    accounts: dict[str, AccountInfo] = field(default_factory=dict)
    storage: dict[str, dict[int, int]] = field(default_factory=dict)

    def insert_account_info(self, address: str, info: AccountInfo) -> None:
        """Set the account's info, keeping any storage already held for it."""
        key = _checked_address(address)
        self.accounts[key] = info
        self.storage.setdefault(key, {})

    def insert_account_storage(self, address: str, slot: int, value: int) -> None:
        """Set one storage slot, creating an empty account when needed."""
        key = _checked_address(address)
        _check_word(slot, "slot")
        _check_word(value, "value")
        self.accounts.setdefault(key, AccountInfo())
        self.storage.setdefault(key, {})[slot] = value


class StateSource(Protocol):
    def basic(self, address: str) -> AccountInfo | None: ...

    def storage(self, address: str, slot: int) -> int: ...


def _quantity(result: Any, method: str) -> int:
    if not isinstance(result, str):
        raise DBError(f"{method} returned {result!r}, expected a hex string")
    try:
        return int(result, 16)
    except ValueError as exc:
        raise DBError(f"{method} returned {result!r}, expected a hex string") from exc


class JsonRpcSource:
    """Fetches account data over Ethereum JSON-RPC at a fixed block."""

    def __init__(
        self,
        url: str,
        block_number: int | None = None,
        *,
        session: Any = None,
        timeout: float = 30.0,
    ) -> None:
        self.url = url
        self.block_number = block_number
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._ids = itertools.count(1)

    @property
    def block_tag(self) -> str:
        return "latest" if self.block_number is None else hex(self.block_number)

    def _call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = self._session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise DBError(f"{method} failed: {exc}") from exc
        if not isinstance(body, dict):
            raise DBError(f"{method} returned a malformed response")
        if body.get("error") is not None:
            error = body["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise DBError(f"{method} failed: {message}")
        if "result" not in body:
            raise DBError(f"{method} returned no result")
        return body["result"]

    def basic(self, address: str) -> AccountInfo:
        """Return the balance, nonce and code of ``address``."""
        address = _checked_address(address)
        tag = self.block_tag
        balance = _quantity(self._call("eth_getBalance", [address, tag]), "eth_getBalance")
        nonce = _quantity(
            self._call("eth_getTransactionCount", [address, tag]), "eth_getTransactionCount"
        )
        code = self._call("eth_getCode", [address, tag])
        if not isinstance(code, str):
            raise DBError(f"eth_getCode returned {code!r}, expected a hex string")
        try:
            code_bytes = bytes.fromhex(code[2:] if code[:2].lower() == "0x" else code)
        except ValueError as exc:
            raise DBError(f"eth_getCode returned invalid hex: {exc}") from exc
        return AccountInfo(balance=balance, nonce=nonce, code=code_bytes)

    def storage(self, address: str, slot: int) -> int:
        """Return the value held in ``slot`` of ``address``."""
        address = _checked_address(address)
        _check_word(slot, "slot")
        result = self._call("eth_getStorageAt", [address, hex(slot), self.block_tag])
        return _quantity(result, "eth_getStorageAt")


def _lookup(layout: StorageLayout, name: str) -> StorageType:
    try:
        return layout.types[name]
    except KeyError as exc:
        raise ArbiterError(f"storage type {name!r} is missing from the layout") from exc


def _parse_slot(slot: str) -> int:
    try:
        value = int(slot, 10)
    except ValueError as exc:
        raise ArbiterError(f"invalid storage slot {slot!r}") from exc
    if not 0 <= value < _MAX_WORD:
        raise ArbiterError(f"invalid storage slot {slot!r}")
    return value


def create_storage_layout(
    contract: ContractMetadata,
    layout: StorageLayout,
    state: ForkedState,
    source: StateSource,
) -> None:
    """Copy a contract's storage slots, and its listed mapping entries, into ``state``.

    Only mappings one level deep are followed; nested mappings keep just their
    base slot.
    """
    address = contract.address
    for item in layout.storage:
        slot = _parse_slot(item.slot)
        state.insert_account_storage(address, slot, source.storage(address, slot))

        kind = _lookup(layout, item.type_)
        if isinstance(kind, SimpleType):
            continue
        if isinstance(_lookup(layout, kind.value), MappingType):
            print(_NESTED_MAPPING)
            continue
        key_kind = _lookup(layout, kind.key)
        if isinstance(key_kind, MappingType):
            print(_NESTED_MAPPING)
            continue
        try:
            key_size = int(key_kind.number_of_bytes)
        except ValueError as exc:
            raise ArbiterError(
                f"invalid size {key_kind.number_of_bytes!r} for type {kind.key!r}"
            ) from exc

        for key in contract.mappings.get(item.label, ()):
            try:
                target = mapping_slot(key, key_size, slot)
            except ValueError as exc:
                raise ArbiterError(f"invalid key {key!r} for {item.label}: {exc}") from exc
            state.insert_account_storage(address, target, source.storage(address, target))