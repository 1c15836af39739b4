# arbiter

Command-line helpers for projects that simulate smart contracts. The tool
scaffolds new projects from a template repository, generates contract
bindings with `forge`, and snapshots on-chain state from a JSON-RPC provider
into a JSON file.

## Installation

```
pip install .
```

`git` and `forge` must be on your `PATH` for the `init` and `bind`
commands. Python 3.11 or later is required.

## Commands

Running `arbiter` with no subcommand prints the help text; `arbiter
--version` prints the version. Any error is printed to standard error and the
command exits with status 1.

### Start a project

```
ARBITER_TEMPLATE=<git repository> arbiter init my_simulation
```

Clones the repository named by the `ARBITER_TEMPLATE` environment variable
into `my_simulation` (the command fails if the variable is unset), changes
into it, replaces `arbiter_template` with the project name in its
`Cargo.toml`, runs `forge install` and then `forge bind` into
`src/bindings/`. Pass `--no-git` to remove the `.git` directory afterwards.

### Generate bindings

```
arbiter bind
```

Runs `forge bind --module --overwrite --force` into the bindings directory,
then deletes binding files for contracts not found in the project's source
directory and rewrites `mod.rs` to keep only comment lines and the
`pub mod` lines of the kept contracts. Files named `mod` or `settings` are
never deleted.

The source directory and library directories come from `foundry.toml`
(`src` and `libs` of the `default` profile, overridden by the profile named
in `FOUNDRY_PROFILE`), defaulting to `src` and `lib`.

Settings are read from an optional `arbiter.toml`:

```toml
submodules = true         # also bind each git submodule found in the lib dirs
ignore_interfaces = true  # filter which contract files are kept (see below)
```

When `arbiter.toml` exists, bindings go to `src/bindings`, `submodules`
defaults to false and `ignore_interfaces` to true. Without the file,
bindings go to `src` and both settings are false. With `ignore_interfaces`
on, only files with the `.t` extension whose module name does not start with
`i` are kept. Submodule bindings are written next to the bindings directory
as `<name>_bindings`; `forge-std` and libraries without contracts are
skipped.

Module names are formed from contract file names by converting to
snake_case, prefixing `_` when they start with a digit, and appending `_` to
reserved words: `arbiter.bind.naming.safe_module_name("SD59x18Math")` returns
`"sd5_9x_18_math"`, and `safe_module_name("Enum")` returns `"enum_"`.

### Fork chain state

```
arbiter fork fork_config.toml
```

The configuration may be TOML or JSON, and its extension may be left off.
The command fetches balance, nonce and code of each listed contract and
externally owned account, plus the contract storage described by its
compiler artifact, at the given block, and writes the result as JSON. An
existing output file is only replaced with `--overwrite`.

```toml
provider = "http://localhost:8545"
block_number = 16000000
output_directory = "example_fork"   # defaults to "./"
output_filename = "snapshot.json"   # defaults to "output.json"

[contracts.token]
address = "0x00000000000000000000000000000000000000aa"
artifacts_path = "artifacts/token.json"
mappings = { balanceOf = ["0000000000000000000000000000000000000001"] }

[externally_owned_accounts]
alice = "0x0000000000000000000000000000000000000001"
```

The artifact file must contain the compiler's `storageLayout`. Every storage
variable's slot is captured; for mappings one level deep, the entries for the
hex keys listed under `mappings` are captured too. Nested mappings keep only
their base slot.

The output file holds `meta` (the contract settings), `raw` (for each
address, its account info and its storage slots as decimal strings) and
`externally_owned_accounts`.

## Library use

- `arbiter.bind.config.load_arbiter_config(path)` reads `arbiter.toml`.
- `arbiter.bind.contracts.collect_contract_list(directory, settings)`,
  `remove_unneeded_contracts(...)` and `update_mod_file(...)` do the pruning.
- `arbiter.bind.forge.load_foundry_config(root)`, `run_forge(args)` and
  `forge_bind()` drive `forge`.
- `arbiter.fork.layout.digest_artifacts(path)` parses storage layouts;
  `mapping_slot(key, key_size, slot)` computes a mapping entry's slot.
- `arbiter.fork.config.load_fork_config(path)` returns a `ForkConfig`, whose
  `digest_config(source)` and `write_to_disk(overwrite, source)` accept any
  object with `basic(address)` and `storage(address, slot)` methods in place
  of the default `JsonRpcSource`.

## What it does not do

The package does not run simulations or execute contracts: it has no EVM,
no local chain and no reader for the fork snapshots it writes. The files it
produces are meant for a separate simulation environment.