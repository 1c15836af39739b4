"""Snapshotting contract and account state from a JSON-RPC provider."""