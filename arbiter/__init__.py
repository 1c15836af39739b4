"""Tooling for EVM simulation projects: scaffolding, bindings and state forking."""

__version__ = "0.4.13"