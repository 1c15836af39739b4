"""Exceptions raised by the arbiter command-line tools."""

from __future__ import annotations


class ArbiterError(Exception):
    """Base class for every error the tools report."""

    prefix = ""

    def __init__(self, detail: object = "") -> None:
        self.detail = str(detail)
        super().__init__(self.detail)

    def __str__(self) -> str:
        return f"{self.prefix}{self.detail}"


class ConfigError(ArbiterError):
    """A configuration file could not be found, read or parsed."""

    prefix = "Error with config parsing: "


class DBError(ArbiterError):
    """Account or storage data could not be fetched or stored."""

    prefix = "Error with DB: "


class CommandError(ArbiterError):
    """An external command such as ``forge`` or ``git`` failed."""

    def __init__(self, detail: object = "Command failed", *, stderr: str = "") -> None:
        super().__init__(detail)
        self.stderr = stderr