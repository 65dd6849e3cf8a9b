"""CLI package for running and querying the voltage telemetry gateway."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    # ``cli.app`` stays the module so tests can patch ``cli.app.ApiClient``.
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)


__all__ = []
