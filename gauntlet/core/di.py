from __future__ import annotations

__all__ = [
    "Manage",
    "Provide",
    "as_",
    "inject",
    "register_loader_containers",
]

import functools
import importlib.machinery
import sys
import types
import typing as t

import dependency_injector.wiring as wiring
from dependency_injector.containers import Container
from dependency_injector.providers import Provider
from dependency_injector.wiring import Closing, Provide, TypeModifier

P = t.ParamSpec("P")
TReturn = t.TypeVar("TReturn")
TAs = t.TypeVar("TAs")
T = t.TypeVar("T")


def inject(fn: t.Callable[P, TReturn]) -> t.Callable[P, TReturn]:
    reference_injections, reference_closing = wiring._fetch_reference_injections(fn)  # pyright: ignore [reportPrivateUsage] noqa: E501
    patched = wiring._get_patched(fn, reference_injections, reference_closing)  # pyright: ignore [reportPrivateUsage] noqa: E501

    # route handlers keep their module globals so that pydantic can resolve
    # forward references in request/response annotations
    if fn.__module__.startswith("gauntlet.web") and hasattr(fn, "__globals__"):
        return functools.wraps(fn, updated=("__globals__",))(patched)
    return patched


class Manage(object):
    """`Closing[Provide[...]]` shorthand for sessions and other released dependencies."""

    def __new__(cls, provider: Provider[T] | Container | str):
        return Closing[Provide[provider]]

    @classmethod
    def __class_getitem__(cls, item: Provider[T] | Container | str):
        return cls(item)


def as_(type_: t.Type[TAs]) -> TypeModifier:
    # wiring.as_ is not generic, so settings injected through it lose their type
    return TypeModifier(type_)


class PackageWiring(object):
    """Import hook that wires the booted containers into gauntlet modules loaded later.

    The CLI imports its command modules on demand, after the container has
    booted; each one is wired as it is executed.
    """

    def __init__(self) -> None:
        self.containers: dict[str, list[Container]] = {}
        self._path_hook: t.Callable[[str], t.Any] | None = None

    def register(self, containers: t.Sequence[Container], packages: t.Sequence[str]) -> None:
        for package in packages:
            registered = self.containers.setdefault(package, [])
            registered.extend(c for c in containers if c not in registered)
        self.install()

    def wire_module(self, module: types.ModuleType) -> None:
        for package, registered in self.containers.items():
            if module.__name__ == package or module.__name__.startswith(f"{package}."):
                for container in registered:
                    container.wire(modules=[module])

    def install(self) -> None:
        if self._path_hook is not None and self._path_hook in sys.path_hooks:
            return

        hook = self

        class SourceFileLoader(importlib.machinery.SourceFileLoader):
            def exec_module(self, module: types.ModuleType):
                super().exec_module(module)
                hook.wire_module(module)

        class SourcelessFileLoader(importlib.machinery.SourcelessFileLoader):
            def exec_module(self, module: types.ModuleType):
                super().exec_module(module)
                hook.wire_module(module)

        self._path_hook = importlib.machinery.FileFinder.path_hook(
            (importlib.machinery.ExtensionFileLoader, importlib.machinery.EXTENSION_SUFFIXES),
            (SourceFileLoader, importlib.machinery.SOURCE_SUFFIXES),
            (SourcelessFileLoader, importlib.machinery.BYTECODE_SUFFIXES),
        )
        sys.path_hooks.insert(0, self._path_hook)
        sys.path_importer_cache.clear()
        importlib.invalidate_caches()


_wiring = PackageWiring()


def register_loader_containers(*containers: Container, packages: t.Sequence[str]) -> None:
    """Wire `containers` into modules under `packages` as they are imported."""
    _wiring.register(containers, packages)
