"""Tests for gauntlet.core.di module."""

from __future__ import annotations

import types
from unittest.mock import MagicMock

import pytest

from gauntlet.core.di import PackageWiring


@pytest.fixture
def package_wiring(monkeypatch: pytest.MonkeyPatch) -> PackageWiring:
    monkeypatch.setattr(PackageWiring, "install", lambda self: None)
    return PackageWiring()


class TestPackageWiring(object):
    def test_only_modules_under_the_package_are_wired(self, package_wiring: PackageWiring) -> None:
        container = MagicMock()
        package_wiring.register([container], ["gauntlet"])

        inside = types.ModuleType("gauntlet.cli.candidate")
        package_wiring.wire_module(inside)
        package_wiring.wire_module(types.ModuleType("gauntlet_plugins.extra"))
        package_wiring.wire_module(types.ModuleType("sqlalchemy.orm"))

        container.wire.assert_called_once_with(modules=[inside])

    def test_registering_twice_wires_once(self, package_wiring: PackageWiring) -> None:
        container = MagicMock()
        package_wiring.register([container], ["gauntlet"])
        package_wiring.register([container], ["gauntlet"])

        package_wiring.wire_module(types.ModuleType("gauntlet"))

        assert container.wire.call_count == 1
