"""Check registry tests."""

from __future__ import annotations

import pytest
from sysverify.checks import (
    CheckBase,
    CheckRegistry,
    CheckRegistryError,
    DuplicateCheckTypeError,
    UnknownCheckTypeError,
    build_default_registry,
    default_registry,
)


class _NamedCheck(CheckBase):
    def __init__(self, label: str = "first") -> None:
        super().__init__("named")
        self.label = label

    def configure(self, args) -> None:
        return None

    def execute(self) -> None:
        self._set_passed(True)


def test_construct_returns_fresh_instances() -> None:
    registry = CheckRegistry()
    registry.register("named", _NamedCheck)

    first = registry.construct("named")
    second = registry.construct("named")

    assert isinstance(first, _NamedCheck)
    assert first is not second
    assert "named" in registry
    assert len(registry) == 1


def test_duplicate_registration_is_rejected_by_default() -> None:
    registry = CheckRegistry()
    registry.register("named", _NamedCheck)

    with pytest.raises(DuplicateCheckTypeError, match="already registered"):
        registry.register("named", _NamedCheck)


def test_overwrite_mode_replaces_factory() -> None:
    registry = CheckRegistry(allow_overwrite=True)
    registry.register("named", _NamedCheck)
    registry.register("named", lambda: _NamedCheck("second"))

    check = registry.construct("named")

    assert isinstance(check, _NamedCheck)
    assert check.label == "second"


def test_unknown_type_raises_registry_error() -> None:
    registry = CheckRegistry()

    with pytest.raises(UnknownCheckTypeError, match="unknown check type 'missing'"):
        registry.construct("missing")
    assert issubclass(UnknownCheckTypeError, CheckRegistryError)


def test_frozen_registry_rejects_registration() -> None:
    registry = CheckRegistry().freeze()

    assert registry.frozen is True
    with pytest.raises(CheckRegistryError, match="frozen"):
        registry.register("named", _NamedCheck)


def test_default_registry_holds_every_builtin_type() -> None:
    registry = default_registry()
    names = set(registry.names())

    assert registry.frozen is True
    assert {"shell-operation", "shell-operation-error"} <= names
    assert {"all-commands", "any-command", "one-command", "no-commands"} <= names
    assert {"file-exists", "file-does-not-exist"} <= names
    assert {"all-files", "any-file", "one-file", "no-files"} <= names
    for manager in ("yum", "dpkg", "brew", "pacman", "pip", "gem"):
        assert f"{manager}-installed" in names
        assert f"{manager}-not-installed" in names
        for policy in ("all", "any", "one", "none"):
            assert f"{manager}-group-{policy}" in names
    assert "compile-gcc-auto" in names
    assert "run-program-toolchain-gccgo-v2" in names
    assert "compile-python-system" in names
    assert len(registry) == 66


def test_built_registries_are_isolated() -> None:
    first = build_default_registry()
    second = build_default_registry()

    first.register("named", _NamedCheck)

    assert "named" in first
    assert "named" not in second
    assert list(first) == sorted(first.names())
