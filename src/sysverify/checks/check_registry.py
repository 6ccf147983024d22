"""Mapping from check type names to check constructors."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator

from .check_lifecycle import Check

logger = logging.getLogger(__name__)

CheckFactory = Callable[[], Check]


class CheckRegistryError(Exception):
    """Base error for check registry problems."""


class UnknownCheckTypeError(CheckRegistryError):
    """Raised when no constructor is registered for a type name."""


class DuplicateCheckTypeError(CheckRegistryError):
    """Raised when a type name is registered twice."""


class CheckRegistry:
    """Write-once-per-key registry of check constructors.

    Registration happens before any concurrent execution starts; ``freeze`` closes the
    registry so later registrations fail loudly. Lookups take no lock.
    """

    def __init__(self, *, allow_overwrite: bool = False) -> None:
        self._factories: dict[str, CheckFactory] = {}
        self._allow_overwrite = allow_overwrite
        self._frozen = False
        self._write_lock = threading.Lock()

    def register(self, name: str, factory: CheckFactory) -> None:
        if not name:
            raise CheckRegistryError("check type name must not be empty")
        with self._write_lock:
            if self._frozen:
                raise CheckRegistryError(
                    f"cannot register check type '{name}': registry is frozen"
                )
            if name in self._factories:
                if not self._allow_overwrite:
                    raise DuplicateCheckTypeError(f"check type '{name}' is already registered")
                logger.warning("overwriting existing check factory named '%s'", name)
            self._factories[name] = factory

    def freeze(self) -> CheckRegistry:
        with self._write_lock:
            self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def factory(self, name: str) -> CheckFactory:
        try:
            return self._factories[name]
        except KeyError:
            raise UnknownCheckTypeError(f"unknown check type '{name}'") from None

    def construct(self, name: str) -> Check:
        """Return a fresh, default-valued check of the named type."""
        return self.factory(name)()

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._factories))

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._factories)
