"""Resolution of test declarations into runnable checks indexed by name and suite."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from sysverify.checks import (
    Check,
    CheckParameterError,
    CheckRegistry,
    CheckRegistryError,
    default_registry,
)

from .runtime_settings import ConfigDocument, TestDeclaration

logger = logging.getLogger(__name__)


class ResolutionError(Exception):
    """Raised when one or more declarations did not resolve; carries every cause."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = tuple(errors)
        super().__init__("\n".join(self.errors))


class _DeclarationError(Exception):
    """Internal signal for one declaration that failed to resolve."""


@dataclass(frozen=True)
class SelectedCheck:
    """One selection result: a check, or the reason the selector matched nothing."""

    name: str
    check: Check | None
    error: str | None = None


class ResolvedChecks:
    """Immutable ``name -> check`` and ``suite -> [name]`` indices plus resolution errors."""

    def __init__(
        self,
        tests: Mapping[str, Check],
        suites: Mapping[str, Sequence[str]],
        errors: Sequence[str] = (),
    ) -> None:
        self._tests = MappingProxyType(dict(tests))
        self._suites = MappingProxyType({suite: tuple(names) for suite, names in suites.items()})
        self._errors = tuple(errors)

    @property
    def tests(self) -> Mapping[str, Check]:
        return self._tests

    @property
    def suites(self) -> Mapping[str, tuple[str, ...]]:
        return self._suites

    @property
    def errors(self) -> tuple[str, ...]:
        return self._errors

    @property
    def ok(self) -> bool:
        return not self._errors

    def raise_for_errors(self) -> None:
        if self._errors:
            raise ResolutionError(self._errors)

    def __len__(self) -> int:
        return len(self._tests)

    def tests_by_name(self, *names: str) -> Iterator[SelectedCheck]:
        """Yield one entry per requested name; unknown names carry an error."""
        for name in names:
            check = self._tests.get(name)
            if check is None:
                yield SelectedCheck(name=name, check=None, error=f"no test named '{name}' exists")
                continue
            yield SelectedCheck(name=name, check=check)

    def tests_for_suites(self, *suites: str) -> Iterator[SelectedCheck]:
        """Yield the checks of every requested suite once, even across overlapping suites."""
        seen: set[str] = set()
        for suite in suites:
            names = self._suites.get(suite)
            if names is None:
                yield SelectedCheck(
                    name=suite, check=None, error=f"no suite named '{suite}' exists"
                )
                continue
            for name in names:
                if name in seen:
                    continue
                seen.add(name)
                yield SelectedCheck(name=name, check=self._tests[name])

    def select(
        self, names: Iterable[str] = (), suites: Iterable[str] = ()
    ) -> Iterator[SelectedCheck]:
        """Yield checks chosen by name and by suite, each check at most once."""
        seen: set[str] = set()
        for selected in (*self.tests_by_name(*names), *self.tests_for_suites(*suites)):
            if selected.check is not None:
                if selected.name in seen:
                    continue
                seen.add(selected.name)
            yield selected


def resolve_checks(
    document: ConfigDocument | Iterable[TestDeclaration],
    registry: CheckRegistry | None = None,
) -> ResolvedChecks:
    """Build the check indices, accumulating every declaration error instead of stopping.

    The first successfully resolved declaration of a name wins; later declarations with
    the same name are reported as duplicates.
    """
    resolved_registry = registry or default_registry()
    declarations = tuple(document.tests if isinstance(document, ConfigDocument) else document)

    suites: dict[str, list[str]] = {}
    for declaration in declarations:
        for suite in declaration.suites:
            suites.setdefault(suite, [])

    tests: dict[str, Check] = {}
    errors: list[str] = []
    for declaration in declarations:
        try:
            check = _build_check(declaration, resolved_registry)
        except _DeclarationError as exc:
            errors.append(str(exc))
            continue

        if declaration.name in tests:
            message = f"two tests named '{declaration.name}'"
            logger.warning(message)
            errors.append(message)
            continue

        tests[declaration.name] = check
        for suite in declaration.suites:
            if declaration.name not in suites[suite]:
                suites[suite].append(declaration.name)

    logger.debug("resolved %d of %d test declarations", len(tests), len(declarations))
    return ResolvedChecks(tests=tests, suites=suites, errors=errors)


def _build_check(declaration: TestDeclaration, registry: CheckRegistry) -> Check:
    name = declaration.name
    try:
        check = registry.construct(declaration.check_type)
    except CheckRegistryError as exc:
        raise _DeclarationError(f"test '{name}': {exc}") from exc

    if not isinstance(check, Check):
        raise _DeclarationError(
            f"test '{name}': type '{declaration.check_type}' does not produce a check"
        )

    if declaration.version is not None and declaration.version != check.type_version:
        raise _DeclarationError(
            f"test '{name}': type '{declaration.check_type}' version mismatch "
            f"(declared {declaration.version}, registered {check.type_version})"
        )

    try:
        check.configure(declaration.args or {})
    except (CheckParameterError, TypeError, ValueError) as exc:
        raise _DeclarationError(
            f"problem parsing argument for test '{name}' ({declaration.check_type}): {exc}"
        ) from exc

    check.set_id(name)
    check.set_suites(declaration.suites)
    return check
