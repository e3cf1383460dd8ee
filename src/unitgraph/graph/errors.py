"""Exceptions raised while building a unit graph.

Every failure aborts graph construction; there is no partial graph.
"""

from __future__ import annotations


class UnitGraphError(Exception):
    """Base class for unit graph failures."""


class NodeNotFoundError(UnitGraphError, LookupError):
    """A referenced name is absent from the manifest."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"cannot find manifest node '{name}'")


class DuplicateUnitError(UnitGraphError):
    """The same unit name was materialized twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unit '{name}' already exists")


class WrongUnitKindError(UnitGraphError, TypeError):
    """A kind-specific accessor was used on a unit of another kind."""

    def __init__(self, name: str, expected: str, actual: str) -> None:
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected unit '{name}' to be {expected}, got {actual}")


class UninitializedUnitError(UnitGraphError):
    """An ``Uninit`` placeholder reached linking or extraction."""

    def __init__(self, name: str, context: str | None = None) -> None:
        self.name = name
        msg = f"unit '{name}' is uninitialized"
        if context:
            msg = f"{msg} ({context})"
        super().__init__(msg)


class DependencyNotFoundError(UnitGraphError, LookupError):
    """A declared dependency name could not be resolved."""

    def __init__(self, dependency: str, owner: str) -> None:
        self.dependency = dependency
        self.owner = owner
        super().__init__(f"cannot find dependency '{dependency}' for unit '{owner}'")


class UnsupportedVariantError(UnitGraphError, TypeError):
    """A module or step was requested from a kind that has none."""

    def __init__(self, name: str, kind: str, representation: str) -> None:
        self.name = name
        self.kind = kind
        super().__init__(f"unit '{name}' of kind {kind} has no {representation}")


class MissingUnitError(UnitGraphError, LookupError):
    """An accessor was asked for a unit the set never created."""

    def __init__(self, name: str, expected: str = "unit") -> None:
        self.name = name
        super().__init__(f"cannot find {expected} unit '{name}'")


class MissingPackageError(UnitGraphError, LookupError):
    """An accessor was asked for a package the set never resolved."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"cannot find package '{name}'")


class NativeTargetMismatchError(UnitGraphError, AssertionError):
    """A Native-meta set was asked to target something other than the host."""

    def __init__(self, set_name: str, triple: str, host: str) -> None:
        self.triple = triple
        self.host = host
        super().__init__(
            f"set '{set_name}' uses native meta but targets '{triple}', host is '{host}'"
        )
