"""Unit data model: one resolved node of the build graph, tagged by kind."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from unitgraph.graph.errors import UninitializedUnitError, UnsupportedVariantError

if TYPE_CHECKING:
    from unitgraph.build.context import CompileStep, LazyPath, Module, Options, Package
    from unitgraph.graph.resolver import UnitSet


class UnitKind(enum.Enum):
    """Tag of a unit's data variant."""

    TEST = "Test"
    MODULE = "Module"
    LIBRARY = "Library"
    BINARY = "Binary"
    DEPENDENCY = "Dependency"
    CONFIG = "Config"
    FILE = "File"
    UNINIT = "Uninit"


# ---------------------------------------------------------------------------
# Data variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class TestData:
    compile: CompileStep
    kind = UnitKind.TEST
    __test__ = False  # not a pytest class


@dataclass(frozen=True, eq=False)
class ModuleData:
    module: Module
    kind = UnitKind.MODULE


@dataclass(frozen=True, eq=False)
class LibraryData:
    compile: CompileStep
    kind = UnitKind.LIBRARY


@dataclass(frozen=True, eq=False)
class BinaryData:
    compile: CompileStep
    kind = UnitKind.BINARY


@dataclass(frozen=True, eq=False)
class DependencyData:
    """A module exposed by an external package."""

    module: Module
    package: Package
    kind = UnitKind.DEPENDENCY


@dataclass(frozen=True, eq=False)
class ConfigData:
    options: Options
    kind = UnitKind.CONFIG


@dataclass(frozen=True, eq=False)
class FileData:
    path: LazyPath
    kind = UnitKind.FILE


@dataclass(frozen=True)
class UninitData:
    kind = UnitKind.UNINIT


UNINIT = UninitData()

UnitData = (
    TestData
    | ModuleData
    | LibraryData
    | BinaryData
    | DependencyData
    | ConfigData
    | FileData
    | UninitData
)

LINKABLE_KINDS: frozenset[UnitKind] = frozenset(
    {UnitKind.TEST, UnitKind.MODULE, UnitKind.LIBRARY, UnitKind.BINARY}
)


# ---------------------------------------------------------------------------
# Unit
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Unit:
    """A named graph node owned by exactly one :class:`UnitSet`.

    ``data`` starts as :data:`UNINIT` for manifest nodes and is assigned a
    concrete variant exactly once by the resolver.
    """

    set: UnitSet
    name: str
    data: UnitData = UNINIT
    dependencies: tuple[str, ...] = field(default_factory=tuple)

    @property
    def kind(self) -> UnitKind:
        return self.data.kind

    def is_linkable(self) -> bool:
        return self.data.kind in LINKABLE_KINDS

    def is_uninit(self) -> bool:
        return self.data.kind is UnitKind.UNINIT

    def extract_module(self) -> Module:
        """Return the module handle import edges attach to."""
        data = self.data
        if isinstance(data, ModuleData):
            return data.module
        if isinstance(data, (TestData, LibraryData, BinaryData)):
            return data.compile.root_module
        if isinstance(data, UninitData):
            raise UninitializedUnitError(self.name, "module extraction")
        raise UnsupportedVariantError(self.name, data.kind.value, "module")

    def extract_step(self) -> CompileStep:
        """Return the compile step that builds this unit."""
        data = self.data
        if isinstance(data, (TestData, LibraryData, BinaryData)):
            return data.compile
        if isinstance(data, UninitData):
            raise UninitializedUnitError(self.name, "step extraction")
        raise UnsupportedVariantError(self.name, data.kind.value, "build step")

    def describe(self) -> str:
        lines = [f"name: {self.name},", f"data: {self.kind.value},", "dependencies:"]
        lines.extend(f"  {dep}" for dep in self.dependencies)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Unit({self.name!r}, {self.kind.value})"
