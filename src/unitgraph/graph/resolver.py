"""Unit graph resolver: memoized, lazily materializing build graph.

A :class:`UnitSet` is built once per (target, optimize, test mode)
configuration with :meth:`UnitSet.init`, which runs two passes:

1. Materialize every manifest node with :meth:`UnitSet.acquire`.  Each node
   is inserted as an ``Uninit`` placeholder before anything else is
   computed, so self references made while wiring its own template or
   header steps hit the memo table instead of recursing.
2. Link every linkable unit to its declared dependencies, materializing
   names that were only referenced and never declared at top level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from unitgraph.build.context import OptimizeMode, Target
from unitgraph.graph.errors import (
    DependencyNotFoundError,
    DuplicateUnitError,
    MissingPackageError,
    MissingUnitError,
    NativeTargetMismatchError,
    NodeNotFoundError,
    UninitializedUnitError,
    WrongUnitKindError,
)
from unitgraph.graph.headers import generate_header, header_unit_name
from unitgraph.graph.meta import NATIVE, NativeInput, select_meta
from unitgraph.graph.templating import expand_template
from unitgraph.graph.units import (
    UNINIT,
    BinaryData,
    ConfigData,
    DependencyData,
    FileData,
    LibraryData,
    ModuleData,
    TestData,
    Unit,
    UnitKind,
    UninitData,
)
from unitgraph.manifest.model import NodeKind, Visibility
from unitgraph.manifest.packages import (
    ConfigSpec,
    config_unit_name,
    dependency_unit_name,
)

if TYPE_CHECKING:
    from unitgraph.build.context import (
        BuildContext,
        CompileStep,
        LazyPath,
        Module,
        Options,
        Package,
    )
    from unitgraph.graph.meta import Meta, MetaInput
    from unitgraph.graph.units import UnitData
    from unitgraph.manifest.model import Manifest, ManifestNode
    from unitgraph.manifest.packages import PackageTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildDetails:
    """Configuration a set is constructed for."""

    meta: MetaInput = NATIVE
    vis: Visibility = Visibility.PUBLIC
    target: Target | str | None = None
    optimize: OptimizeMode = OptimizeMode.DEBUG
    strip: bool = False
    file_gen: bool = False
    tests: bool = False


@dataclass(eq=False)
class UnitSet:
    """Owns the name -> unit memo table for one build configuration."""

    ctx: BuildContext
    name: str
    manifest: Manifest
    meta: Meta
    target: Target
    optimize: OptimizeMode
    vis: Visibility = Visibility.PUBLIC
    strip: bool = False
    is_test: bool = False
    file_gen: bool = False
    units: dict[str, Unit] = field(default_factory=dict)
    packages: dict[str, Package] = field(default_factory=dict)
    tests: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def init(
        cls,
        ctx: BuildContext,
        name: str,
        manifest: Manifest,
        packages: PackageTable | None = None,
        details: BuildDetails | None = None,
    ) -> UnitSet:
        """Build and fully link a set.

        Raises:
            NativeTargetMismatchError: Native meta requested for a non-host target.
            NodeNotFoundError, DependencyNotFoundError, DuplicateUnitError,
            UninitializedUnitError, WrongUnitKindError: graph construction failed.
        """
        details = details or BuildDetails()
        target = ctx.resolve_target(details.target)
        if isinstance(details.meta, NativeInput) and target.triple != ctx.host.triple:
            raise NativeTargetMismatchError(name, target.triple, ctx.host.triple)
        meta = select_meta(ctx, details.meta)

        unit_set = cls(
            ctx=ctx,
            name=name,
            manifest=manifest,
            meta=meta,
            target=target,
            optimize=details.optimize,
            vis=details.vis,
            strip=details.strip,
            is_test=details.tests,
            file_gen=details.file_gen,
        )
        logger.debug("building set '%s' for %s with %s", name, target, meta.label)

        unit_set._seed_packages(packages or {})

        for node_name in manifest:
            unit_set.acquire(node_name)

        unit_set._link_all()
        logger.info(
            "set '%s': %d units, %d tests, %d files",
            name,
            len(unit_set.units),
            len(unit_set.tests),
            len(unit_set.files),
        )
        return unit_set

    def _seed_packages(self, packages: PackageTable) -> None:
        for package_name, entry in packages.items():
            if isinstance(entry, ConfigSpec):
                options = self.ctx.add_options(package_name, entry.values)
                self.create_unit(name=config_unit_name(package_name), data=ConfigData(options))
                continue

            package = self.ctx.dependency(
                package_name,
                target=self.target,
                optimize=self.optimize,
                **entry.parameters,
            )
            self.packages[package_name] = package

            for module_name in entry.module_names(package_name):
                self.create_unit(
                    name=dependency_unit_name(package_name, module_name),
                    data=DependencyData(module=package.module(module_name), package=package),
                )

    def _link_all(self) -> None:
        # Every manifest node is materialized by now, so linking adds no units.
        for unit in list(self.units.values()):
            if unit.is_uninit():
                raise UninitializedUnitError(unit.name, "after materialization")
            if unit.is_linkable():
                self.link_dependencies(unit)

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    def create_unit(
        self,
        *,
        name: str,
        data: UnitData = UNINIT,
        dependencies: tuple[str, ...] = (),
    ) -> Unit:
        """Insert a new unit; names are never reused within a set."""
        if name in self.units:
            raise DuplicateUnitError(name)
        unit = Unit(set=self, name=name, data=data, dependencies=tuple(dependencies))
        self.units[name] = unit
        return unit

    def acquire(self, name: str) -> Unit:
        """Return the unit for *name*, materializing it from the manifest once."""
        existing = self.units.get(name)
        if existing is not None:
            return existing

        node = self.manifest.get(name)
        if node is None:
            logger.error("cannot find manifest node '%s' in set '%s'", name, self.name)
            self._log_known_units()
            raise NodeNotFoundError(name)

        unit = self.create_unit(name=node.name, dependencies=node.dependencies)

        path: LazyPath = self.ctx.path(node.path)
        if node.template_data is not None:
            path = expand_template(self, node)

        unit.data = self._build_data(node, path)

        if isinstance(unit.data, TestData):
            self.tests.append(unit.name)

        if self.file_gen and node.has_header_gen_data:
            generate_header(self, unit, node)
        elif isinstance(unit.data, FileData):
            self.files.append(unit.name)

        logger.debug("materialized %s unit '%s'", unit.kind.value, unit.name)
        return unit

    def _build_data(self, node: ManifestNode, path: LazyPath) -> UnitData:
        ctx = self.ctx
        if self.is_test and node.has_tests:
            return TestData(
                ctx.add_test(
                    name=node.name,
                    root_source=path,
                    target=self.target,
                    optimize=self.optimize,
                    strip=self.strip,
                )
            )

        if node.kind is NodeKind.MODULE:
            module = ctx.create_module(
                root_source=path,
                target=self.target,
                optimize=self.optimize,
                strip=self.strip,
            )
            if node.vis.concat(self.vis) is Visibility.PUBLIC:
                ctx.modules[node.name] = module
            return ModuleData(module)

        if node.kind is NodeKind.LIBRARY:
            return LibraryData(
                ctx.add_static_library(
                    name=node.name,
                    root_source=path,
                    target=self.target,
                    optimize=self.optimize,
                    strip=self.strip,
                )
            )

        if node.kind is NodeKind.BINARY:
            return BinaryData(
                ctx.add_executable(
                    name=node.name,
                    root_source=path,
                    target=self.target,
                    optimize=self.optimize,
                    strip=self.strip,
                )
            )

        return FileData(path)

    # ------------------------------------------------------------------
    # Linking
    # ------------------------------------------------------------------

    def link_dependencies(self, unit: Unit) -> None:
        """Attach import and option edges for every declared dependency of *unit*."""
        module = unit.extract_module()
        for dep_name in unit.dependencies:
            try:
                dep = self.acquire(dep_name)
            except NodeNotFoundError as exc:
                logger.error("cannot find dependency '%s' for unit '%s'", dep_name, unit.name)
                raise DependencyNotFoundError(dep_name, unit.name) from exc

            data = dep.data
            if isinstance(data, TestData):
                module.add_import(dep.name, data.compile.root_module)
            elif isinstance(data, ModuleData):
                module.add_import(dep.name, data.module)
            elif isinstance(data, DependencyData):
                module.add_import(dep.name, data.module)
            elif isinstance(data, ConfigData):
                module.add_options(dep.name, data.options)
            elif isinstance(data, UninitData):
                logger.error(
                    "cannot link uninitialized dependency '%s' for unit '%s'",
                    dep.name,
                    unit.name,
                )
                raise UninitializedUnitError(dep.name, f"dependency of '{unit.name}'")
            # Library, Binary and File dependencies only order build steps.

    def _log_known_units(self) -> None:
        logger.info("  available units were:")
        for unit_name in self.units:
            logger.info("    %s", unit_name)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_unit(self, name: str) -> Unit | None:
        return self.units.get(name)

    def get_unit(self, name: str) -> Unit:
        unit = self.units.get(name)
        if unit is None:
            logger.error("cannot find unit '%s'", name)
            raise MissingUnitError(name)
        return unit

    def _get_data(self, name: str, kind: UnitKind) -> Any:
        unit = self.units.get(name)
        if unit is None:
            logger.error("cannot find %s unit '%s'", kind.value.lower(), name)
            raise MissingUnitError(name, kind.value.lower())
        if unit.kind is not kind:
            logger.error(
                "expected unit '%s' to be a %s, got %s",
                name,
                kind.value.lower(),
                unit.kind.value,
            )
            raise WrongUnitKindError(name, kind.value, unit.kind.value)
        return unit.data

    def get_file(self, name: str) -> LazyPath:
        data: FileData = self._get_data(name, UnitKind.FILE)
        return data.path

    def get_header(self, name: str) -> LazyPath:
        """Generated header for the unit called *name*."""
        return self.get_file(header_unit_name(name))

    def get_test(self, name: str) -> CompileStep:
        data: TestData = self._get_data(name, UnitKind.TEST)
        return data.compile

    def get_module(self, name: str) -> Module:
        data: ModuleData = self._get_data(name, UnitKind.MODULE)
        return data.module

    def get_binary(self, name: str) -> CompileStep:
        data: BinaryData = self._get_data(name, UnitKind.BINARY)
        return data.compile

    def get_library(self, name: str) -> CompileStep:
        data: LibraryData = self._get_data(name, UnitKind.LIBRARY)
        return data.compile

    def get_dependency(self, name: str) -> DependencyData:
        data: DependencyData = self._get_data(name, UnitKind.DEPENDENCY)
        return data

    def get_config(self, name: str) -> Options:
        data: ConfigData = self._get_data(name, UnitKind.CONFIG)
        return data.options

    def get_package(self, name: str) -> Package:
        package = self.packages.get(name)
        if package is None:
            logger.error("cannot find package '%s'", name)
            raise MissingPackageError(name)
        return package

    # ------------------------------------------------------------------
    # Host tools (delegated to the meta strategy)
    # ------------------------------------------------------------------

    def get_templater(self) -> CompileStep:
        return self.meta.get_templater(self)

    def get_lib_joiner(self) -> CompileStep:
        return self.meta.get_lib_joiner(self)

    def acquire_templater_binary(self, name: str) -> CompileStep:
        """Binary for template parameter *name* (manifest node ``Templater:<name>``)."""
        return self.meta.acquire_templater_binary(self, name)

    def create_header_gen(self, source: Unit) -> Unit:
        """Host-built header generator unit for *source*, memoized per unit name."""
        return self.meta.create_header_gen(self, source)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def describe(self) -> str:
        lines = [
            f"meta: {self.meta.label},",
            f"vis: {self.vis.value},",
            f"target: {self.target.triple},",
            f"optimize: {self.optimize.value},",
            f"strip: {str(self.strip).lower()},",
            "units:",
        ]
        for unit in self.units.values():
            lines.append(f"  {unit.kind.value} {unit.name}:")
            lines.append("    dependencies:")
            lines.extend(f"      {dep}" for dep in unit.dependencies)
        lines.append("tests:")
        lines.extend(f"  {name}" for name in self.tests)
        lines.append("files:")
        lines.extend(f"  {name}" for name in self.files)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "meta": self.meta.label,
            "vis": self.vis.value,
            "target": self.target.triple,
            "optimize": self.optimize.value,
            "strip": self.strip,
            "units": [
                {
                    "name": unit.name,
                    "kind": unit.kind.value,
                    "dependencies": list(unit.dependencies),
                }
                for unit in self.units.values()
            ],
            "tests": list(self.tests),
            "files": list(self.files),
        }
