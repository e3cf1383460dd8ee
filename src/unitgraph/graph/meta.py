"""Meta/bootstrap strategies that supply host-runnable auxiliary tools.

A set either builds the tools itself from the bootstrap package
(:class:`NativeMeta`, host-targeted sets only) or forwards every request to
an already built host set (:class:`GenerativeMeta`).  Call sites only use
the shared capability methods and never branch on the strategy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from unitgraph.build.bootstrap import BOOTSTRAP_PACKAGE, LIB_JOINER, TEMPLATER, make_header_gen
from unitgraph.build.context import OptimizeMode
from unitgraph.graph.errors import (
    NodeNotFoundError,
    UninitializedUnitError,
    WrongUnitKindError,
)
from unitgraph.graph.headers import header_gen_unit_name
from unitgraph.graph.templating import templater_unit_name
from unitgraph.graph.units import BinaryData, UnitKind

if TYPE_CHECKING:
    from unitgraph.build.context import BuildContext, CompileStep, Package
    from unitgraph.graph.resolver import UnitSet
    from unitgraph.graph.units import Unit

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Construction inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NativeInput:
    """Request the bootstrap package built for the host."""


@dataclass(frozen=True)
class GenerativeInput:
    """Request delegation to an existing host-targeted set."""

    delegate: UnitSet


NATIVE = NativeInput()

MetaInput = NativeInput | GenerativeInput


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class NativeMeta:
    """Tools come from the bootstrap package resolved for the host triple."""

    package: Package

    @property
    def label(self) -> str:
        return f"Native({self.package.name})"

    def get_templater(self, owner: UnitSet) -> CompileStep:
        return self.package.artifact(TEMPLATER)

    def get_lib_joiner(self, owner: UnitSet) -> CompileStep:
        return self.package.artifact(LIB_JOINER)

    def acquire_templater_binary(self, owner: UnitSet, name: str) -> CompileStep:
        unit_name = templater_unit_name(name)
        try:
            unit = owner.acquire(unit_name)
        except NodeNotFoundError:
            logger.error("cannot find template parameter unit '%s'", unit_name)
            raise

        if unit.is_uninit():
            raise UninitializedUnitError(unit_name, "template parameter")
        if not isinstance(unit.data, BinaryData):
            logger.error(
                "expected template parameter unit '%s' to be a binary, got %s",
                unit_name,
                unit.kind.value,
            )
            raise WrongUnitKindError(unit_name, UnitKind.BINARY.value, unit.kind.value)
        return unit.data.compile

    def create_header_gen(self, owner: UnitSet, source: Unit) -> Unit:
        src = source
        if source.set is not owner:
            # Rebuild the source here so the generator links against a host module.
            try:
                src = owner.acquire(source.name)
            except NodeNotFoundError:
                logger.error("cannot find meta source unit '%s'", source.name)
                raise

        name = header_gen_unit_name(source.name)
        existing = owner.find_unit(name)
        if existing is not None:
            return existing

        module = src.extract_module()
        return owner.create_unit(
            name=name,
            data=BinaryData(make_header_gen(owner.ctx, self.package, module, name=name)),
        )


@dataclass(eq=False)
class GenerativeMeta:
    """Every tool request is answered by the delegate set."""

    delegate: UnitSet

    @property
    def label(self) -> str:
        return f"Generative({self.delegate.name})"

    def get_templater(self, owner: UnitSet) -> CompileStep:
        return self.delegate.get_templater()

    def get_lib_joiner(self, owner: UnitSet) -> CompileStep:
        return self.delegate.get_lib_joiner()

    def acquire_templater_binary(self, owner: UnitSet, name: str) -> CompileStep:
        return self.delegate.acquire_templater_binary(name)

    def create_header_gen(self, owner: UnitSet, source: Unit) -> Unit:
        return self.delegate.create_header_gen(source)


Meta = NativeMeta | GenerativeMeta


def select_meta(ctx: BuildContext, meta_input: MetaInput) -> Meta:
    """Turn a construction request into a strategy."""
    if isinstance(meta_input, GenerativeInput):
        return GenerativeMeta(delegate=meta_input.delegate)
    package = ctx.dependency(BOOTSTRAP_PACKAGE, target=ctx.host, optimize=OptimizeMode.DEBUG)
    return NativeMeta(package=package)
