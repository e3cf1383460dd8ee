"""Header generation: build a per-unit generator on the host and capture its output."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from unitgraph.build.context import PackageLookupError
from unitgraph.graph.errors import UnitGraphError
from unitgraph.graph.templating import NO_STATIC_FLAG
from unitgraph.graph.units import FileData

if TYPE_CHECKING:
    from unitgraph.graph.resolver import UnitSet
    from unitgraph.graph.units import Unit
    from unitgraph.manifest.model import ManifestNode

logger = logging.getLogger(__name__)

HEADER_PREFIX = "@Header:"
HEADER_GEN_PREFIX = "HeaderGen:"
HEADER_EXTENSION = ".h"


def header_unit_name(name: str) -> str:
    return f"{HEADER_PREFIX}{name}"


def header_gen_unit_name(name: str) -> str:
    return f"{HEADER_GEN_PREFIX}{name}"


def strip_header_prefix(name: str) -> str:
    if name.startswith(HEADER_PREFIX):
        return name[len(HEADER_PREFIX) :]
    return name


def make_header_file_name(name: str) -> str:
    """``"@Header:core"`` and ``"core"`` both become ``"core.h"``."""
    return f"{strip_header_prefix(name)}{HEADER_EXTENSION}"


def is_header_file_name(name: str) -> bool:
    return name.endswith(HEADER_EXTENSION) or name.startswith(HEADER_PREFIX)


def generate_header(unit_set: UnitSet, unit: Unit, node: ManifestNode) -> Unit:
    """Run the header generator for *unit* and record the output as a File unit.

    The generator reads the node's original source path, never the
    template-expanded one.
    """
    try:
        header_gen = unit_set.create_header_gen(unit)
    except (UnitGraphError, PackageLookupError) as exc:
        logger.error("cannot create header generator for unit '%s': %s", node.name, exc)
        raise

    ctx = unit_set.ctx
    run = ctx.add_run_artifact(header_gen.extract_step())
    run.add_file_input(ctx.path(node.path))
    run.add_arg(node.path)
    run.add_arg(NO_STATIC_FLAG)

    name = header_unit_name(node.name)
    output = run.capture_stdout(make_header_file_name(name))

    header_unit = unit_set.create_unit(
        name=name,
        dependencies=(unit.name, header_gen.name),
        data=FileData(output),
    )
    unit_set.files.append(header_unit.name)
    return header_unit
