"""Output formats for a resolved unit set."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from unitgraph.graph.resolver import UnitSet

_MERMAID_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_]")


def format_text(unit_set: UnitSet) -> str:
    """Plain listing of the set: configuration, units, tests and files."""
    return unit_set.describe()


def format_json(unit_set: UnitSet, *, steps: bool = False) -> str:
    """JSON document of the set, optionally with every declared build step."""
    data = unit_set.to_dict()
    if steps:
        data["build"] = unit_set.ctx.to_dict()
    return json.dumps(data, ensure_ascii=False, indent=2, default=str)


def _mermaid_id(name: str) -> str:
    return _MERMAID_UNSAFE_RE.sub("_", name) or "_"


def format_mermaid(unit_set: UnitSet) -> str:
    """Mermaid flowchart with one ``A --> B`` edge per declared dependency.

    Only dependencies that exist in this set are drawn; header units that
    point at a generator living in a delegate set keep just the local edge.
    """
    lines = ["graph LR"]
    for unit in unit_set.units.values():
        node_id = _mermaid_id(unit.name)
        lines.append(f'    {node_id}["{unit.name} ({unit.kind.value})"]')
    for unit in unit_set.units.values():
        for dep in unit.dependencies:
            if dep in unit_set.units:
                lines.append(f"    {_mermaid_id(unit.name)} --> {_mermaid_id(dep)}")
    return "\n".join(lines)
