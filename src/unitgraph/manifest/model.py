"""Manifest node records consumed by the unit graph resolver."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class NodeKind(enum.Enum):
    """What a manifest node compiles into."""

    MODULE = "Module"
    LIBRARY = "Library"
    BINARY = "Binary"
    DOCUMENT = "Document"


class Visibility(enum.Enum):
    """Whether a node is exposed to consumers of the finished graph."""

    PUBLIC = "Public"
    PRIVATE = "Private"

    def concat(self, other: Visibility) -> Visibility:
        """Combine node and set visibility; public only when both are public."""
        if self is Visibility.PUBLIC and other is Visibility.PUBLIC:
            return Visibility.PUBLIC
        return Visibility.PRIVATE


@dataclass(frozen=True)
class TemplateData:
    """Inputs of a templated source: tracked file deps and binary parameters."""

    deps: tuple[str, ...] = ()
    params: tuple[str, ...] = ()


@dataclass(frozen=True)
class ManifestNode:
    """One declared source node."""

    name: str
    path: str
    kind: NodeKind
    dependencies: tuple[str, ...] = ()
    vis: Visibility = Visibility.PRIVATE
    template_data: TemplateData | None = None
    has_tests: bool = False
    has_header_gen_data: bool = False


@dataclass
class Manifest:
    """Name-keyed registry of manifest nodes, in declaration order."""

    nodes: dict[str, ManifestNode] = field(default_factory=dict)

    def get(self, name: str) -> ManifestNode | None:
        return self.nodes.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    @classmethod
    def of(cls, *nodes: ManifestNode) -> Manifest:
        """Build a manifest from nodes, rejecting duplicate names."""
        manifest = cls()
        for node in nodes:
            if node.name in manifest.nodes:
                msg = f"duplicate manifest node '{node.name}'"
                raise ValueError(msg)
            manifest.nodes[node.name] = node
        return manifest
