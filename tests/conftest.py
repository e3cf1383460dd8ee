"""Shared test fixtures for unitgraph."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from unitgraph.build.context import BuildContext
from unitgraph.manifest.model import Manifest, ManifestNode, NodeKind, TemplateData, Visibility

if TYPE_CHECKING:
    from pathlib import Path

HOST = "x86_64-linux"
CROSS = "aarch64-linux"


@pytest.fixture()
def ctx(tmp_path: Path) -> BuildContext:
    """A build context rooted in a temp dir with a pinned host triple."""
    return BuildContext(tmp_path, host_triple=HOST)


def node(
    name: str,
    kind: NodeKind = NodeKind.MODULE,
    *,
    deps: tuple[str, ...] = (),
    path: str | None = None,
    vis: Visibility = Visibility.PRIVATE,
    template: TemplateData | None = None,
    tests: bool = False,
    header_gen: bool = False,
) -> ManifestNode:
    """Build a manifest node with a path derived from its name."""
    return ManifestNode(
        name=name,
        path=path or f"src/{name.replace(':', '_')}",
        kind=kind,
        dependencies=deps,
        vis=vis,
        template_data=template,
        has_tests=tests,
        has_header_gen_data=header_gen,
    )


def manifest(*nodes: ManifestNode) -> Manifest:
    return Manifest.of(*nodes)
