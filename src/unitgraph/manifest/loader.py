"""YAML manifest parser.

A manifest file has three top-level keys::

    build:
      target: native
      optimize: Debug
      vis: Public
    packages:
      clap: {modules: [clap, args]}
      build_options: {options: {version: "1.0"}}
    nodes:
      - name: core
        path: src/core
        kind: Module
        deps: [":clap"]

Node fields other than ``name``, ``path`` and ``kind`` are optional.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from unitgraph.manifest.model import (
    Manifest,
    ManifestNode,
    NodeKind,
    TemplateData,
    Visibility,
)
from unitgraph.manifest.packages import PackageTable, parse_package_table

if TYPE_CHECKING:
    from pathlib import Path

_NODE_FIELDS = frozenset(
    {"name", "path", "kind", "deps", "dependencies", "vis", "template", "tests", "header_gen"}
)
_BUILD_FIELDS = frozenset(
    {"name", "target", "optimize", "strip", "vis", "tests", "file_gen"}
)


class ManifestError(Exception):
    """Raised when a manifest file is malformed."""


@dataclass(frozen=True)
class BuildDefaults:
    """The ``build:`` section; CLI options override these."""

    name: str = "main"
    target: str | None = None
    optimize: str = "Debug"
    strip: bool = False
    vis: Visibility = Visibility.PUBLIC
    tests: bool = False
    file_gen: bool = False


@dataclass
class ManifestFile:
    """Everything a manifest file declares."""

    manifest: Manifest
    packages: PackageTable = field(default_factory=dict)
    build: BuildDefaults = field(default_factory=BuildDefaults)


def _parse_enum(value: object, enum_cls: type[NodeKind] | type[Visibility], context: str) -> Any:
    for member in enum_cls:
        if str(value).lower() == member.value.lower():
            return member
    msg = f"{context}: invalid value '{value}', must be one of {[m.value for m in enum_cls]}"
    raise ValueError(msg)


def _str_list(value: object, context: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        msg = f"{context}: must be a list"
        raise ValueError(msg)
    return tuple(str(item) for item in value)


def _parse_template(data: object, context: str) -> TemplateData | None:
    if data is None:
        return None
    if not isinstance(data, dict):
        msg = f"{context}: 'template' must be a mapping"
        raise ValueError(msg)
    return TemplateData(
        deps=_str_list(data.get("deps"), f"{context}: template.deps"),
        params=_str_list(data.get("params"), f"{context}: template.params"),
    )


def parse_node(data: dict[str, Any]) -> ManifestNode:
    """Parse one node mapping into a :class:`ManifestNode`."""
    name = data.get("name")
    if not name:
        msg = "node missing 'name'"
        raise ValueError(msg)
    context = f"Node '{name}'"

    unknown = set(data) - _NODE_FIELDS
    if unknown:
        msg = f"{context}: unknown fields {sorted(unknown)}"
        raise ValueError(msg)

    path = data.get("path")
    if not path:
        msg = f"{context}: 'path' is required"
        raise ValueError(msg)
    if "kind" not in data:
        msg = f"{context}: 'kind' is required"
        raise ValueError(msg)

    deps = data.get("deps", data.get("dependencies"))
    return ManifestNode(
        name=str(name),
        path=str(path),
        kind=_parse_enum(data["kind"], NodeKind, context),
        dependencies=_str_list(deps, f"{context}: deps"),
        vis=_parse_enum(data.get("vis", "Private"), Visibility, context),
        template_data=_parse_template(data.get("template"), context),
        has_tests=bool(data.get("tests", False)),
        has_header_gen_data=bool(data.get("header_gen", False)),
    )


def _parse_build(data: object) -> BuildDefaults:
    if data is None:
        return BuildDefaults()
    if not isinstance(data, dict):
        msg = "'build' must be a mapping"
        raise ValueError(msg)
    unknown = set(data) - _BUILD_FIELDS
    if unknown:
        msg = f"build: unknown fields {sorted(unknown)}"
        raise ValueError(msg)
    target = data.get("target")
    return BuildDefaults(
        name=str(data.get("name", "main")),
        target=str(target) if target is not None else None,
        optimize=str(data.get("optimize", "Debug")),
        strip=bool(data.get("strip", False)),
        vis=_parse_enum(data.get("vis", "Public"), Visibility, "build"),
        tests=bool(data.get("tests", False)),
        file_gen=bool(data.get("file_gen", False)),
    )


def parse_manifest(data: object) -> ManifestFile:
    """Validate a loaded YAML document and build a :class:`ManifestFile`.

    Raises:
        ManifestError: on any structural problem, including duplicate names.
    """
    if data is None:
        return ManifestFile(manifest=Manifest())
    if not isinstance(data, dict):
        msg = "manifest must be a mapping"
        raise ManifestError(msg)

    raw_nodes = data.get("nodes") or []
    if not isinstance(raw_nodes, list):
        msg = "'nodes' must be a list"
        raise ManifestError(msg)

    try:
        nodes: list[ManifestNode] = []
        for idx, raw in enumerate(raw_nodes):
            if not isinstance(raw, dict):
                msg = f"node at index {idx} must be a mapping"
                raise ValueError(msg)
            nodes.append(parse_node(raw))
        manifest = Manifest.of(*nodes)
        packages = parse_package_table(data.get("packages"))
        build = _parse_build(data.get("build"))
    except ValueError as exc:
        msg = f"Invalid manifest: {exc}"
        raise ManifestError(msg) from exc

    return ManifestFile(manifest=manifest, packages=packages, build=build)


def load_manifest(path: Path) -> ManifestFile:
    """Read and parse a YAML manifest file."""
    try:
        text = path.read_text(encoding="utf-8")
        data = yaml.safe_load(text)
    except OSError as exc:
        msg = f"Cannot read manifest {path}: {exc}"
        raise ManifestError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"Cannot parse manifest {path}: {exc}"
        raise ManifestError(msg) from exc
    return parse_manifest(data)
