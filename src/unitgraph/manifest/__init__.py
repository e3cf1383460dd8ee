"""Manifest domain — node records, package table and YAML loader."""

from unitgraph.manifest.loader import (
    BuildDefaults,
    ManifestError,
    ManifestFile,
    load_manifest,
    parse_manifest,
    parse_node,
)
from unitgraph.manifest.model import (
    Manifest,
    ManifestNode,
    NodeKind,
    TemplateData,
    Visibility,
)
from unitgraph.manifest.packages import (
    ConfigSpec,
    PackageEntry,
    PackageSpec,
    PackageTable,
    config_unit_name,
    dependency_unit_name,
    parse_package_table,
)

__all__ = [
    "BuildDefaults",
    "ConfigSpec",
    "Manifest",
    "ManifestError",
    "ManifestFile",
    "ManifestNode",
    "NodeKind",
    "PackageEntry",
    "PackageSpec",
    "PackageTable",
    "TemplateData",
    "Visibility",
    "config_unit_name",
    "dependency_unit_name",
    "load_manifest",
    "parse_manifest",
    "parse_node",
    "parse_package_table",
]
