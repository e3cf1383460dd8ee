"""Graph domain — unit model, resolver, meta strategies and code generation pipelines."""

from unitgraph.graph.errors import (
    DependencyNotFoundError,
    DuplicateUnitError,
    MissingPackageError,
    MissingUnitError,
    NativeTargetMismatchError,
    NodeNotFoundError,
    UninitializedUnitError,
    UnitGraphError,
    UnsupportedVariantError,
    WrongUnitKindError,
)
from unitgraph.graph.headers import (
    HEADER_GEN_PREFIX,
    HEADER_PREFIX,
    header_gen_unit_name,
    header_unit_name,
    is_header_file_name,
    make_header_file_name,
)
from unitgraph.graph.meta import (
    NATIVE,
    GenerativeInput,
    GenerativeMeta,
    NativeInput,
    NativeMeta,
)
from unitgraph.graph.render import format_json, format_mermaid, format_text
from unitgraph.graph.resolver import BuildDetails, UnitSet
from unitgraph.graph.templating import (
    TEMPLATE_SUFFIX,
    TEMPLATER_PREFIX,
    extract_file_name,
    templater_unit_name,
)
from unitgraph.graph.units import Unit, UnitKind

__all__ = [
    "HEADER_GEN_PREFIX",
    "HEADER_PREFIX",
    "NATIVE",
    "TEMPLATER_PREFIX",
    "TEMPLATE_SUFFIX",
    "BuildDetails",
    "DependencyNotFoundError",
    "DuplicateUnitError",
    "GenerativeInput",
    "GenerativeMeta",
    "MissingPackageError",
    "MissingUnitError",
    "NativeInput",
    "NativeMeta",
    "NativeTargetMismatchError",
    "NodeNotFoundError",
    "UninitializedUnitError",
    "Unit",
    "UnitGraphError",
    "UnitKind",
    "UnitSet",
    "UnsupportedVariantError",
    "WrongUnitKindError",
    "extract_file_name",
    "format_json",
    "format_mermaid",
    "format_text",
    "header_gen_unit_name",
    "header_unit_name",
    "is_header_file_name",
    "make_header_file_name",
    "templater_unit_name",
]
