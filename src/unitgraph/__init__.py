"""unitgraph: resolve build manifests into unit graphs with host-side code generation."""

__version__ = "0.4.0"
