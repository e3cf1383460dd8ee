"""Package table: external packages and configuration bags seeded as leaf units."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PackageSpec:
    """An external package and the modules it exposes.

    An empty ``modules`` tuple means the package exposes a single module
    named after the package itself.
    """

    modules: tuple[str, ...] = ()
    parameters: dict[str, Any] = field(default_factory=dict)

    def module_names(self, package_name: str) -> tuple[str, ...]:
        return self.modules or (package_name,)


@dataclass(frozen=True)
class ConfigSpec:
    """A plain bag of build options, injected into dependents as configuration."""

    values: dict[str, Any] = field(default_factory=dict)


PackageEntry = PackageSpec | ConfigSpec

PackageTable = dict[str, PackageEntry]


def dependency_unit_name(package_name: str, module_name: str) -> str:
    """Leaf unit name for *module_name* of *package_name*.

    ``":pkg"`` when the module is named after its package, else ``":pkg:module"``.
    """
    if package_name == module_name:
        return f":{package_name}"
    return f":{package_name}:{module_name}"


def config_unit_name(package_name: str) -> str:
    return f":{package_name}"


def parse_package_table(data: object) -> PackageTable:
    """Parse the ``packages:`` mapping of a manifest file.

    Each entry is either ``{options: {...}}`` (a configuration bag) or
    ``{modules: [...], parameters: {...}}``; a null entry is a package with
    default modules.
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = "'packages' must be a mapping of package name to entry"
        raise ValueError(msg)

    table: PackageTable = {}
    for name, entry in data.items():
        package_name = str(name)
        if entry is None:
            table[package_name] = PackageSpec()
            continue
        if not isinstance(entry, dict):
            msg = f"package '{package_name}': entry must be a mapping"
            raise ValueError(msg)

        if "options" in entry:
            if set(entry) - {"options"}:
                msg = f"package '{package_name}': an options entry cannot declare modules"
                raise ValueError(msg)
            options = entry["options"] or {}
            if not isinstance(options, dict):
                msg = f"package '{package_name}': 'options' must be a mapping"
                raise ValueError(msg)
            table[package_name] = ConfigSpec(values=dict(options))
            continue

        modules_raw = entry.get("modules") or []
        if isinstance(modules_raw, str):
            modules_raw = [modules_raw]
        if not isinstance(modules_raw, list):
            msg = f"package '{package_name}': 'modules' must be a list"
            raise ValueError(msg)
        parameters = entry.get("parameters") or {}
        if not isinstance(parameters, dict):
            msg = f"package '{package_name}': 'parameters' must be a mapping"
            raise ValueError(msg)
        table[package_name] = PackageSpec(
            modules=tuple(str(m) for m in modules_raw),
            parameters=dict(parameters),
        )
    return table
