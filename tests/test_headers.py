"""Tests for unitgraph.graph.headers — header naming and generation wiring."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from conftest import manifest, node

from unitgraph.build.context import CompileStep, GeneratedPath, OptimizeMode, SourcePath
from unitgraph.graph.errors import UnsupportedVariantError
from unitgraph.graph.headers import (
    HEADER_PREFIX,
    header_unit_name,
    is_header_file_name,
    make_header_file_name,
    strip_header_prefix,
)
from unitgraph.graph.resolver import BuildDetails, UnitSet
from unitgraph.graph.units import UnitKind
from unitgraph.manifest.model import NodeKind, TemplateData

if TYPE_CHECKING:
    from pathlib import Path

    from unitgraph.build.context import BuildContext


class TestHeaderNames:
    @pytest.mark.parametrize("name", ["app", "core:util", "@Header:nested", ""])
    def test_prefix_round_trip(self, name: str) -> None:
        prefixed = header_unit_name(name)
        assert prefixed.startswith(HEADER_PREFIX)
        assert header_unit_name(strip_header_prefix(prefixed)) == prefixed

    def test_file_name_from_unit_name(self) -> None:
        assert make_header_file_name("@Header:app") == "app.h"

    def test_file_name_without_prefix(self) -> None:
        assert make_header_file_name("app") == "app.h"

    def test_is_header_file_name(self) -> None:
        assert is_header_file_name("app.h")
        assert is_header_file_name("@Header:app")
        assert not is_header_file_name("app.hpp")
        assert not is_header_file_name("HeaderGen:app")


class TestHeaderPipeline:
    def test_generator_then_header(self, ctx: BuildContext) -> None:
        s = UnitSet.init(
            ctx,
            "main",
            manifest(node("app", NodeKind.BINARY, header_gen=True)),
            details=BuildDetails(file_gen=True),
        )
        assert list(s.units) == ["app", "HeaderGen:app", "@Header:app"]
        assert s.units["HeaderGen:app"].kind is UnitKind.BINARY
        header = s.units["@Header:app"]
        assert header.kind is UnitKind.FILE
        assert header.dependencies == ("app", "HeaderGen:app")
        assert s.files == ["@Header:app"]

    def test_generator_imports_unit_module(self, ctx: BuildContext) -> None:
        s = UnitSet.init(
            ctx,
            "main",
            manifest(node("core", header_gen=True)),
            details=BuildDetails(file_gen=True),
        )
        generator = s.get_binary("HeaderGen:core")
        assert generator.root_module.imports["Module"] is s.get_module("core")
        assert "HeaderGenUtils" in generator.root_module.imports
        assert generator.target == ctx.host

    def test_header_run_wiring(self, ctx: BuildContext) -> None:
        s = UnitSet.init(
            ctx,
            "main",
            manifest(node("core", header_gen=True)),
            details=BuildDetails(file_gen=True),
        )
        header = s.get_header("core")
        assert isinstance(header, GeneratedPath)
        assert header.basename == "core.h"
        run = header.step
        assert run.artifact is s.get_binary("HeaderGen:core")
        assert run.args == ["src/core", "-no-static"]
        assert run.file_inputs == [SourcePath("src/core")]

    def test_generator_reads_original_source(self, ctx: BuildContext, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "core.template.txt").write_text("x\n")
        s = UnitSet.init(
            ctx,
            "main",
            manifest(
                node(
                    "core",
                    path="src/core.template.txt",
                    template=TemplateData(),
                    header_gen=True,
                )
            ),
            details=BuildDetails(file_gen=True),
        )
        assert isinstance(s.get_module("core").root_source, GeneratedPath)
        run = s.get_header("core").step
        assert run.file_inputs == [SourcePath("src/core.template.txt")]

    def test_disabled_without_file_gen(self, ctx: BuildContext) -> None:
        s = UnitSet.init(ctx, "main", manifest(node("app", NodeKind.BINARY, header_gen=True)))
        assert list(s.units) == ["app"]
        assert s.files == []

    def test_document_cannot_host_generator(self, ctx: BuildContext) -> None:
        with pytest.raises(UnsupportedVariantError) as exc_info:
            UnitSet.init(
                ctx,
                "main",
                manifest(node("readme", NodeKind.DOCUMENT, header_gen=True)),
                details=BuildDetails(file_gen=True),
            )
        assert exc_info.value.name == "readme"

    def test_release_build_keeps_one_bootstrap(self, ctx: BuildContext) -> None:
        UnitSet.init(
            ctx,
            "main",
            manifest(node("core", header_gen=True)),
            details=BuildDetails(file_gen=True, optimize=OptimizeMode.RELEASE_FAST),
        )
        names = [step.name for step in ctx.steps if isinstance(step, CompileStep)]
        assert names.count("templater") == 1
        assert names == ["templater", "libjoiner", "snapshot-writer", "HeaderGen:core"]

    def test_generator_named_after_unit(self, ctx: BuildContext) -> None:
        s = UnitSet.init(
            ctx,
            "main",
            manifest(
                node("net", path="src/net/util", header_gen=True),
                node("fs", path="src/fs/util", header_gen=True),
            ),
            details=BuildDetails(file_gen=True),
        )
        assert s.get_binary("HeaderGen:net").name == "HeaderGen:net"
        assert s.get_binary("HeaderGen:fs").name == "HeaderGen:fs"
        assert s.get_header("net").basename == "net.h"
        assert s.get_header("fs").basename == "fs.h"
