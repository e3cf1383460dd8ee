"""Tests for unitgraph.graph.templating — template expansion step wiring."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from conftest import manifest, node

from unitgraph.build.context import GeneratedPath, SourcePath
from unitgraph.graph.errors import NodeNotFoundError, UninitializedUnitError, WrongUnitKindError
from unitgraph.graph.resolver import UnitSet
from unitgraph.graph.templating import extract_file_name, templater_unit_name
from unitgraph.manifest.model import ManifestNode, NodeKind, TemplateData

if TYPE_CHECKING:
    from pathlib import Path

    from unitgraph.build.context import BuildContext


# --- extract_file_name ---


class TestExtractFileName:
    def test_strips_directory_and_marker(self) -> None:
        assert extract_file_name("src/gen/config.template.h") == "config.h"

    def test_backslash_separator(self) -> None:
        assert extract_file_name("src\\gen\\config.template.h") == "config.h"

    def test_without_marker(self) -> None:
        assert extract_file_name("src/gen/config.h") == "config.h"

    def test_without_extension(self) -> None:
        assert extract_file_name("src/config.template") == "config.template"

    def test_marker_only_removed_once(self) -> None:
        assert extract_file_name("a.template.template.txt") == "a.template.txt"

    def test_marker_elsewhere_kept(self) -> None:
        assert extract_file_name("my.templated.txt") == "my.templated.txt"
        assert extract_file_name("templates/x.txt") == "x.txt"

    @pytest.mark.parametrize("stem", ["core", "a-b_c", "ünïcode", "x.y"])
    def test_only_marker_changes(self, stem: str) -> None:
        assert extract_file_name(f"dir/{stem}.template.ext") == f"{stem}.ext"

    def test_templater_unit_name(self) -> None:
        assert templater_unit_name("gen") == "Templater:gen"


# --- pipeline ---


@pytest.fixture()
def sources(tmp_path: Path) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "config.template.txt").write_text("{{ gen }}\n")
    (tmp_path / "templates").mkdir()
    (tmp_path / "templates" / "base.txt").write_text("base\n")
    (tmp_path / "templates" / "extra.txt").write_text("extra\n")
    return tmp_path


def _templated(deps: tuple[str, ...] = (), params: tuple[str, ...] = ()) -> ManifestNode:
    return node(
        "config",
        path="src/config.template.txt",
        template=TemplateData(deps=deps, params=params),
    )


class TestTemplatePipeline:
    def test_source_rerouted_through_templater(self, ctx: BuildContext, sources: Path) -> None:
        s = UnitSet.init(ctx, "main", manifest(_templated()))
        source = s.get_module("config").root_source
        assert isinstance(source, GeneratedPath)
        assert source.basename == "config.txt"

        run = source.step
        assert run.artifact is s.get_templater()
        assert run.args == ["src/config.template.txt", "-no-static"]
        assert run.file_inputs == [SourcePath("src/config.template.txt")]
        assert run.has_side_effects is False

    def test_file_deps_tracked(self, ctx: BuildContext, sources: Path) -> None:
        s = UnitSet.init(
            ctx, "main", manifest(_templated(deps=("templates/base.txt", "templates/extra.txt")))
        )
        run = s.get_module("config").root_source.step
        assert run.file_inputs == [
            SourcePath("templates/base.txt"),
            SourcePath("templates/extra.txt"),
            SourcePath("src/config.template.txt"),
        ]
        assert run.has_side_effects is False

    def test_directory_dep_forces_rerun(self, ctx: BuildContext, sources: Path) -> None:
        s = UnitSet.init(
            ctx, "main", manifest(_templated(deps=("templates", "templates/base.txt")))
        )
        run = s.get_module("config").root_source.step
        assert run.has_side_effects is True
        assert run.file_inputs == [SourcePath("src/config.template.txt")]

    def test_missing_dep_fails(self, ctx: BuildContext, sources: Path) -> None:
        with pytest.raises(FileNotFoundError):
            UnitSet.init(ctx, "main", manifest(_templated(deps=("templates/missing.txt",))))

    def test_params_resolve_templater_binaries(self, ctx: BuildContext, sources: Path) -> None:
        s = UnitSet.init(
            ctx,
            "main",
            manifest(
                _templated(params=("gen", "fmt")),
                node("Templater:gen", NodeKind.BINARY),
                node("Templater:fmt", NodeKind.BINARY),
            ),
        )
        run = s.get_module("config").root_source.step
        assert run.args == [
            "src/config.template.txt",
            "-no-static",
            "gen",
            s.get_binary("Templater:gen"),
            "fmt",
            s.get_binary("Templater:fmt"),
        ]
        # parameter binaries are materialized while the template is wired
        assert list(s.units)[:3] == ["config", "Templater:gen", "Templater:fmt"]

    def test_param_must_be_binary(self, ctx: BuildContext, sources: Path) -> None:
        with pytest.raises(WrongUnitKindError) as exc_info:
            UnitSet.init(
                ctx,
                "main",
                manifest(_templated(params=("gen",)), node("Templater:gen")),
            )
        assert exc_info.value.name == "Templater:gen"

    def test_missing_param(self, ctx: BuildContext, sources: Path) -> None:
        with pytest.raises(NodeNotFoundError) as exc_info:
            UnitSet.init(ctx, "main", manifest(_templated(params=("gen",))))
        assert exc_info.value.name == "Templater:gen"

    def test_self_referencing_param_hits_placeholder(
        self, ctx: BuildContext, sources: Path
    ) -> None:
        looped = node(
            "Templater:gen",
            NodeKind.BINARY,
            path="src/config.template.txt",
            template=TemplateData(params=("gen",)),
        )
        with pytest.raises(UninitializedUnitError):
            UnitSet.init(ctx, "main", manifest(looped))
