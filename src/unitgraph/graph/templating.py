"""Template expansion: reroute a node's source through the templater tool."""

from __future__ import annotations

import logging
import stat
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from unitgraph.build.context import GeneratedPath
    from unitgraph.graph.resolver import UnitSet
    from unitgraph.manifest.model import ManifestNode

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".template"
TEMPLATER_PREFIX = "Templater:"
NO_STATIC_FLAG = "-no-static"


def templater_unit_name(param: str) -> str:
    """Manifest node that provides the binary for template parameter *param*."""
    return f"{TEMPLATER_PREFIX}{param}"


def extract_file_name(path: str) -> str:
    """Output file name for a templated source path.

    Drops any directory prefix (``/`` or ``\\``) and one ``.template``
    marker sitting right before the extension::

        >>> extract_file_name("src/gen/config.template.h")
        'config.h'
    """
    sub = path
    ext = ""

    last_sep = max(path.rfind("/"), path.rfind("\\"))
    if last_sep != -1:
        sub = path[last_sep + 1 :]

    last_dot = sub.rfind(".")
    if last_dot != -1:
        ext = sub[last_dot:]
        sub = sub[:last_dot]

    if sub.endswith(TEMPLATE_SUFFIX):
        sub = sub[: -len(TEMPLATE_SUFFIX)]

    return f"{sub}{ext}"


def expand_template(unit_set: UnitSet, node: ManifestNode) -> GeneratedPath:
    """Declare the templater run for *node* and return its captured output.

    Template deps that are not regular files (directories) cannot be tracked
    as step inputs, so the step is marked to always rerun instead.
    """
    template = node.template_data
    if template is None:
        msg = f"node '{node.name}' has no template data"
        raise ValueError(msg)

    ctx = unit_set.ctx
    run = ctx.add_run_artifact(unit_set.get_templater())

    for dep in template.deps:
        try:
            st = (ctx.root / dep).stat()
        except OSError as exc:
            logger.error(
                "cannot stat template dependency '%s' for template '%s': %s",
                dep,
                node.path,
                exc,
            )
            raise

        if not stat.S_ISREG(st.st_mode):
            logger.debug("template dependency '%s' is not a file, step always reruns", dep)
            run.has_side_effects = True
            break

        run.add_file_input(ctx.path(dep))

    run.add_file_input(ctx.path(node.path))
    run.add_arg(node.path)
    run.add_arg(NO_STATIC_FLAG)

    for param in template.params:
        binary = unit_set.acquire_templater_binary(param)
        run.add_arg(param)
        run.add_artifact_arg(binary)

    return run.capture_stdout(extract_file_name(node.path))
