"""Render query results as text, JSON payloads, or Graphviz DOT."""

from __future__ import annotations

import json
import re
from typing import Sequence

from .finder import Finder
from .models import ClassReference, SearchMode

FORMATS = ("text", "json", "dot")


def result_key(parents: bool) -> str:
    return "parent_classes" if parents else "subclasses"


def build_payload(
    class_name: str,
    module_path: str | None,
    references: Sequence[ClassReference],
    parents: bool = False,
) -> dict:
    return {
        "class_name": class_name,
        "module_path": module_path,
        result_key(parents): [ref.to_dict() for ref in references],
    }


def render_text(class_name: str, references: Sequence[ClassReference], parents: bool = False) -> str:
    noun = "parent class(es)" if parents else "subclass(es)"
    if not references:
        empty = "parent classes" if parents else "subclasses"
        return f"No {empty} found for '{class_name}'"

    lines = [f"Found {len(references)} {noun} of '{class_name}':", ""]
    lines.extend(f"  {ref.class_name} ({ref.module_path})" for ref in references)
    return "\n".join(lines)


def render_json(
    class_name: str,
    module_path: str | None,
    references: Sequence[ClassReference],
    parents: bool = False,
) -> str:
    return json.dumps(build_payload(class_name, module_path, references, parents), indent=2)


def dot_node_id(ref: ClassReference) -> str:
    return re.sub(r"[^0-9A-Za-z_]", "_", f"{ref.module_path}_{ref.class_name}")


def render_dot(
    finder: Finder,
    target: ClassReference,
    references: Sequence[ClassReference],
) -> str:
    """Draw the target plus results, with an edge for every direct relation among them."""
    members = {(ref.module_path, ref.class_name) for ref in references}
    members.add((target.module_path, target.class_name))

    lines = [
        "digraph {",
        "  rankdir=TB;",
        "  node [shape=box, style=filled, fillcolor=lightblue];",
        "",
        f'  {dot_node_id(target)} [label="{target.class_name}\\n({target.module_path})", '
        "fillcolor=lightgreen];",
    ]
    for ref in references:
        lines.append(f'  {dot_node_id(ref)} [label="{ref.class_name}\\n({ref.module_path})"];')
    lines.append("")

    for ref in [target, *references]:
        for parent in finder.find_parent_classes(ref.class_name, ref.module_path, SearchMode.DIRECT):
            if (parent.module_path, parent.class_name) in members:
                lines.append(f"  {dot_node_id(parent)} -> {dot_node_id(ref)};")

    lines.append("}")
    return "\n".join(lines)
