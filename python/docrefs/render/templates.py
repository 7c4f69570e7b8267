"""
Filling in the text of references from templates.

A template is a string with up to three placeholders:
- `%s` and `{number}` both become the target's enumerator, e.g. "Figure %s" -> "Figure 3"
- `{name}` becomes the target's title (heading text, caption text) or failing that its label

Templates are applied to the *content* of a node: if the node already has children (e.g. the author wrote
`[see fig %s](#fig1)`) the placeholders inside those children are replaced, otherwise the template itself is used.
See https://www.sphinx-doc.org/en/master/usage/restructuredtext/roles.html#role-numref
"""

from typing import Dict, Optional, Sequence, Union

from docrefs.diagnostics import DiagnosticSink, warn
from docrefs.doc.anchors import Kind, TargetKind
from docrefs.doc.nodes import Node
from docrefs.helpers import Replacement, find_and_replace, set_text_as_child

UNKNOWN_REFERENCE_ENUMERATOR = "??"

UNNUMBERED_TEMPLATE = "{name}"

Title = Union[str, Sequence[Node]]


def default_numbered_reference_label(kind: Kind) -> str:
    if kind == TargetKind.heading:
        return "Section %s"
    elif kind == TargetKind.equation:
        return "(%s)"
    elif kind == TargetKind.figure:
        return "Figure %s"
    elif kind == TargetKind.table:
        return "Table %s"
    elif kind == TargetKind.code:
        return "Program %s"
    kind = str(kind)
    return f"{kind[:1].upper()}{kind[1:]} %s"


def default_unnumbered_reference_label(kind: Kind) -> str:
    if kind == TargetKind.equation:
        return default_numbered_reference_label(kind)
    return UNNUMBERED_TEMPLATE


def default_caption_label(kind: Optional[Kind]) -> str:
    """The label placed at the start of a numbered caption, e.g. 'Table %s:'. Containers default to figures."""
    return default_numbered_reference_label(kind or TargetKind.figure) + ":"


def fill_reference_enumerators(
    node: Node,
    template: str,
    enumerator: Union[str, int, None] = None,
    title: Optional[Title] = None,
    diagnostics: Optional[DiagnosticSink] = None,
) -> None:
    if not node.children:
        set_text_as_child(node, template)
    num = str(enumerator) if enumerator is not None else UNKNOWN_REFERENCE_ENUMERATOR
    node.template = template
    if num != UNKNOWN_REFERENCE_ENUMERATOR:
        node.enumerator = num

    used: Dict[str, bool] = {"s": False, "number": False, "name": False}

    def use_s() -> Replacement:
        used["s"] = True
        return num

    def use_number() -> Replacement:
        used["number"] = True
        return num

    def use_name() -> Replacement:
        used["name"] = True
        if title is not None:
            return title
        if node.label is not None:
            return node.label
        return node.identifier or ""

    find_and_replace(node, {"%s": use_s, "{number}": use_number, "{name}": use_name})

    if num == UNKNOWN_REFERENCE_ENUMERATOR and (used["s"] or used["number"]):
        if used["s"] and used["number"]:
            number_type = '"{number}" and "%s"'
        elif used["number"]:
            number_type = '"{number}"'
        else:
            number_type = '"%s"'
        warn(
            diagnostics,
            f'Reference for "{node.identifier}" uses {number_type} in the template, but node is not numbered.',
            node,
            note=f'The node was filled in with "{UNKNOWN_REFERENCE_ENUMERATOR}" as the number.',
        )
