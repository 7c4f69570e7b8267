import copy
import re
from typing import Callable, List, Mapping, Optional, Sequence, Union

from docrefs.doc.nodes import Node, NodeType

# A replacement produces either plain text or a list of nodes to splice in place of the match.
Replacement = Union[str, Sequence[Node]]


def text(value: str) -> Node:
    return Node(type=NodeType.TEXT, value=value)


def set_text_as_child(node: Node, value: str) -> None:
    node.children = [text(value)]


def to_text(nodes: Sequence[Node]) -> str:
    """Concatenate the text of a list of nodes, for logging and tests."""
    out = ""
    for n in nodes:
        if n.value is not None:
            out += n.value
        out += to_text(n.children)
    return out


def find_and_replace(
    tree: Node, replacements: Mapping[str, Callable[[], Replacement]]
) -> None:
    """Replace literal occurrences of each key inside every text node below `tree`.

    The callable for a key is only invoked when that key actually appears,
    which lets callers track which tokens were used.
    Text nodes are split around each match. Replacement nodes are deep-copied into place and are not searched again.
    """
    if not replacements:
        return
    pattern = re.compile("|".join(re.escape(k) for k in replacements))

    def replace_in(parent: Node) -> None:
        new_children: List[Node] = []
        for child in parent.children:
            if child.type != NodeType.TEXT or not child.value:
                replace_in(child)
                new_children.append(child)
                continue
            pos = 0
            first = len(new_children)
            for m in pattern.finditer(child.value):
                if m.start() > pos:
                    new_children.append(text(child.value[pos : m.start()]))
                r = replacements[m.group(0)]()
                if isinstance(r, str):
                    new_children.append(text(r))
                else:
                    new_children.extend(copy.deepcopy(list(r)))
                pos = m.end()
            if pos == 0:
                # No matches, keep the original node (and any extra fields on it)
                new_children.append(child)
                continue
            if pos < len(child.value):
                new_children.append(text(child.value[pos:]))
            # The first fragment stands in for the original node, e.g. for its source position
            if len(new_children) > first and not new_children[first].extra:
                new_children[first].extra = copy.deepcopy(child.extra)
        parent.children = new_children

    replace_in(tree)


# Builders. These are conveniences for constructing trees in Python, e.g. in tests or in a parser's output stage.


def root(*children: Node) -> Node:
    return Node(type=NodeType.ROOT, children=list(children))


def paragraph(*children: Node) -> Node:
    return Node(type=NodeType.PARAGRAPH, children=list(children))


def heading(
    depth: int,
    title: Union[str, Node],
    identifier: Optional[str] = None,
    label: Optional[str] = None,
    enumerated: Optional[bool] = None,
    implicit: Optional[bool] = None,
) -> Node:
    return Node(
        type=NodeType.HEADING,
        depth=depth,
        children=[text(title) if isinstance(title, str) else title],
        identifier=identifier,
        label=label if label is not None else identifier,
        enumerated=enumerated,
        implicit=implicit,
    )


def caption(*children: Node) -> Node:
    return Node(type=NodeType.CAPTION, children=list(children))


def container(
    kind: Optional[str],
    *children: Node,
    identifier: Optional[str] = None,
    label: Optional[str] = None,
    enumerated: Optional[bool] = None,
) -> Node:
    return Node(
        type=NodeType.CONTAINER,
        kind=kind,
        children=list(children),
        identifier=identifier,
        label=label if label is not None else identifier,
        enumerated=enumerated,
    )


def math(
    value: str,
    identifier: Optional[str] = None,
    label: Optional[str] = None,
    enumerated: Optional[bool] = None,
) -> Node:
    return Node(
        type=NodeType.MATH,
        value=value,
        identifier=identifier,
        label=label if label is not None else identifier,
        enumerated=enumerated,
    )


def link(url: str, *children: Node) -> Node:
    return Node(type=NodeType.LINK, url=url, children=list(children))


def cross_reference(
    identifier: str,
    *children: Node,
    kind: Optional[str] = None,
    label: Optional[str] = None,
) -> Node:
    return Node(
        type=NodeType.CROSS_REFERENCE,
        identifier=identifier,
        label=label if label is not None else identifier,
        kind=kind,
        children=list(children),
    )
