"""
The tree that the reference engine decorates.

Upstream parsers hand us mdast-shaped trees: every element has a `type` tag, most have `children`,
and a handful of optional fields carry the information that targets and references need
(`identifier`, `label`, `enumerated`, `depth`, `kind`, `url`...).
Rather than having one class per node type, the engine works on a single mutable `Node` dataclass.
The passes need to rewrite nodes in place (a `link` becomes a `crossReference`, captions gain a `captionNumber`),
so nodes are not frozen.

Any mdast keys the engine doesn't know about are kept in `Node.extra` so that `Node.from_dict(d).to_dict() == d`
for the fields that survive a build.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


class NodeType:
    """The `type` tags the engine cares about. Anything else is passed through untouched."""

    ROOT = "root"
    TEXT = "text"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    CONTAINER = "container"
    CAPTION = "caption"
    CAPTION_NUMBER = "captionNumber"
    MATH = "math"
    CODE = "code"
    LINK = "link"
    CROSS_REFERENCE = "crossReference"
    CITE = "cite"
    FOOTNOTE_DEFINITION = "footnoteDefinition"


@dataclass
class Node:
    type: str
    children: List["Node"] = field(default_factory=list)
    value: Optional[str] = None

    identifier: Optional[str] = None
    label: Optional[str] = None
    html_id: Optional[str] = None
    implicit: Optional[bool] = None
    """Set on auto-generated targets e.g. the anchors created for every heading."""

    enumerated: Optional[bool] = None
    """Tri-state. None means the author said nothing, False opts the node out of numbering."""
    enumerator: Optional[str] = None

    depth: Optional[int] = None
    kind: Optional[str] = None
    """For containers, the kind of float (figure, table, code...). For cross-references, the ReferenceKind."""
    url: Optional[str] = None

    template: Optional[str] = None
    resolved: Optional[bool] = None
    remote: Optional[bool] = None

    extra: Dict[str, Any] = field(default_factory=dict)

    keep_empty_children: bool = field(default=False, repr=False, compare=False)
    """Set by `from_dict` when the source had a `children` key, so `to_dict` writes it back even when empty."""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Node":
        if "type" not in d:
            raise ValueError(f"Can't build a Node from {d!r} - it has no 'type'")
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in d.items():
            if key == "children":
                kwargs["children"] = [Node.from_dict(c) for c in value]
                kwargs["keep_empty_children"] = True
            elif key in _NODE_FIELDS:
                kwargs[key] = value
            else:
                extra[key] = value
        return cls(**kwargs, extra=extra)

    def to_dict(self) -> Dict[str, Any]:
        """Dump to an mdast-shaped dict. Fields which are None are left out.
        `children` is left out when empty, unless the node was loaded with it."""
        d: Dict[str, Any] = {"type": self.type}
        for f in dataclasses.fields(self):
            if f.name in _UNDUMPED_FIELDS:
                continue
            value = getattr(self, f.name)
            if value is not None:
                d[f.name] = value
        if self.children or self.keep_empty_children:
            d["children"] = [c.to_dict() for c in self.children]
        d.update(self.extra)
        return d


_UNDUMPED_FIELDS = frozenset(("type", "children", "extra", "keep_empty_children"))

_NODE_FIELDS = frozenset(
    f.name
    for f in dataclasses.fields(Node)
    if f.name not in ("children", "extra", "keep_empty_children")
)
