"""
Targets and the identifiers that point at them.

A Target is any node which can be referred back to: headings, figures and other containers, equations, code blocks...
anything the parser gave an `identifier`.
Every Target has a kind, which determines how it's counted and what the default text of a reference to it looks like.

References name their targets by identifier. The same identifier may be written many ways by an author
(`Fig1`, `fig1`, `#fig1`) so links go through `normalize_label()` before lookup,
and every target gets an `html_id` which is safe to use as an HTML anchor.
"""

import copy
import dataclasses
import re
from enum import Enum
from typing import Optional, Union

from docrefs.doc.nodes import Node, NodeType


class TargetKind(str, Enum):
    heading = "heading"
    equation = "equation"
    figure = "figure"
    table = "table"
    code = "code"


# Known kinds are TargetKind members, everything else (e.g. a container of kind 'proof') is carried as the plain string.
Kind = Union[TargetKind, str]


class ReferenceKind(str, Enum):
    """The flavour of a crossReference node, stored in its `kind` field."""

    ref = "ref"
    numref = "numref"
    eq = "eq"


@dataclasses.dataclass(frozen=True)
class Target:
    """A registered target.

    `node` is a private deep copy of the node as it was when it was registered,
    so later mutation of the document doesn't change what references resolve to."""

    node: Node
    kind: Kind


def as_kind(kind: str) -> Kind:
    try:
        return TargetKind(kind)
    except ValueError:
        return kind


def kind_from_node(node: Node) -> Kind:
    if node.type == NodeType.CONTAINER:
        return as_kind(node.kind or TargetKind.figure.value)
    if node.type == NodeType.MATH:
        return TargetKind.equation
    return as_kind(node.type)


def copy_node(node: Node) -> Node:
    return copy.deepcopy(node)


@dataclasses.dataclass(frozen=True)
class NormalizedLabel:
    identifier: str
    label: str


def create_html_id(identifier: Optional[str]) -> Optional[str]:
    """Turn an identifier into something usable as an HTML id: lowercase, alphanumerics and single dashes,
    always starting with a letter."""
    if not identifier:
        return None
    html_id = identifier.lower()
    html_id = re.sub(r"[^a-z0-9-]", "-", html_id)
    html_id = re.sub(r"^([0-9-])", r"id-\1", html_id)
    html_id = re.sub(r"-[-]+", "-", html_id)
    html_id = re.sub(r"(?:^[-]+)|(?:[-]+$)", "", html_id)
    return html_id


def normalize_label(label: Optional[str]) -> Optional[NormalizedLabel]:
    """Collapse whitespace and lowercase a label to get the identifier it refers to.

    Returns None for empty labels."""
    if not label:
        return None
    identifier = re.sub(r"[\t\n\r ]+", " ", label).strip().lower()
    return NormalizedLabel(identifier=identifier, label=label)


def kind_name(kind: Kind) -> str:
    return kind.value if isinstance(kind, TargetKind) else kind
