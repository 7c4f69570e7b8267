"""
The passes over a document tree.

Enumeration:
- `enumerate_targets()` counts and registers every target, in document order.

Resolution, which must only start once *every* document sharing the state has been enumerated
(a reference can come before its target):
- `resolve_reference_links()` turns `[](#fig1)`-style links to known targets into crossReference nodes
- `resolve_cross_references()` fills in the content of every crossReference
- `add_container_caption_numbers()` prefixes numbered captions with e.g. "Figure 1:"
`resolve_references()` runs all three in that order.

`docrefs.system` wraps these up so the ordering is enforced.
"""

import logging

from docrefs.diagnostics import warn
from docrefs.doc.anchors import kind_name, normalize_label
from docrefs.doc.dfs import DocumentDfsPass, select_all, select_child_of
from docrefs.doc.nodes import Node, NodeType
from docrefs.render.templates import default_caption_label, fill_reference_enumerators
from docrefs.state import IReferenceState

logger = logging.getLogger(__name__)

TARGET_NODE_TYPES = (NodeType.CONTAINER, NodeType.MATH, NodeType.HEADING)


def is_target_candidate(node: Node) -> bool:
    return node.type in TARGET_NODE_TYPES or node.identifier is not None


def enumerate_targets(tree: Node, state: IReferenceState) -> Node:
    state.initialize_numbered_heading_depths(tree)
    DocumentDfsPass([(is_target_candidate, state.add_target)]).dfs_over_document(tree)
    return tree


def resolve_reference_links(tree: Node, state: IReferenceState) -> None:
    for link in select_all(tree, NodeType.LINK):
        url = link.url or ""
        identifier = url[1:] if url.startswith("#") else url
        reference = normalize_label(identifier)
        target = state.get_target(identifier)
        if target is None and reference is not None:
            target = state.get_target(reference.identifier)
        if target is None or reference is None:
            # Only warn on explicit internal URLs, anything else is probably an external link
            if url.startswith("#"):
                warn(
                    state.diagnostics,
                    f'No target for internal reference "{url}" was found.',
                    link,
                )
            continue
        if not url.startswith("#"):
            warn(
                state.diagnostics,
                f"Legacy syntax used for link target, please prepend a '#' to your link url: \"{url}\"",
                link,
                note="The link target should be of the form `[](#target)`, including the `#` sign.\n"
                "This may be deprecated in the future.",
            )

        # Change the link into a cross-reference!
        link.type = NodeType.CROSS_REFERENCE
        link.identifier = target.node.identifier
        link.label = (
            target.node.label if target.node.label is not None else reference.label
        )
        link.kind = None
        link.url = None
        logger.debug("Promoted link %r to a cross-reference", url)

        if target.node.implicit:
            warn(
                state.diagnostics,
                f'Linking "{target.node.identifier}" to an implicit {kind_name(target.kind)} reference, '
                "best practice is to create an explicit reference.",
                link,
                note="Explicit references do not break when you update the title to a section, "
                "they are preferred over using the implicit HTML ID created for headers.",
            )


def resolve_cross_references(tree: Node, state: IReferenceState) -> None:
    for xref in select_all(tree, NodeType.CROSS_REFERENCE):
        state.resolve_reference_content(xref)


def add_container_caption_numbers(tree: Node, state: IReferenceState) -> None:
    for container in select_all(tree, NodeType.CONTAINER):
        if not container.enumerator:
            continue
        target = state.get_target(container.identifier)
        enumerator = target.node.enumerator if target is not None else container.enumerator
        para = select_child_of(container, NodeType.CAPTION, NodeType.PARAGRAPH)
        if not enumerator or para is None:
            continue
        if para.children and para.children[0].type == NodeType.CAPTION_NUMBER:
            continue
        caption_number = Node(
            type=NodeType.CAPTION_NUMBER,
            kind=container.kind,
            label=container.label,
            identifier=container.identifier,
            html_id=container.html_id,
            enumerator=enumerator,
        )
        fill_reference_enumerators(
            caption_number,
            default_caption_label(container.kind),
            enumerator,
            diagnostics=state.diagnostics,
        )
        # The caption number lives in the paragraph, so it carries the identifiers needed to link back to the container
        para.children.insert(0, caption_number)


def resolve_references(tree: Node, state: IReferenceState) -> Node:
    resolve_reference_links(tree, state)
    resolve_cross_references(tree, state)
    add_container_caption_numbers(tree, state)
    return tree
