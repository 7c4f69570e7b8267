from typing import Callable, List, Optional, Tuple, Union

from docrefs.doc.nodes import Node

# A filter is a node type tag, a tuple of type tags, an arbitrary predicate, or None to match everything.
VisitorFilter = Union[str, Tuple[str, ...], Callable[[Node], bool], None]
VisitorFunc = Callable[[Node], None]


def matches(node: Node, v_filter: VisitorFilter) -> bool:
    if v_filter is None:
        return True
    if isinstance(v_filter, str):
        return node.type == v_filter
    if isinstance(v_filter, tuple):
        return node.type in v_filter
    return v_filter(node)


class DocumentDfsPass:
    """A single pre-order traversal of a tree, calling every visitor whose filter matches each node.

    The visitors run in document order, which is what the counters rely on:
    the first heading visited is Section 1.
    Visitors may mutate the fields of the node they're given, but shouldn't restructure its children -
    the children are read after the visitors run.
    """

    visitors: List[Tuple[VisitorFilter, VisitorFunc]]

    def __init__(self, visitors: List[Tuple[VisitorFilter, VisitorFunc]]) -> None:
        self.visitors = visitors

    def dfs_over_document(self, tree: Node) -> None:
        dfs_queue: List[Node] = [tree]
        while dfs_queue:
            node = dfs_queue.pop()

            for v_filter, v_f in self.visitors:
                if matches(node, v_filter):
                    v_f(node)

            # reversed is important because we pop the last thing in the queue off first.
            dfs_queue.extend(reversed(node.children))


def select_all(tree: Node, v_filter: VisitorFilter) -> List[Node]:
    """Every node in the tree (including the root) matching the filter, in document order.

    The list is built up front, so callers are free to restructure the tree while iterating over it."""
    found: List[Node] = []
    DocumentDfsPass([(v_filter, found.append)]).dfs_over_document(tree)
    return found


def select_child_of(tree: Node, parent_type: str, child_type: str) -> Optional[Node]:
    """Equivalent of the `parent_type > child_type` selector, scoped to below `tree`.

    e.g. `select_child_of(container, "caption", "paragraph")` finds a figure's caption text."""
    dfs_queue: List[Node] = list(reversed(tree.children))
    parents: List[Node] = [tree] * len(dfs_queue)
    while dfs_queue:
        node = dfs_queue.pop()
        parent = parents.pop()
        if node.type == child_type and parent.type == parent_type:
            return node
        dfs_queue.extend(reversed(node.children))
        parents.extend([node] * len(node.children))
    return None

