from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from docrefs.config import HEADING_DEPTHS
from docrefs.doc.dfs import select_all
from docrefs.doc.nodes import Node, NodeType

HeadingCounts = List[Optional[int]]
"""
One slot per heading depth, [0] being depth 1.
A slot of None means no (numberable) heading of that depth appears in the document,
so it is never incremented and never shows up in a section number.
e.g. a document using only depths 1 and 3 has [0, None, 0, None, None, None] and its sections are "1", "1.1", "2"...
rather than "1", "1.0.1", "2".
"""


@dataclass
class TargetCounts:
    heading: Optional[HeadingCounts] = None
    kinds: Dict[str, int] = field(default_factory=dict)

    def increment(self, kind: str) -> int:
        """Increment the flat counter for a non-heading kind, starting from 1, and return the new value."""
        self.kinds[kind] = self.kinds.get(kind, 0) + 1
        return self.kinds[kind]


def increment_heading_counts(depth: int, counts: Sequence[Optional[int]]) -> HeadingCounts:
    """Increment heading counts based on depth to increment.

    When a certain depth is incremented, shallower depths are left the same
    and deeper depths are reset to zero. None counts anywhere are left alone."""
    increment_index = depth - 1
    new_counts: HeadingCounts = []
    for index, count in enumerate(counts):
        if count is None or index < increment_index:
            new_counts.append(count)
        elif index == increment_index:
            new_counts.append(count + 1)
        else:
            new_counts.append(0)
    return new_counts


def apply_enumerator_prefix(value: str, prefix: Optional[str]) -> str:
    if prefix:
        return prefix.replace("%s", value)
    return value


def format_heading_enumerator(
    counts: Sequence[Optional[int]], prefix: Optional[str] = None
) -> str:
    """Dot-delimited section number, e.g. [2, 1, 0, None, 0, 0] -> "2.1".

    Leading zeros are kept, trailing zeros are removed, Nones are ignored."""
    present = [c for c in counts if c is not None]
    while present and present[-1] == 0:
        present.pop()
    return apply_enumerator_prefix(".".join(str(c) for c in present), prefix)


def format_enumerator(value: int, prefix: Optional[str] = None) -> str:
    return apply_enumerator_prefix(str(value), prefix)


def numbered_heading_depths(tree: Node) -> HeadingCounts:
    """Build the starting HeadingCounts for a document: 0 for each depth used by a heading
    that hasn't opted out with `enumerated: false`, None for the others."""
    depths = {
        h.depth
        for h in select_all(tree, NodeType.HEADING)
        if h.enumerated is not False
    }
    return [0 if d in depths else None for d in HEADING_DEPTHS]
