"""The phases of numbering and resolving references in a document:

1. Enumerating
   A single pre-order pass over the whole tree. Every target is counted and registered with the
   document's ReferenceState, in document order.
   Once the pass is over the ReferenceState is frozen: nothing may add targets to it again.
2. Promoting links
   Links like `[](#fig1)` that point at known targets are rewritten into crossReference nodes.
3. Resolving
   Every crossReference is filled in from its target, and numbered captions get their "Figure 1:" prefix.

Phases 2 and 3 must only start once phase 1 has finished for *every* document that can be referred to.
A reference may appear before its target, and on a site a reference may point to another page.
This ordering is enforced by the types: `ReferencePipeline.enumerate()` returns a `ResolvableDocument`,
and only that can `resolve()`. For sites, `SiteBuild.enumerate()` enumerates every page before handing back
a `ResolvableSite`, which is the barrier between the two halves of the build.

Pages of a site are independent while enumerating (each has its own ReferenceState) and only read each
other's frozen states while resolving, so both halves may run pages on a thread pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from docrefs.config import NumberingConfig
from docrefs.diagnostics import DiagnosticSink
from docrefs.doc.nodes import Node
from docrefs.render.counters import TargetCounts
from docrefs.state import MultiPageReferenceState, PageState, ReferenceState
from docrefs.transforms import enumerate_targets, resolve_references

logger = logging.getLogger(__name__)


class ResolvableDocument:
    """A document whose targets have all been enumerated. Obtained from `ReferencePipeline.enumerate()`."""

    tree: Node
    state: ReferenceState

    _resolved: bool = False

    def __init__(self, tree: Node, state: ReferenceState) -> None:
        if not state.frozen:
            raise RuntimeError(
                "Can't resolve references until enumeration has finished and the ReferenceState is frozen"
            )
        self.tree = tree
        self.state = state

    def resolve(self) -> Node:
        """Run the link promotion and resolution phases. Returns the decorated tree.

        Can only be done once: the caption numbers are not safe to add twice."""
        if self._resolved:
            raise RuntimeError("This document has already been resolved")
        self._resolved = True
        return resolve_references(self.tree, self.state)


class ReferencePipeline:
    """Number and resolve the references in a single document.

    ```
    doc = ReferencePipeline(tree, numbering={"heading_1": True}).enumerate()
    # doc.state can now be inspected, e.g. to build a table of contents
    doc.resolve()
    ```
    """

    tree: Node
    state: ReferenceState

    def __init__(
        self,
        tree: Node,
        numbering: NumberingConfig = None,
        diagnostics: Optional[DiagnosticSink] = None,
        target_counts: Optional[TargetCounts] = None,
    ) -> None:
        self.tree = tree
        self.state = ReferenceState(
            numbering=numbering, target_counts=target_counts, diagnostics=diagnostics
        )

    def enumerate(self) -> ResolvableDocument:
        enumerate_targets(self.tree, self.state)
        self.state.freeze()
        logger.debug("Enumerated %d targets", len(self.state.targets))
        return ResolvableDocument(self.tree, self.state)

    def run(self) -> Node:
        """Shortcut for enumerate().resolve()"""
        return self.enumerate().resolve()


@dataclass
class SitePage:
    page_id: str
    tree: Node
    url: Optional[str] = None
    numbering: NumberingConfig = None
    diagnostics: Optional[DiagnosticSink] = None


class ResolvableSite:
    """Every page of a site, enumerated. Obtained from `SiteBuild.enumerate()`."""

    pages: Dict[str, SitePage]
    states: List[PageState]

    _resolved: Dict[str, bool]

    def __init__(self, pages: Sequence[SitePage], states: Sequence[PageState]) -> None:
        unfrozen = [s.page_id for s in states if not s.state.frozen]
        if unfrozen:
            raise RuntimeError(
                f"Can't resolve references until every page has been enumerated, still open: {unfrozen}"
            )
        self.pages = {p.page_id: p for p in pages}
        self.states = list(states)
        self._resolved = {p.page_id: False for p in pages}

    def view(self, page_id: str) -> MultiPageReferenceState:
        """The site as seen from one page."""
        return MultiPageReferenceState(self.states, page_id)

    def resolve_page(self, page_id: str) -> Node:
        if page_id not in self.pages:
            raise ValueError(f"Page '{page_id}' isn't part of this site")
        if self._resolved[page_id]:
            raise RuntimeError(f"Page '{page_id}' has already been resolved")
        self._resolved[page_id] = True
        return resolve_references(self.pages[page_id].tree, self.view(page_id))

    def resolve(self, max_workers: Optional[int] = None) -> Dict[str, Node]:
        """Resolve every page. With `max_workers`, pages are resolved on a thread pool."""
        page_ids = list(self.pages)
        if not max_workers or max_workers <= 1:
            return {page_id: self.resolve_page(page_id) for page_id in page_ids}
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            trees = list(executor.map(self.resolve_page, page_ids))
        return dict(zip(page_ids, trees))


class SiteBuild:
    """Number and resolve the references across every page of a site.

    Each page is numbered independently according to its own numbering config.
    References resolve to the current page first, then to the first page (in the order given) with a matching target.
    References to other pages are marked `remote` and given that page's `url`.
    """

    pages: List[SitePage]

    def __init__(self, pages: Iterable[SitePage]) -> None:
        self.pages = list(pages)
        seen = set()
        for p in self.pages:
            if p.page_id in seen:
                raise ValueError(f"Page '{p.page_id}' was added to the site twice")
            seen.add(p.page_id)

    def _enumerate_page(self, page: SitePage) -> PageState:
        state = ReferenceState(numbering=page.numbering, diagnostics=page.diagnostics)
        enumerate_targets(page.tree, state)
        logger.debug(
            "Enumerated %d targets on page %r", len(state.targets), page.page_id
        )
        return PageState(state=state, page_id=page.page_id, url=page.url)

    def enumerate(self, max_workers: Optional[int] = None) -> ResolvableSite:
        """Enumerate every page, optionally on a thread pool, then freeze them all."""
        if not max_workers or max_workers <= 1:
            states = [self._enumerate_page(p) for p in self.pages]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                states = list(executor.map(self._enumerate_page, self.pages))
        # Barrier: nothing is resolved until every page is counted
        for s in states:
            s.state.freeze()
        return ResolvableSite(self.pages, states)

    def run(self, max_workers: Optional[int] = None) -> Dict[str, Node]:
        return self.enumerate(max_workers).resolve(max_workers)
