"""
Keeping track of every target in a document, and resolving references to them.

A ReferenceState is responsible for one document (one page of a site).
During the enumeration pass, every potential target is handed to `add_target()`, which
- decides whether the target is numbered, and if so gives it an enumerator ("3", "2.1")
- gives it an html_id
- stores a snapshot of it under its identifier.
Once enumeration is over the state is frozen, and the resolution pass uses it to fill in
the content of cross-references with `resolve_reference_content()`.

A MultiPageReferenceState stitches together the ReferenceStates of every page of a site, so
a reference on one page can resolve to a target on another. Each page is still counted independently.
"""

import abc
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from typing_extensions import override

from docrefs.config import NumberingConfig, NumberingOptions
from docrefs.diagnostics import DiagnosticSink, warn
from docrefs.doc.anchors import (
    Kind,
    ReferenceKind,
    Target,
    TargetKind,
    copy_node,
    create_html_id,
    kind_from_node,
    kind_name,
)
from docrefs.doc.dfs import select_child_of
from docrefs.doc.nodes import Node, NodeType
from docrefs.render.counters import (
    TargetCounts,
    format_enumerator,
    format_heading_enumerator,
    increment_heading_counts,
    numbered_heading_depths,
)
from docrefs.render.templates import (
    default_numbered_reference_label,
    default_unnumbered_reference_label,
    fill_reference_enumerators,
)

logger = logging.getLogger(__name__)

# These have an identifier, but it names something else (or is resolved elsewhere, like footnotes).
NON_TARGET_TYPES = frozenset(
    (NodeType.CROSS_REFERENCE, NodeType.CITE, NodeType.FOOTNOTE_DEFINITION)
)


def should_enumerate(
    node: Node,
    kind: Kind,
    numbering: NumberingOptions,
    override: Optional[bool] = None,
) -> bool:
    if isinstance(override, bool):
        return override
    if kind == TargetKind.heading and node.type == NodeType.HEADING:
        return numbering.heading(node.depth) or False
    return numbering.get(kind_name(kind)) or False


class IReferenceState(abc.ABC):
    """The interface the transforms use. Implemented for single documents and for multi-page sites."""

    diagnostics: Optional[DiagnosticSink]

    @abc.abstractmethod
    def initialize_numbered_heading_depths(self, tree: Node) -> None: ...

    @abc.abstractmethod
    def add_target(self, node: Node) -> None: ...

    @abc.abstractmethod
    def get_target(
        self, identifier: Optional[str], page: Optional[str] = None
    ) -> Optional[Target]:
        """Find the target with this identifier.
        If the page is provided, only that page is searched."""
        ...

    @abc.abstractmethod
    def resolve_reference_content(self, node: Node) -> None: ...


class ReferenceState(IReferenceState):
    numbering: NumberingOptions
    number_all: Optional[bool]
    """If not None, overrides `numbering` for every target kind."""
    targets: Dict[str, Target]
    target_counts: TargetCounts
    diagnostics: Optional[DiagnosticSink]

    _frozen: bool = False

    def __init__(
        self,
        numbering: NumberingConfig = None,
        target_counts: Optional[TargetCounts] = None,
        diagnostics: Optional[DiagnosticSink] = None,
    ) -> None:
        options, self.number_all = NumberingOptions.from_config(numbering)
        if self.number_all is not None:
            self.numbering = NumberingOptions()
        else:
            self.numbering = NumberingOptions.with_defaults(options)
        self.target_counts = target_counts if target_counts is not None else TargetCounts()
        self.targets = {}
        self.diagnostics = diagnostics

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Mark enumeration as finished. After this, no targets can be added."""
        self._frozen = True

    def _check_not_frozen(self, what: str) -> None:
        if self._frozen:
            raise RuntimeError(
                f"Can't {what} when the ReferenceState is frozen - enumeration has already finished!"
            )

    @override
    def initialize_numbered_heading_depths(self, tree: Node) -> None:
        self._check_not_frozen("initialize heading depths")
        self.target_counts.heading = numbered_heading_depths(tree)

    @override
    def add_target(self, node: Node) -> None:
        self._check_not_frozen("add a target")
        if node.type in NON_TARGET_TYPES:
            return
        kind = kind_from_node(node)
        if node.enumerated is not False and should_enumerate(
            node, kind, self.numbering, self.number_all
        ):
            node.enumerator = self.increment_count(node, kind)
        if not node.html_id:
            node.html_id = create_html_id(node.identifier)
        if not node.identifier:
            return

        existing = self.targets.get(node.identifier)
        if existing is not None:
            # Implicit targets (e.g. automatic heading anchors) collide all the time, don't warn about those.
            if not (node.implicit or existing.node.implicit):
                warn(
                    self.diagnostics,
                    f'Duplicate identifier "{node.identifier}" for node of type {node.type}',
                    node,
                )
            return

        self.targets[node.identifier] = Target(node=copy_node(node), kind=kind)
        logger.debug(
            "Registered %s target %r with enumerator %r",
            kind_name(kind),
            node.identifier,
            node.enumerator,
        )

    def increment_count(self, node: Node, kind: Kind) -> str:
        prefix = self.numbering.enumerator
        if kind == TargetKind.heading and node.type == NodeType.HEADING:
            # initialize_numbered_heading_depths() should have been called first, so unused depths are None.
            if self.target_counts.heading is None:
                self.target_counts.heading = [0, 0, 0, 0, 0, 0]
            self.target_counts.heading = increment_heading_counts(
                node.depth or 1, self.target_counts.heading
            )
            return format_heading_enumerator(self.target_counts.heading, prefix)
        value = self.target_counts.increment(kind_name(kind))
        return format_enumerator(value, prefix)

    @override
    def get_target(
        self, identifier: Optional[str], page: Optional[str] = None
    ) -> Optional[Target]:
        if not identifier:
            return None
        return self.targets.get(identifier)

    @override
    def resolve_reference_content(self, node: Node) -> None:
        target = self.get_target(node.identifier)
        if target is None:
            self.warn_node_target_not_found(node)
            return
        self.fill_reference(node, target, self.diagnostics)

    def fill_reference(
        self, node: Node, target: Target, diagnostics: Optional[DiagnosticSink]
    ) -> None:
        """Fill the content of a reference `node` to `target`, according to this state's numbering."""
        no_node_children = not node.children
        if target.kind == TargetKind.heading:
            # The default for a heading changes if it is numbered
            numbered = should_enumerate(
                target.node, TargetKind.heading, self.numbering, self.number_all
            )
            fill_reference_enumerators(
                node,
                default_numbered_reference_label(target.kind)
                if numbered
                else default_unnumbered_reference_label(target.kind),
                target.node.enumerator,
                copy_node(target.node).children,
                diagnostics,
            )
        else:
            # By default look into the caption paragraph if it exists
            caption = select_child_of(target.node, NodeType.CAPTION, NodeType.PARAGRAPH)
            title = copy_node(caption).children if caption is not None else None
            if title is not None and node.kind == ReferenceKind.ref and no_node_children:
                node.children = title
            template = (
                default_numbered_reference_label(target.kind)
                if target.node.enumerator
                else default_unnumbered_reference_label(target.kind)
            )
            fill_reference_enumerators(
                node, template, target.node.enumerator, title, diagnostics
            )
        node.resolved = True
        # The identifier may have changed in the lookup, but unlikely
        node.identifier = target.node.identifier

    def warn_node_target_not_found(self, node: Node) -> None:
        warn(
            self.diagnostics,
            f"Cross reference target was not found: {node.identifier}",
            node,
        )


@dataclass
class PageState:
    state: ReferenceState
    page_id: str
    url: Optional[str] = None


class MultiPageReferenceState(IReferenceState):
    """The view of a whole site from one page (the "current" page).

    Targets are only ever added to the current page's own state.
    Lookups check the current page first, then every page in order - the first page defining an identifier wins.
    """

    states: List[PageState]
    page: PageState

    def __init__(self, states: Sequence[PageState], page_id: str) -> None:
        self.states = list(states)
        for s in self.states:
            if s.page_id == page_id:
                self.page = s
                break
        else:
            raise ValueError(
                f"Page '{page_id}' isn't one of the pages in this site: {[s.page_id for s in self.states]}"
            )

    @property
    def page_id(self) -> str:
        return self.page.page_id

    @property
    def url(self) -> Optional[str]:
        return self.page.url

    @property
    def file_state(self) -> ReferenceState:
        return self.page.state

    @property
    def diagnostics(self) -> Optional[DiagnosticSink]:  # type: ignore[override]
        return self.page.state.diagnostics

    def resolve_state_provider(
        self, identifier: Optional[str], page: Optional[str] = None
    ) -> Optional[PageState]:
        if not identifier:
            return None
        if page is not None:
            for s in self.states:
                if s.page_id == page:
                    return s if s.state.get_target(identifier) is not None else None
            return None
        if self.page.state.get_target(identifier) is not None:
            return self.page
        for s in self.states:
            if s.state.get_target(identifier) is not None:
                return s
        return None

    @override
    def initialize_numbered_heading_depths(self, tree: Node) -> None:
        self.page.state.initialize_numbered_heading_depths(tree)

    @override
    def add_target(self, node: Node) -> None:
        self.page.state.add_target(node)

    @override
    def get_target(
        self, identifier: Optional[str], page: Optional[str] = None
    ) -> Optional[Target]:
        provider = self.resolve_state_provider(identifier, page)
        if provider is None:
            return None
        return provider.state.get_target(identifier)

    @override
    def resolve_reference_content(self, node: Node) -> None:
        provider = self.resolve_state_provider(node.identifier)
        if provider is None:
            self.page.state.warn_node_target_not_found(node)
            return
        target = provider.state.get_target(node.identifier)
        assert target is not None
        # Format with the owning page's numbering, but report problems against this page
        provider.state.fill_reference(node, target, self.page.state.diagnostics)
        if node.resolved and provider.page_id != self.page.page_id:
            node.remote = True
            node.url = provider.url
