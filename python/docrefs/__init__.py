__all__ = [
    "Node",
    "NodeType",
    "Target",
    "TargetKind",
    "ReferenceKind",
    "NumberingOptions",
    "TargetCounts",
    "Diagnostic",
    "DiagnosticLog",
    "DiagnosticSink",
    "IReferenceState",
    "ReferenceState",
    "MultiPageReferenceState",
    "PageState",
    "ReferencePipeline",
    "ResolvableDocument",
    "SiteBuild",
    "SitePage",
    "ResolvableSite",
    "enumerate_targets",
    "resolve_reference_links",
    "resolve_cross_references",
    "add_container_caption_numbers",
    "resolve_references",
    "normalize_label",
    "create_html_id",
]

from docrefs.config import NumberingOptions
from docrefs.diagnostics import Diagnostic, DiagnosticLog, DiagnosticSink
from docrefs.doc.anchors import (
    ReferenceKind,
    Target,
    TargetKind,
    create_html_id,
    normalize_label,
)
from docrefs.doc.nodes import Node, NodeType
from docrefs.render.counters import TargetCounts
from docrefs.state import (
    IReferenceState,
    MultiPageReferenceState,
    PageState,
    ReferenceState,
)
from docrefs.system import (
    ReferencePipeline,
    ResolvableDocument,
    ResolvableSite,
    SiteBuild,
    SitePage,
)
from docrefs.transforms import (
    add_container_caption_numbers,
    enumerate_targets,
    resolve_cross_references,
    resolve_reference_links,
    resolve_references,
)
