import pytest

from docrefs import (
    DiagnosticLog,
    Node,
    NodeType,
    ReferencePipeline,
    ReferenceState,
    ResolvableDocument,
    SiteBuild,
    SitePage,
)
from docrefs.helpers import (
    caption,
    container,
    cross_reference,
    heading,
    link,
    paragraph,
    root,
    text,
    to_text,
)


def test_reference_before_its_target():
    xref = cross_reference("fig1", kind="numref")
    fig = container("figure", caption(paragraph(text("A cat"))), identifier="fig1")
    tree = root(paragraph(text("See "), xref), fig)
    out = ReferencePipeline(tree).run()

    assert out is tree
    assert to_text(xref.children) == "Figure 1"
    assert to_text(fig.children) == "Figure 1:A cat"


def test_whole_document():
    log = DiagnosticLog("doc.md")
    tree = root(
        heading(1, "Intro", identifier="intro"),
        paragraph(link("#methods"), text(" and "), link("#eq1")),
        heading(2, "Background", identifier="background"),
        heading(1, "Methods", identifier="methods"),
        Node(type="math", value="e=mc^2", identifier="eq1", label="eq1"),
        paragraph(cross_reference("background"), cross_reference("nope")),
    )
    ReferencePipeline(
        tree, numbering={"heading_1": True, "heading_2": True}, diagnostics=log
    ).run()

    assert [h.enumerator for h in tree.children if h.type == "heading"] == ["1", "1.1", "2"]
    refs = tree.children[1].children
    assert to_text([refs[0]]) == "Section 2"
    assert to_text([refs[2]]) == "(1)"
    assert to_text(tree.children[5].children[:1]) == "Section 1.1"
    assert log.messages == ["Cross reference target was not found: nope"]


def test_phases_are_enforced():
    pipeline = ReferencePipeline(root(container("figure", identifier="fig1")))
    doc = pipeline.enumerate()
    assert pipeline.state.frozen
    assert doc.state.get_target("fig1") is not None

    with pytest.raises(RuntimeError):
        pipeline.state.add_target(container("figure", identifier="fig2"))

    doc.resolve()
    with pytest.raises(RuntimeError):
        doc.resolve()


def test_resolvable_document_needs_a_frozen_state():
    with pytest.raises(RuntimeError):
        ResolvableDocument(root(), ReferenceState())


def test_pipeline_on_mdast_dicts():
    tree = Node.from_dict(
        {
            "type": "root",
            "children": [
                {
                    "type": "container",
                    "kind": "table",
                    "identifier": "tab1",
                    "label": "tab1",
                    "children": [
                        {
                            "type": "caption",
                            "children": [
                                {
                                    "type": "paragraph",
                                    "children": [{"type": "text", "value": "Results"}],
                                }
                            ],
                        },
                        {"type": "table", "children": []},
                    ],
                },
                {
                    "type": "paragraph",
                    "children": [{"type": "link", "url": "#tab1", "children": []}],
                },
            ],
        }
    )
    out = ReferencePipeline(tree).run().to_dict()

    table = out["children"][0]
    assert table["enumerator"] == "1"
    assert table["html_id"] == "tab1"
    assert table["children"][0]["children"][0]["children"][0]["type"] == "captionNumber"

    xref = out["children"][1]["children"][0]
    assert xref["type"] == "crossReference"
    assert xref["identifier"] == "tab1"
    assert xref["resolved"] is True
    assert "url" not in xref
    # The template text is split around the number
    assert xref["children"] == [
        {"type": "text", "value": "Table "},
        {"type": "text", "value": "1"},
    ]
    # The empty table body keeps its children key
    assert table["children"][1] == {"type": "table", "children": []}


def site_pages(log_a=None, log_b=None):
    a = SitePage(
        "a",
        root(paragraph(link("#tab1")), paragraph(cross_reference("sec"))),
        url="/a",
        diagnostics=log_a,
    )
    b = SitePage(
        "b",
        root(
            heading(1, "Results", identifier="sec"),
            container("table", caption(paragraph(text("Data"))), identifier="tab1"),
        ),
        url="/b",
        numbering={"heading_1": True},
        diagnostics=log_b,
    )
    return a, b


@pytest.mark.parametrize("max_workers", [None, 4])
def test_site_build(max_workers):
    log_a = DiagnosticLog("a")
    a, b = site_pages(log_a)
    trees = SiteBuild([a, b]).run(max_workers=max_workers)

    assert set(trees) == {"a", "b"}
    assert trees["a"] is a.tree
    xref = a.tree.children[0].children[0]
    assert xref.type == NodeType.CROSS_REFERENCE
    assert xref.remote is True
    assert xref.url == "/b"
    assert to_text(xref.children) == "Table 1"

    sec = a.tree.children[1].children[0]
    assert to_text(sec.children) == "Section 1"
    assert sec.url == "/b"
    assert log_a.diagnostics == []

    # Each page is numbered by its own config
    assert b.tree.children[0].enumerator == "1"


def test_site_enumerates_every_page_before_resolving():
    a, b = site_pages()
    site = SiteBuild([a, b]).enumerate()
    assert all(s.state.frozen for s in site.states)
    # Nothing has been resolved yet
    assert a.tree.children[0].children[0].type == NodeType.LINK

    assert site.view("a").get_target("tab1") is not None
    site.resolve_page("a")
    with pytest.raises(RuntimeError):
        site.resolve_page("a")
    with pytest.raises(ValueError):
        site.resolve_page("c")


def test_site_rejects_duplicate_pages():
    a, b = site_pages()
    with pytest.raises(ValueError):
        SiteBuild([a, b, a])
