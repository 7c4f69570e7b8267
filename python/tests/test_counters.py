from docrefs import ReferenceState, TargetCounts
from docrefs.helpers import heading, root
from docrefs.render.counters import (
    format_enumerator,
    format_heading_enumerator,
    increment_heading_counts,
    numbered_heading_depths,
)
from docrefs.transforms import enumerate_targets


def test_increment_heading_counts_resets_deeper_levels():
    counts = increment_heading_counts(2, [1, 2, 0, 0, 0, 0])
    assert counts == [1, 3, 0, 0, 0, 0]
    counts = increment_heading_counts(1, counts)
    assert counts == [2, 0, 0, 0, 0, 0]
    counts = increment_heading_counts(4, counts)
    assert counts == [2, 0, 0, 1, 0, 0]


def test_increment_heading_counts_leaves_none_alone():
    counts = [0, None, 0, None, None, None]
    assert increment_heading_counts(2, counts) == [0, None, 0, None, None, None]
    assert increment_heading_counts(3, counts) == [0, None, 1, None, None, None]
    # The input isn't mutated
    assert counts == [0, None, 0, None, None, None]


def test_format_heading_enumerator_drops_trailing_zeros_and_nones():
    assert format_heading_enumerator([2, 1, 0, None, 0, 0]) == "2.1"
    assert format_heading_enumerator([1, None, 2, None, None, None]) == "1.2"
    assert format_heading_enumerator([3, 0, 0, 0, 0, 0]) == "3"
    # Leading zeros stay, otherwise a subsection before the first section would look like a section
    assert format_heading_enumerator([0, None, 1, None, None, None]) == "0.1"
    assert format_heading_enumerator([0, 0, 0, 0, 0, 0]) == ""


def test_enumerator_prefix():
    assert format_heading_enumerator([2, 1, 0, 0, 0, 0], "A%s") == "A2.1"
    assert format_enumerator(3, "A%s") == "A3"
    assert format_enumerator(3, "%s-%s") == "3-3"
    assert format_enumerator(3, None) == "3"
    assert format_enumerator(3, "") == "3"


def test_target_counts_increment_each_kind_independently():
    counts = TargetCounts()
    assert counts.increment("figure") == 1
    assert counts.increment("figure") == 2
    assert counts.increment("table") == 1
    assert counts.kinds == {"figure": 2, "table": 1}
    assert counts.heading is None


def test_numbered_heading_depths_only_counts_used_depths():
    tree = root(
        heading(1, "One"),
        heading(2, "Unnumbered", enumerated=False),
        heading(3, "Three"),
    )
    assert numbered_heading_depths(tree) == [0, None, 0, None, None, None]


def test_skipped_depths_dont_appear_in_section_numbers():
    tree = root(
        heading(1, "A"),
        heading(3, "A.a"),
        heading(3, "A.b"),
        heading(1, "B"),
        heading(3, "B.a"),
    )
    state = ReferenceState(numbering={"heading_1": True, "heading_3": True})
    enumerate_targets(tree, state)
    assert [h.enumerator for h in tree.children] == ["1", "1.1", "1.2", "2", "2.1"]


def test_tracked_but_unnumbered_depth_never_advances():
    # heading_3 is used in the document so it gets a slot, but it isn't numbered so the slot stays at 0.
    tree = root(
        heading(1, "A"),
        heading(2, "A.a"),
        heading(1, "B"),
        heading(3, "B.?"),
    )
    state = ReferenceState(numbering={"heading_1": True, "heading_2": True})
    enumerate_targets(tree, state)

    assert [h.enumerator for h in tree.children] == ["1", "1.1", "2", None]
    assert [h.enumerated for h in tree.children] == [None, None, None, None]
    assert state.target_counts.heading == [2, 0, 0, None, None, None]


def test_numbered_depth_below_unnumbered_depth_keeps_leading_zero():
    tree = root(
        heading(1, "Title"),
        heading(3, "First"),
        heading(3, "Second"),
    )
    state = ReferenceState(numbering={"heading_1": False, "heading_3": True})
    enumerate_targets(tree, state)

    assert [h.enumerator for h in tree.children] == [None, "0.1", "0.2"]
    assert state.target_counts.heading == [0, None, 2, None, None, None]
