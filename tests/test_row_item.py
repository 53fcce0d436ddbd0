import os
from pathlib import Path

from spacekit.row_item import RowItem, RowItemType


def _dir(name, **kwargs):
    return RowItem(path_segment=name, item_type=RowItemType.DIRECTORY, **kwargs)


def _file(name):
    return RowItem(path_segment=name, item_type=RowItemType.FILE)


def test_display_outputs_path_and_number_of_children():
    item = RowItem(
        path_segment="/some/path",
        item_type=RowItemType.DIRECTORY,
        incl_fraction=0.1,
    )

    assert str(item) == "/some/path with 0 children"


def test_display_counts_children():
    item = _dir("root")
    item.add_child(_file("a"))
    item.add_child(_file("b"))

    assert str(item) == "root with 2 children"


def test_get_path_returns_correct_path():
    item1 = _dir(f"some{os.sep}path", size=1024, expanded=True, descendant_count=2)
    item2 = item1.add_child(_dir("to", size=1024, expanded=True, descendant_count=1))
    item3 = item2.add_child(_file("file"))

    assert str(item1.get_path()) == str(Path("some") / "path")
    assert str(item2.get_path()) == str(Path("some") / "path" / "to")
    assert str(item3.get_path()) == str(Path("some") / "path" / "to" / "file")


def test_add_child_links_parent():
    parent = _dir("p")
    child = parent.add_child(_file("c"))

    assert child.parent is parent
    assert parent.children == [child]
    assert parent.has_children


def test_update_tree_prefix_flat_tree():
    root = _dir("root")
    a = root.add_child(_file("a"))
    b = root.add_child(_file("b"))

    root.update_tree_prefix("", False)

    assert root.tree_prefix == "─┬"
    assert a.tree_prefix == " ├──"
    assert b.tree_prefix == " └──"


def test_update_tree_prefix_nested_tree():
    root = _dir("root")
    a = root.add_child(_dir("a"))
    a1 = a.add_child(_file("a1"))
    b = root.add_child(_file("b"))

    root.update_tree_prefix("", False)

    assert a.tree_prefix == " ├─┬"
    assert a1.tree_prefix == " │ └──"
    assert b.tree_prefix == " └──"


def test_update_tree_prefix_leaf():
    leaf = _file("x")

    leaf.update_tree_prefix("", True)

    assert leaf.tree_prefix == "└──"


def _three_level_tree():
    root = _dir("root", expanded=True)
    a = root.add_child(_dir("a", expanded=True))
    a1 = a.add_child(_dir("a1", expanded=True))
    a1.add_child(_file("f"))
    return root, a, a1


def test_collapse_all_children_collapses_descendants_but_not_self():
    root, a, a1 = _three_level_tree()

    root.collapse_all_children()

    assert root.expanded
    assert not a.expanded
    assert not a1.expanded


def test_expand_all_children_on_expanded_item_expands_descendants():
    root, a, a1 = _three_level_tree()
    root.collapse_all_children()

    root.expand_all_children()

    assert root.expanded and a.expanded and a1.expanded


def test_expand_all_children_on_collapsed_item_expands_only_self():
    root, a, a1 = _three_level_tree()
    root.expanded = False

    root.expand_all_children()

    assert root.expanded
    assert not a.expanded
    assert not a1.expanded