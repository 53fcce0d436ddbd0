"""Rows of the directory tree view."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class RowItemType(enum.Enum):
    DIRECTORY = "directory"
    FILE = "file"
    SYMBOLIC_LINK = "symbolic_link"
    UNKNOWN = "unknown"


@dataclass(eq=False)
class RowItem:
    """One item of the tree view, linked to its parent and children."""

    path_segment: str
    item_type: RowItemType = RowItemType.UNKNOWN
    size: int = 0
    has_children: bool = False
    expanded: bool = False
    tree_prefix: str = ""
    incl_fraction: float = 0.0
    children: list[RowItem] = field(default_factory=list, repr=False)
    parent: RowItem | None = field(default=None, repr=False)
    descendant_count: int = 0
    row_index: int = 0

    def __str__(self) -> str:
        return f"{self.path_segment} with {len(self.children)} children"

    def add_child(self, child: RowItem) -> RowItem:
        """Attach ``child`` below this item and return it."""
        child.parent = self
        self.children.append(child)
        self.has_children = True
        return child

    def update_tree_prefix(self, parent_tree_prefix: str, is_last_child: bool) -> None:
        """Recompute the tree-drawing prefix of this item and all its descendants."""
        parent_prefix = parent_tree_prefix.replace("├ ", "│ ")

        prefix = parent_prefix
        if is_last_child:
            prefix += "└─"
            if self.children:
                parent_prefix += " "
        else:
            prefix += "─"
        parent_prefix += " "

        if not self.children:
            self.tree_prefix = prefix + "─"
            return

        self.tree_prefix = prefix + "┬"
        last_index = len(self.children) - 1
        for index, child in enumerate(self.children):
            child_is_last = index == last_index
            child_prefix = parent_prefix if child_is_last else parent_prefix + "├"
            child.update_tree_prefix(child_prefix, child_is_last)

    def collapse_all_children(self) -> None:
        """Collapse every descendant that has children of its own."""
        if not self.has_children:
            return
        for child in self.children:
            if child.has_children:
                child.expanded = False
                child.collapse_all_children()

    def expand_all_children(self) -> None:
        """Expand all descendants, or, if collapsed, expand only this item."""
        if not self.has_children:
            return
        if self.expanded:
            for child in self.children:
                if child.has_children:
                    child.expanded = True
                    child.expand_all_children()
        else:
            self.expanded = True
            self.collapse_all_children()

    def get_path(self) -> Path:
        """The full path of this item, joined from the root's segment downwards."""
        segments = []
        item: RowItem | None = self
        while item is not None:
            segments.append(item.path_segment)
            item = item.parent
        return Path(*reversed(segments))