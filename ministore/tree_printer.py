"""Text and Graphviz renderings of a B+ tree for debugging."""

from __future__ import annotations

import html
from typing import Any

from ministore.b_plus_tree import BPlusTree
from ministore.b_plus_tree_page import IndexPageType, read_page_type
from ministore.buffer_pool import INVALID_PAGE_ID
from ministore.internal_page import InternalPage
from ministore.leaf_page import LeafPage

_LEAF_PREFIX = "LEAF_"
_INTERNAL_PREFIX = "INT_"
_TABLE_OPEN = 'label=<<TABLE BORDER="0" CELLBORDER="1" CELLSPACING="0" CELLPADDING="4">\n'


def _load(tree: BPlusTree, page_id: int) -> LeafPage | InternalPage:
    bpm = tree.buffer_pool_manager
    page = bpm.fetch_page(page_id)
    if page is None:
        raise RuntimeError(f"cannot fetch page {page_id}")
    try:
        if read_page_type(page.data) == IndexPageType.LEAF_PAGE:
            return LeafPage.from_bytes(page.data, tree.codec)
        return InternalPage.from_bytes(page.data, tree.codec)
    finally:
        bpm.unpin_page(page_id, False)


def _key_text(key: Any) -> str:
    return "" if key is None else str(key)


def _node_header(node: LeafPage | InternalPage) -> list[str]:
    return [
        f'<TR><TD COLSPAN="{node.size}">P={node.page_id},Parent={node.parent_page_id}</TD></TR>\n',
        f'<TR><TD COLSPAN="{node.size}">max_size={node.max_size},'
        f"min_size={node.min_size},size={node.size}</TD></TR>\n",
    ]


def _graph_node(tree: BPlusTree, node: LeafPage | InternalPage, out: list[str]) -> None:
    if isinstance(node, LeafPage):
        name = f"{_LEAF_PREFIX}{node.page_id}"
        out.append(f"{name}[shape=plain color=green {_TABLE_OPEN}")
        out.extend(_node_header(node))
        out.append("<TR>")
        out.extend(f"<TD>{html.escape(_key_text(node.key_at(i)))}</TD>\n" for i in range(node.size))
        out.append("</TR></TABLE>>];\n")
        if node.next_page_id != INVALID_PAGE_ID:
            nxt = f"{_LEAF_PREFIX}{node.next_page_id}"
            out.append(f"{name} -> {nxt};\n")
            out.append(f"{{rank=same {name} {nxt}}};\n")
        if node.parent_page_id != INVALID_PAGE_ID:
            out.append(f"{_INTERNAL_PREFIX}{node.parent_page_id}:p{node.page_id} -> {name};\n")
        return

    name = f"{_INTERNAL_PREFIX}{node.page_id}"
    out.append(f"{name}[shape=plain color=pink {_TABLE_OPEN}")
    out.extend(_node_header(node))
    out.append("<TR>")
    for i in range(node.size):
        label = html.escape(_key_text(node.key_at(i))) if i > 0 else " "
        out.append(f'<TD PORT="p{node.value_at(i)}">{label}</TD>\n')
    out.append("</TR></TABLE>>];\n")
    if node.parent_page_id != INVALID_PAGE_ID:
        out.append(f"{_INTERNAL_PREFIX}{node.parent_page_id}:p{node.page_id} -> {name};\n")
    previous = None
    for i in range(node.size):
        child = _load(tree, node.value_at(i))
        _graph_node(tree, child, out)
        if previous is not None and not previous.is_leaf_page() and not child.is_leaf_page():
            out.append(f"{{rank=same {_INTERNAL_PREFIX}{previous.page_id} "
                       f"{_INTERNAL_PREFIX}{child.page_id}}};\n")
        previous = child


def to_graph(tree: BPlusTree) -> str:
    """Graphviz description of every page of the tree."""
    out = ["digraph G {\n"]
    if not tree.is_empty():
        _graph_node(tree, _load(tree, tree.root_page_id), out)
    out.append("}\n")
    return "".join(out)


def _string_node(tree: BPlusTree, node: LeafPage | InternalPage, out: list[str]) -> None:
    if isinstance(node, LeafPage):
        out.append(f"Leaf Page: {node.page_id} parent: {node.parent_page_id} "
                   f"next: {node.next_page_id}\n")
        out.extend(f"{_key_text(node.key_at(i))}," for i in range(node.size))
        out.append("\n\n")
        return
    out.append(f"Internal Page: {node.page_id} parent: {node.parent_page_id}\n")
    out.extend(f"{_key_text(node.key_at(i))}: {node.value_at(i)}," for i in range(node.size))
    out.append("\n\n")
    for i in range(node.size):
        _string_node(tree, _load(tree, node.value_at(i)), out)


def to_string(tree: BPlusTree) -> str:
    """Plain-text listing of the tree's pages, depth first; empty for an empty tree."""
    if tree.is_empty():
        return ""
    out: list[str] = []
    _string_node(tree, _load(tree, tree.root_page_id), out)
    return "".join(out)