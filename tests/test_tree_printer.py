import re

import pytest

from ministore.b_plus_tree import BPlusTree
from ministore.b_plus_tree_page import KeyCodec
from ministore.buffer_pool import BufferPoolManager, PageStore
from ministore.tree_printer import to_graph, to_string


def make_tree():
    bpm = BufferPoolManager(64, PageStore())
    tree = BPlusTree(0, bpm, KeyCodec("i"), 4, 4)
    return tree, bpm


@pytest.fixture
def big_tree():
    tree, bpm = make_tree()
    keys = [7, 3, 15, 1, 20, 11, 5, 9, 18, 2, 13, 8, 4, 17, 6, 10, 19, 12, 14, 16]
    for k in keys:
        assert tree.insert(k, k * 100)
    return tree, bpm, sorted(keys)


def test_empty_tree_string():
    tree, _ = make_tree()
    assert to_string(tree) == ""


def test_empty_tree_graph_has_no_nodes():
    tree, _ = make_tree()
    graph = to_graph(tree)
    assert graph.startswith("digraph G {")
    assert "LEAF_" not in graph and "INT_" not in graph


def test_single_leaf_string():
    tree, _ = make_tree()
    for k in (3, 1, 2):
        tree.insert(k, k)
    root = tree.root_page_id
    assert to_string(tree) == f"Leaf Page: {root} parent: -1 next: -1\n1,2,3,\n\n"


def test_single_leaf_graph():
    tree, _ = make_tree()
    tree.insert(1, 10)
    root = tree.root_page_id
    graph = to_graph(tree)
    assert f"LEAF_{root}[shape=plain color=green " in graph
    assert f"P={root},Parent=-1" in graph
    assert "<TD>1</TD>" in graph
    assert "->" not in graph
    assert graph.endswith("}\n")


def test_string_lists_all_keys_in_order(big_tree):
    tree, _, keys = big_tree
    text = to_string(tree)
    lines = text.split("\n")
    leaf_keys = []
    for i, line in enumerate(lines):
        if line.startswith("Leaf Page:"):
            leaf_keys.extend(int(k) for k in lines[i + 1].split(",") if k)
    assert leaf_keys == keys
    assert text.startswith(f"Internal Page: {tree.root_page_id} parent: -1\n")


def test_string_leaves_agree_with_graph(big_tree):
    tree, _, _ = big_tree
    text = to_string(tree)
    graph = to_graph(tree)
    string_leaves = re.findall(r"^Leaf Page: (\d+)", text, re.M)
    graph_leaves = re.findall(r"^LEAF_(\d+)\[", graph, re.M)
    assert sorted(string_leaves) == sorted(graph_leaves)
    assert len(graph_leaves) > 1


def test_graph_links(big_tree):
    tree, _, _ = big_tree
    graph = to_graph(tree)
    leaves = re.findall(r"^LEAF_(\d+)\[", graph, re.M)
    internals = re.findall(r"^INT_(\d+)\[", graph, re.M)
    next_links = re.findall(r"^LEAF_\d+ -> LEAF_\d+;", graph, re.M)
    parent_links = re.findall(r"^INT_\d+:p\d+ -> (?:LEAF|INT)_\d+;", graph, re.M)
    assert len(next_links) == len(leaves) - 1
    assert len(parent_links) == len(leaves) + len(internals) - 1
    assert str(tree.root_page_id) in internals


def test_printing_leaves_nothing_pinned(big_tree):
    tree, bpm, _ = big_tree
    to_graph(tree)
    to_string(tree)
    assert bpm.check_all_unpinned() is True


def test_printing_does_not_change_tree(big_tree):
    tree, _, keys = big_tree
    before = to_string(tree)
    to_graph(tree)
    assert to_string(tree) == before
    assert [k for k, _ in tree] == keys


def test_string_after_removals(big_tree):
    tree, _, keys = big_tree
    for k in keys[::2]:
        tree.remove(k)
    text = to_string(tree)
    lines = text.split("\n")
    leaf_keys = []
    for i, line in enumerate(lines):
        if line.startswith("Leaf Page:"):
            leaf_keys.extend(int(k) for k in lines[i + 1].split(",") if k)
    assert leaf_keys == keys[1::2]