"""
Tests for assembling approved comments into a reply forest.
"""
from types import SimpleNamespace

from utils.comment_tree import build_comment_tree


def _c(cid, parent_id=None):
    def to_public_dict():
        return {"id": cid, "parent_id": parent_id}
    return SimpleNamespace(id=cid, parent_id=parent_id, to_public_dict=to_public_dict)


def _shape(nodes):
    return [(n["id"], _shape(n["replies"])) for n in nodes]


def test_roots_keep_input_order():
    tree = build_comment_tree([_c("c"), _c("b"), _c("a")])
    assert _shape(tree) == [("c", []), ("b", []), ("a", [])]


def test_replies_attach_to_parent():
    tree = build_comment_tree([_c("r2", "root"), _c("r1", "root"), _c("root")])
    assert _shape(tree) == [("root", [("r2", []), ("r1", [])])]


def test_deep_chains_are_kept():
    tree = build_comment_tree([_c("a"), _c("b", "a"), _c("c", "b"), _c("d", "c")])
    assert _shape(tree) == [("a", [("b", [("c", [("d", [])])])])]


def test_reply_with_missing_parent_is_dropped():
    tree = build_comment_tree([_c("orphan", "pending-parent"), _c("root")])
    assert _shape(tree) == [("root", [])]


def test_descendants_of_dropped_reply_are_dropped_too():
    tree = build_comment_tree([_c("grandchild", "orphan"), _c("orphan", "gone"), _c("root")])
    assert _shape(tree) == [("root", [])]


def test_empty_input():
    assert build_comment_tree([]) == []


def test_input_objects_are_not_mutated():
    items = [_c("root"), _c("reply", "root")]
    build_comment_tree(items)
    assert not hasattr(items[0], "replies")
