from typing import Dict, Iterable, List


def build_comment_tree(comments: Iterable) -> List[dict]:
    """
    Turns a flat list of approved comments into a forest.

    Input order is kept at every level. A reply whose parent isn't in the
    list (pending, spam, trashed or deleted parent) is left out entirely.
    """
    comments = list(comments)
    nodes: Dict[str, dict] = {}
    for c in comments:
        node = c.to_public_dict()
        node["replies"] = []
        nodes[c.id] = node

    roots: List[dict] = []
    for c in comments:
        node = nodes[c.id]
        if c.parent_id is None:
            roots.append(node)
            continue
        parent = nodes.get(c.parent_id)
        if parent is not None:
            parent["replies"].append(node)

    return roots
