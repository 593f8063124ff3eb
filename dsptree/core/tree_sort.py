# dsptree/core/tree_sort.py
from typing import List, Tuple
from .models import FileEntry, FolderNode, TreeNode

def node_sort_key(node: TreeNode) -> Tuple[int, str, str]:
    """
    Folders before files, then case-insensitive by display name (exact name breaks ties).

    Case folding is locale-independent: the order is the same whatever locale the process runs under.
    """
    if isinstance(node, FolderNode):
        rank = 0
    elif isinstance(node, FileEntry):
        rank = 1
    else:
        raise TypeError(f"Not a tree node: {node!r}")
    return (rank, node.name.casefold(), node.name)

def sort_nodes(nodes: List[TreeNode]) -> List[TreeNode]:
    """Sorts a sibling list in place, recursing into folders. Returns the same list."""
    nodes.sort(key=node_sort_key)
    for node in nodes:
        if isinstance(node, FolderNode):
            sort_nodes(node.children)
    return nodes

def sort_tree(folder: FolderNode) -> FolderNode:
    sort_nodes(folder.children)
    return folder
