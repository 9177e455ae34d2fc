"""Content-hashed construct tree: building, diffing and branch extraction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from .canonical import compute_node_hash
from .constructs import Construct, ConstructInfo, inspect_attributes
from .errors import UnknownPathError

logger = logging.getLogger(__name__)

ROOT_ID = "App"


@dataclass
class TreeNode:
    """A node in the construct tree snapshot."""

    id: str
    path: str  # Slash-delimited ids from the top-level construct
    hash: str
    children: dict[str, TreeNode] | None = None  # None for leaves
    attributes: dict[str, Any] | None = None  # None for plain constructs
    construct_info: ConstructInfo | None = None
    parent_path: str | None = field(default=None, compare=False)  # Never persisted

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def to_dict(self) -> dict[str, Any]:
        """Serialize for tree.json; the parent reference is left out."""
        result: dict[str, Any] = {
            "id": self.id,
            "path": self.path,
        }
        if self.children:
            result["children"] = {
                name: child.to_dict() for name, child in self.children.items()
            }
        if self.attributes is not None:
            result["attributes"] = self.attributes
        result["hash"] = self.hash
        if self.construct_info is not None:
            result["constructInfo"] = self.construct_info.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], parent_path: str | None = None) -> TreeNode:
        """Deserialize, restoring parent references from nesting."""
        path = data["path"]
        children = None
        if data.get("children"):
            # The root's path is empty, so its children keep no parent reference
            child_parent = path or None
            children = {
                name: cls.from_dict(child_data, parent_path=child_parent)
                for name, child_data in data["children"].items()
            }
        info = data.get("constructInfo")
        return cls(
            id=data["id"],
            path=path,
            hash=data["hash"],
            children=children,
            attributes=data.get("attributes"),
            construct_info=ConstructInfo.from_dict(info) if info else None,
            parent_path=parent_path,
        )


@dataclass
class TreeBuild:
    """Result of a single tree build."""

    root: TreeNode
    lookup: dict[str, TreeNode]  # path -> node
    warnings: list[str] = field(default_factory=list)


@dataclass
class SynthDiff:
    """Leaves that disappeared or appeared between two trees, as hash -> path."""

    removed: dict[str, str] = field(default_factory=dict)
    added: dict[str, str] = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.removed or self.added)

    @property
    def total_changes(self) -> int:
        return len(self.removed) + len(self.added)


def build_tree(root: Construct) -> TreeBuild:
    """
    Snapshot a construct hierarchy into a hashed tree.

    A child whose visit raises is dropped and reported in the returned
    warnings; the rest of the tree is still built. A root that fails to
    render is kept without attributes and reported the same way.

    Args:
        root: Construct to start from (normally the App)

    Returns:
        TreeBuild with the root node, a path lookup and any warnings
    """
    lookup: dict[str, TreeNode] = {}
    warnings: list[str] = []
    children = _visit_children(root, lookup, warnings)
    try:
        root_node = _make_node(root, children, inspect_attributes(root), lookup)
    except Exception as e:
        # Keep the root, hashed by its children alone
        warnings.append(_failure_message(root.id or ROOT_ID, e))
        root_node = _make_node(root, children, None, lookup)
    logger.debug("Built construct tree with %d nodes", len(lookup))
    return TreeBuild(root=root_node, lookup=lookup, warnings=warnings)


def _failure_message(node_id: str, error: Exception) -> str:
    return f"Failed to render tree metadata for node [{node_id}]. Reason: {error}"


def _visit(construct: Construct, lookup: dict[str, TreeNode], warnings: list[str]) -> TreeNode:
    """Post-order visit: children are hashed before their parent."""
    children = _visit_children(construct, lookup, warnings)
    return _make_node(construct, children, inspect_attributes(construct), lookup)


def _visit_children(
    construct: Construct, lookup: dict[str, TreeNode], warnings: list[str]
) -> dict[str, TreeNode]:
    children: dict[str, TreeNode] = {}
    for child in construct.children:
        try:
            child_node = _visit(child, lookup, warnings)
        except Exception as e:
            warnings.append(_failure_message(child.id, e))
            continue
        children[child_node.id] = child_node
    return children


def _make_node(
    construct: Construct,
    children: dict[str, TreeNode],
    attributes: dict[str, Any] | None,
    lookup: dict[str, TreeNode],
) -> TreeNode:
    scope = construct.scope

    node = TreeNode(
        id=construct.id or ROOT_ID,
        path=construct.path,
        hash=compute_node_hash(attributes, [c.hash for c in children.values()]),
        children=children or None,
        attributes=attributes,
        construct_info=construct.construct_info,
        parent_path=scope.path if scope is not None and scope.path else None,
    )
    lookup[node.path] = node
    return node


def build_path_lookup(node: TreeNode, lookup: dict[str, TreeNode] | None = None) -> dict[str, TreeNode]:
    """Build a flat lookup table of path -> node from a tree."""
    if lookup is None:
        lookup = {}
    lookup[node.path] = node
    for child in (node.children or {}).values():
        build_path_lookup(child, lookup)
    return lookup


def leaf_hashes(node: TreeNode) -> dict[str, str]:
    """Map hash -> path for every leaf under node."""
    result: dict[str, str] = {}

    def visit(n: TreeNode) -> None:
        if n.is_leaf:
            result[n.hash] = n.path
        else:
            for child in n.children.values():
                visit(child)

    visit(node)
    return result


def tree_difference(t1: TreeNode, t2: TreeNode) -> dict[str, str]:
    """Leaves of t1 whose path does not occur among the leaves of t2.

    The join key is the path: a leaf whose hash changed in place is not
    reported.
    """
    other_paths = set(leaf_hashes(t2).values())
    return {h: path for h, path in leaf_hashes(t1).items() if path not in other_paths}


def diff_trees(old: TreeNode, new: TreeNode) -> SynthDiff:
    """Compare an old tree with a new one."""
    return SynthDiff(
        removed=tree_difference(old, new),
        added=tree_difference(new, old),
    )


def extract_branch(lookup: dict[str, TreeNode], path: str) -> TreeNode:
    """
    Rebuild the single branch leading to the node at path.

    Ancestors are resolved through their parent paths and each one keeps
    only the child on the way to the target. The target keeps its own
    children.

    Raises:
        UnknownPathError: if path (or one of its ancestors) is not in lookup
    """
    if path not in lookup:
        raise UnknownPathError(path)

    branch = lookup[path]
    while branch.parent_path is not None:
        parent = lookup.get(branch.parent_path)
        if parent is None:
            raise UnknownPathError(branch.parent_path)
        branch = replace(parent, children={branch.id: branch})
    return branch
