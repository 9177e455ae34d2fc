"""tree.json document management for Construct Tree."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from . import TREE_VERSION
from .errors import TreeDocumentError
from .merkle import TreeNode


class TreeDocument(BaseModel):
    """Persisted construct tree: a version tag and the root node."""

    version: str = TREE_VERSION
    tree: dict[str, Any]

    @field_validator("version")
    @classmethod
    def check_version(cls, value: str) -> str:
        if value != TREE_VERSION:
            raise ValueError(f"unsupported tree version {value!r}, expected {TREE_VERSION!r}")
        return value

    @classmethod
    def from_tree(cls, root: TreeNode) -> "TreeDocument":
        return cls(tree=root.to_dict())

    def root(self) -> TreeNode:
        """Deserialize the root node, parent references included."""
        try:
            return TreeNode.from_dict(self.tree)
        except (KeyError, TypeError, AttributeError) as e:
            raise TreeDocumentError(f"Malformed tree node: {e}") from e


def load_tree_document(path: Path) -> TreeDocument | None:
    """Load a tree document.

    Returns None if the file doesn't exist.
    """
    if not path.exists():
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return TreeDocument.model_validate(data)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        raise TreeDocumentError(f"Failed to read tree document {path}: {e}") from e


def read_tree(path: Path) -> TreeNode | None:
    """Load a tree document and return its root node, or None if missing."""
    document = load_tree_document(path)
    if document is None:
        return None
    return document.root()


def save_tree_document(document: TreeDocument, path: Path) -> None:
    """Write a tree document, pretty-printed."""
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(document.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
