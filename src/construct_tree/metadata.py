"""Tree metadata synthesis: writes tree.json and reports what changed."""

from __future__ import annotations

import logging

from . import TREE_ARTIFACT_ID, TREE_ARTIFACT_TYPE, TREE_FILE
from .assembly import SynthesisSession
from .constructs import Annotations, Construct
from .errors import TreeDocumentError, TreeNotBuiltError
from .manifest import TreeDocument, read_tree, save_tree_document
from .merkle import SynthDiff, TreeNode, build_tree, diff_trees, extract_branch

logger = logging.getLogger(__name__)


class TreeMetadata(Construct):
    """
    Construct attached to the top-level App that writes tree.json.

    The file holds the whole construct hierarchy with the attributes and
    content hash of each node.
    """

    def __init__(self, scope: Construct):
        super().__init__(scope, TREE_ARTIFACT_ID)
        self._lookup: dict[str, TreeNode] | None = None

    def synthesize_tree(self, session: SynthesisSession) -> SynthDiff:
        """
        Build the tree, diff it against the previous tree.json and overwrite it.

        Args:
            session: The current synthesis session

        Returns:
            SynthDiff against the tree persisted by the previous pass
            (empty if there was none)
        """
        build = build_tree(self.root)
        for warning in build.warnings:
            Annotations.of(self).add_warning(warning)
        self._lookup = build.lookup

        tree_path = session.outdir / TREE_FILE
        previous = self._read_previous(session)
        diff = diff_trees(previous, build.root) if previous is not None else SynthDiff()

        save_tree_document(TreeDocument.from_tree(build.root), tree_path)
        session.assembly.add_artifact(
            TREE_ARTIFACT_ID,
            type=TREE_ARTIFACT_TYPE,
            properties={"file": TREE_FILE},
        )

        logger.info(
            "Wrote %s (%d nodes, %d removed, %d added)",
            tree_path,
            len(build.lookup),
            len(diff.removed),
            len(diff.added),
        )
        return diff

    def _read_previous(self, session: SynthesisSession) -> TreeNode | None:
        try:
            return read_tree(session.outdir / TREE_FILE)
        except TreeDocumentError as e:
            logger.warning("Ignoring previous tree: %s", e)
            return None

    def get_node_branch(self, construct_path: str) -> TreeNode:
        """
        Return the branch of the tree leading to construct_path.

        Raises:
            TreeNotBuiltError: if called before synthesize_tree()
            UnknownPathError: if no node exists at construct_path
        """
        if self._lookup is None:
            raise TreeNotBuiltError(
                f"attempting to get node branch for {construct_path}, "
                "but the tree has not been created yet!"
            )
        return extract_branch(self._lookup, construct_path)

    def get_node(self, construct_path: str) -> TreeNode | None:
        """Look up a single node from the last synthesized tree."""
        if self._lookup is None:
            raise TreeNotBuiltError(
                f"attempting to get node {construct_path}, but the tree has not been created yet!"
            )
        return self._lookup.get(construct_path)
