"""Construct Tree - content-hashed construct tree snapshots and diffs."""

__version__ = "0.1.0"

# Directory and file constants
OUT_DIR = "cdk.out"
TREE_FILE = "tree.json"
MANIFEST_FILE = "manifest.json"
CONFIG_FILE = "ctree.json"

# Persisted schema markers
TREE_VERSION = "tree-0.1"
TREE_ARTIFACT_ID = "Tree"
TREE_ARTIFACT_TYPE = "cdk:tree"
ASSEMBLY_VERSION = "36.0.0"
