"""Shared test fixtures for construct-tree."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from construct_tree.app import App
from construct_tree.config import TreeConfig
from construct_tree.constructs import CfnResource, Construct


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep CTREE_* variables from the outer environment out of tests."""
    for name in ("CTREE_OUTDIR", "CTREE_TREE_METADATA", "CTREE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner():
    """Click CLI test runner."""
    return CliRunner()


def build_sample_app(
    outdir: Path,
    with_bucket: bool = True,
    table_props: dict | None = None,
) -> App:
    """Build a small app with one stack.

    Structure:
        <root>
        ├── Tree
        └── Stack
            ├── Table
            │   └── Resource   (AWS::DynamoDB::Table)
            └── Bucket         (optional)
                └── Resource   (AWS::S3::Bucket)
    """
    app = App(outdir=outdir, config=TreeConfig())
    stack = Construct(app, "Stack")

    table = Construct(stack, "Table")
    CfnResource(
        table,
        "Resource",
        cfn_type="AWS::DynamoDB::Table",
        properties=table_props or {"billingMode": "PAY_PER_REQUEST", "keySchema": [{"attributeName": "pk", "keyType": "HASH"}]},
    )

    if with_bucket:
        bucket = Construct(stack, "Bucket")
        CfnResource(bucket, "Resource", cfn_type="AWS::S3::Bucket", properties={"versioned": True})

    return app


@pytest.fixture
def sample_app(tmp_path: Path) -> App:
    """A sample app writing to tmp_path/cdk.out."""
    return build_sample_app(tmp_path / "cdk.out")


@pytest.fixture
def synthesized_outdir(tmp_path: Path) -> Path:
    """An assembly directory holding one synthesized sample app."""
    outdir = tmp_path / "cdk.out"
    build_sample_app(outdir).synth()
    return outdir


@pytest.fixture
def app_factory():
    """Factory for sample apps, for tests that synthesize more than once."""
    return build_sample_app
