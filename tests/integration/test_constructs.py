"""Tests for the construct model consumed by the tree builder."""

import logging

import pytest

from construct_tree.app import App
from construct_tree.config import TreeConfig
from construct_tree.constructs import (
    Annotations,
    CfnResource,
    Construct,
    Inspectable,
    inspect_attributes,
    iter_annotations,
)
from construct_tree.errors import ConstructError


@pytest.fixture
def app(tmp_path):
    return App(outdir=tmp_path, tree_metadata=False, config=TreeConfig())


class TestConstructHierarchy:
    """Tests for ids, paths and children."""

    def test_paths_join_ids(self, app):
        stack = Construct(app, "Stack")
        bucket = Construct(stack, "Bucket")

        assert app.path == ""
        assert stack.path == "Stack"
        assert bucket.path == "Stack/Bucket"
        assert bucket.root is app

    def test_children_keep_insertion_order(self, app):
        Construct(app, "B")
        Construct(app, "A")

        assert [c.id for c in app.children] == ["B", "A"]

    def test_duplicate_sibling_rejected(self, app):
        Construct(app, "Stack")
        with pytest.raises(ConstructError):
            Construct(app, "Stack")

    def test_slash_in_id_rejected(self, app):
        with pytest.raises(ConstructError):
            Construct(app, "a/b")

    def test_empty_id_rejected_below_root(self, app):
        with pytest.raises(ConstructError):
            Construct(app, "")

    def test_find_all_is_preorder(self, app):
        stack = Construct(app, "Stack")
        Construct(stack, "Table")
        Construct(app, "Other")

        assert [c.path for c in app.find_all()] == ["", "Stack", "Stack/Table", "Other"]


class TestInspection:
    """Tests for the optional inspection capability."""

    def test_plain_construct_has_no_attributes(self, app):
        plain = Construct(app, "Plain")

        assert not isinstance(plain, Inspectable)
        assert inspect_attributes(plain) is None

    def test_cfn_resource_reports_type_and_props(self, app):
        resource = CfnResource(app, "Table", cfn_type="AWS::DynamoDB::Table", properties={"a": 1})

        assert isinstance(resource, Inspectable)
        assert inspect_attributes(resource) == {
            "aws:cdk:cloudformation:type": "AWS::DynamoDB::Table",
            "aws:cdk:cloudformation:props": {"a": 1},
        }


class TestAnnotations:
    """Tests for diagnostic messages."""

    def test_warning_is_recorded_and_logged(self, app, caplog):
        stack = Construct(app, "Stack")

        with caplog.at_level(logging.WARNING, logger="construct_tree.constructs"):
            Annotations.of(stack).add_warning("something odd")

        assert [(a.level, a.message, a.path) for a in stack.annotations] == [
            ("warning", "something odd", "Stack")
        ]
        assert "something odd" in caplog.text

    def test_iter_annotations_filters_by_level(self, app):
        stack = Construct(app, "Stack")
        Annotations.of(app).add_info("hello")
        Annotations.of(stack).add_error("broken")

        assert [a.message for a in iter_annotations(app)] == ["hello", "broken"]
        assert [a.message for a in iter_annotations(app, level="error")] == ["broken"]
