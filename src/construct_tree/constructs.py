"""Minimal construct model consumed by the tree builder."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, runtime_checkable

from . import __version__
from .errors import ConstructError

logger = logging.getLogger(__name__)

PATH_SEP = "/"

AnnotationLevel = Literal["info", "warning", "error"]

_LOG_LEVELS = {
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class ConstructInfo:
    """Class information recorded for each node in the tree."""

    fqn: str
    version: str

    def to_dict(self) -> dict[str, str]:
        return {"fqn": self.fqn, "version": self.version}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConstructInfo:
        return cls(fqn=data["fqn"], version=data["version"])


@dataclass(frozen=True)
class Annotation:
    """A diagnostic message attached to a construct."""

    level: AnnotationLevel
    message: str
    path: str


class Construct:
    """A node in the construct hierarchy."""

    def __init__(self, scope: Construct | None, id: str):
        if scope is not None and not id:
            raise ConstructError("Only the root construct may have an empty id")
        if PATH_SEP in id:
            raise ConstructError(f"Construct id cannot contain '{PATH_SEP}': {id!r}")

        self.id = id
        self.scope = scope
        self._children: dict[str, Construct] = {}
        self.annotations: list[Annotation] = []

        if scope is not None:
            scope._add_child(self)

    def _add_child(self, child: Construct) -> None:
        if child.id in self._children:
            raise ConstructError(
                f"There is already a construct with id {child.id!r} in {self.path or '<root>'}"
            )
        self._children[child.id] = child

    @property
    def children(self) -> list[Construct]:
        """Direct children in insertion order."""
        return list(self._children.values())

    @property
    def path(self) -> str:
        """Ids from the top-level construct down to this one."""
        ids: list[str] = []
        node: Construct | None = self
        while node is not None:
            if node.id:
                ids.append(node.id)
            node = node.scope
        return PATH_SEP.join(reversed(ids))

    @property
    def root(self) -> Construct:
        node = self
        while node.scope is not None:
            node = node.scope
        return node

    @property
    def construct_info(self) -> ConstructInfo:
        cls = type(self)
        return ConstructInfo(fqn=f"{cls.__module__}.{cls.__qualname__}", version=__version__)

    def find_child(self, id: str) -> Construct | None:
        return self._children.get(id)

    def find_all(self) -> Iterator[Construct]:
        """Walk this construct and all descendants in pre-order."""
        yield self
        for child in self._children.values():
            yield from child.find_all()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.path or '<root>'}>"


class Annotations:
    """Adds diagnostic messages to a construct."""

    def __init__(self, scope: Construct):
        self._scope = scope

    @classmethod
    def of(cls, scope: Construct) -> Annotations:
        return cls(scope)

    def add_info(self, message: str) -> None:
        self._add("info", message)

    def add_warning(self, message: str) -> None:
        self._add("warning", message)

    def add_error(self, message: str) -> None:
        self._add("error", message)

    def _add(self, level: AnnotationLevel, message: str) -> None:
        annotation = Annotation(level=level, message=message, path=self._scope.path)
        self._scope.annotations.append(annotation)
        logger.log(_LOG_LEVELS[level], "[%s] %s", annotation.path or "<root>", message)


class TreeInspector:
    """Collects the attributes an inspectable construct reports."""

    def __init__(self):
        self.attributes: dict[str, Any] = {}

    def add_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value


@runtime_checkable
class Inspectable(Protocol):
    """Capability of constructs that expose attributes to the tree."""

    def inspect(self, inspector: TreeInspector) -> None: ...


def inspect_attributes(construct: Construct) -> dict[str, Any] | None:
    """Collect attributes from an inspectable construct.

    Returns None for plain constructs so the node hash falls back to its
    children.
    """
    if not isinstance(construct, Inspectable):
        return None
    inspector = TreeInspector()
    construct.inspect(inspector)
    return inspector.attributes


class CfnResource(Construct):
    """A generic CloudFormation resource."""

    def __init__(
        self,
        scope: Construct,
        id: str,
        cfn_type: str,
        properties: dict[str, Any] | None = None,
    ):
        super().__init__(scope, id)
        self.cfn_type = cfn_type
        self.properties: dict[str, Any] = dict(properties or {})

    def inspect(self, inspector: TreeInspector) -> None:
        inspector.add_attribute("aws:cdk:cloudformation:type", self.cfn_type)
        inspector.add_attribute("aws:cdk:cloudformation:props", self.properties)


def iter_annotations(scope: Construct, level: AnnotationLevel | None = None) -> list[Annotation]:
    """Gather annotations from a construct and its descendants."""
    found: list[Annotation] = []
    for construct in scope.find_all():
        for annotation in construct.annotations:
            if level is None or annotation.level == level:
                found.append(annotation)
    return found
