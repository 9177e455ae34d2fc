"""Exceptions raised by Construct Tree."""


class TreeError(Exception):
    """Base exception for construct tree errors."""

    pass


class ConstructError(TreeError):
    """Invalid construct id or duplicate sibling."""

    pass


class TreeNotBuiltError(TreeError, RuntimeError):
    """A tree query was made before the tree was synthesized."""

    pass


class UnknownPathError(TreeError, LookupError):
    """No node exists at the requested construct path."""

    def __init__(self, path: str):
        super().__init__(f"No tree node found for path: {path!r}")
        self.path = path


class TreeDocumentError(TreeError):
    """A persisted tree document could not be read."""

    pass


class AssemblyError(TreeError):
    """Artifact registration failed."""

    pass


class ConfigError(TreeError):
    """The project configuration file could not be read."""

    pass
