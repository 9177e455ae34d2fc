"""Top-level App construct and the synthesis entry point."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .assembly import CloudAssembly, CloudAssemblyBuilder, SynthesisSession
from .config import TreeConfig, load_config
from .constructs import Construct
from .merkle import SynthDiff
from .metadata import TreeMetadata

logger = logging.getLogger(__name__)


@dataclass
class SynthResult:
    """Output of App.synth()."""

    assembly: CloudAssembly
    diff: SynthDiff = field(default_factory=SynthDiff)


class App(Construct):
    """Root of a construct tree."""

    def __init__(
        self,
        outdir: Path | str | None = None,
        tree_metadata: bool | None = None,
        config: TreeConfig | None = None,
    ):
        super().__init__(None, "")
        self.config = config or load_config(Path.cwd())
        self.outdir = Path(outdir if outdir is not None else self.config.outdir)

        if tree_metadata is None:
            tree_metadata = self.config.tree_metadata
        self._tree_metadata = TreeMetadata(self) if tree_metadata else None

    @property
    def tree_metadata(self) -> TreeMetadata | None:
        return self._tree_metadata

    def synth(self) -> SynthResult:
        """Synthesize the app into a cloud assembly under outdir."""
        builder = CloudAssemblyBuilder(self.outdir)
        session = SynthesisSession(outdir=self.outdir, assembly=builder)

        diff = SynthDiff()
        if self._tree_metadata is not None:
            diff = self._tree_metadata.synthesize_tree(session)

        assembly = builder.build_assembly()
        logger.debug("Synthesized assembly to %s", self.outdir)
        return SynthResult(assembly=assembly, diff=diff)
