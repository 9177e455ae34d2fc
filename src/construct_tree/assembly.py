"""Cloud assembly output: artifact registration and manifest.json."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from . import ASSEMBLY_VERSION, MANIFEST_FILE, TREE_ARTIFACT_TYPE
from .errors import AssemblyError

logger = logging.getLogger(__name__)


class ArtifactManifest(BaseModel):
    """A single artifact entry in manifest.json."""

    type: str
    properties: dict[str, Any] = Field(default_factory=dict)


class AssemblyManifest(BaseModel):
    """Top-level manifest.json of a cloud assembly."""

    version: str = ASSEMBLY_VERSION
    artifacts: dict[str, ArtifactManifest] = Field(default_factory=dict)


@dataclass
class CloudAssembly:
    """A synthesized cloud assembly on disk."""

    outdir: Path
    manifest: AssemblyManifest

    def artifacts_of_type(self, artifact_type: str) -> dict[str, ArtifactManifest]:
        return {
            artifact_id: artifact
            for artifact_id, artifact in self.manifest.artifacts.items()
            if artifact.type == artifact_type
        }

    @property
    def tree_file(self) -> Path | None:
        """Path of the registered tree artifact, if any."""
        for artifact in self.artifacts_of_type(TREE_ARTIFACT_TYPE).values():
            file = artifact.properties.get("file")
            if file:
                return self.outdir / file
        return None


class CloudAssemblyBuilder:
    """Collects artifacts during synthesis and writes manifest.json."""

    def __init__(self, outdir: Path):
        self.outdir = outdir
        self.outdir.mkdir(parents=True, exist_ok=True)
        self._artifacts: dict[str, ArtifactManifest] = {}

    def add_artifact(self, artifact_id: str, type: str, properties: dict[str, Any] | None = None) -> None:
        """Register an artifact produced by this synthesis."""
        if artifact_id in self._artifacts:
            raise AssemblyError(f"Artifact already registered: {artifact_id}")
        self._artifacts[artifact_id] = ArtifactManifest(type=type, properties=properties or {})
        logger.debug("Registered artifact %s (%s)", artifact_id, type)

    def build_assembly(self) -> CloudAssembly:
        """Write manifest.json and return the finished assembly."""
        manifest = AssemblyManifest(artifacts=dict(self._artifacts))
        with open(self.outdir / MANIFEST_FILE, "w", encoding="utf-8") as f:
            json.dump(manifest.model_dump(mode="json"), f, indent=2)
        return CloudAssembly(outdir=self.outdir, manifest=manifest)


def load_assembly(outdir: Path) -> CloudAssembly:
    """Read an existing assembly from its manifest.json."""
    manifest_path = outdir / MANIFEST_FILE
    try:
        with open(manifest_path, encoding="utf-8") as f:
            data = json.load(f)
        manifest = AssemblyManifest.model_validate(data)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        raise AssemblyError(f"Failed to read {manifest_path}: {e}") from e
    return CloudAssembly(outdir=outdir, manifest=manifest)


@dataclass
class SynthesisSession:
    """State shared by everything synthesized in one pass."""

    outdir: Path
    assembly: CloudAssemblyBuilder
