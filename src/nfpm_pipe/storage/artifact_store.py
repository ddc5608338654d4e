"""Artifact store shared by the pipeline stages.

The store is the only resource mutated by concurrent packaging tasks, so every
access goes through a lock.
"""

from __future__ import annotations

import json
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from nfpm_pipe.domain.artifact import Artifact, ArtifactType, PlatformGroup, PlatformKey

ArtifactFilter = Callable[[Artifact], bool]


def by_type(artifact_type: ArtifactType) -> ArtifactFilter:
    return lambda artifact: artifact.type == artifact_type


def by_os(os_name: str) -> ArtifactFilter:
    return lambda artifact: artifact.os == os_name


def by_ids(*ids: str) -> ArtifactFilter:
    wanted = set(ids)
    return lambda artifact: artifact.build_id in wanted


def or_(*filters: ArtifactFilter) -> ArtifactFilter:
    return lambda artifact: any(f(artifact) for f in filters)


def and_(*filters: ArtifactFilter) -> ArtifactFilter:
    return lambda artifact: all(f(artifact) for f in filters)


class ArtifactStore(ABC):
    """Abstract artifact store."""

    @abstractmethod
    def add(self, artifact: Artifact) -> None:
        """Append an artifact; safe to call from concurrent tasks."""

    @abstractmethod
    def list(self) -> List[Artifact]:
        """Return a snapshot of every artifact, in insertion order."""

    @abstractmethod
    def filter(self, predicate: ArtifactFilter) -> "ArtifactStore":
        """Return a new store holding the artifacts matching ``predicate``."""

    def group_by_platform(self) -> Dict[PlatformKey, PlatformGroup]:
        """Group artifacts by (os, arch, arm/mips variant), keeping first-seen order."""
        grouped: Dict[PlatformKey, List[Artifact]] = {}
        for artifact in self.list():
            key = PlatformKey(os=artifact.os, arch=artifact.arch, variant=artifact.arm + artifact.mips)
            grouped.setdefault(key, []).append(artifact)
        return {key: PlatformGroup(key=key, binaries=tuple(binaries)) for key, binaries in grouped.items()}

    def __len__(self) -> int:
        return len(self.list())


class InMemoryArtifactStore(ArtifactStore):
    """Thread-safe in-memory artifact store."""

    def __init__(self, artifacts: Optional[Iterable[Artifact]] = None) -> None:
        self._artifacts: List[Artifact] = list(artifacts or [])
        self._lock = threading.Lock()

    def add(self, artifact: Artifact) -> None:
        with self._lock:
            self._artifacts.append(artifact)

    def list(self) -> List[Artifact]:
        with self._lock:
            return list(self._artifacts)

    def filter(self, predicate: ArtifactFilter) -> "InMemoryArtifactStore":
        return InMemoryArtifactStore(a for a in self.list() if predicate(a))

    @classmethod
    def load(cls, path: Path) -> "InMemoryArtifactStore":
        """Load a store from a JSON manifest (a list of artifact objects)."""
        if not path.exists():
            return cls()
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        return cls(Artifact.from_dict(item) for item in data)

    def save(self, path: Path) -> None:
        """Write the store to a JSON manifest, replacing the file atomically."""
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([a.to_dict() for a in self.list()], indent=2)
        with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding="utf-8") as tmp:
            tmp.write(payload)
            tmp_path = Path(tmp.name)
        tmp_path.replace(path)
