"""Run context shared by every package definition of a run."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from nfpm_pipe.config.nfpm import ProjectConfig
from nfpm_pipe.config.settings import PipeSettings
from nfpm_pipe.storage.artifact_store import ArtifactStore, InMemoryArtifactStore


@dataclass
class PipeContext:
    """Holds the configuration, artifacts and settings of one run."""

    config: ProjectConfig
    version: str
    artifacts: ArtifactStore = field(default_factory=InMemoryArtifactStore)
    env: Dict[str, str] = field(default_factory=dict)
    settings: PipeSettings = field(default_factory=PipeSettings)

    def __post_init__(self) -> None:
        if self.version is None:
            raise TypeError("version is required and cannot be None")
        self.settings.validate_or_raise()

    @property
    def dist(self) -> Path:
        return Path(self.config.dist or self.settings.dist)

    @property
    def parallelism(self) -> int:
        return self.settings.parallelism

    @property
    def skip_sign(self) -> bool:
        return self.settings.skip_sign

    @classmethod
    def from_environment(
        cls,
        config: ProjectConfig,
        version: str,
        artifacts: Optional[ArtifactStore] = None,
        settings: Optional[PipeSettings] = None,
    ) -> "PipeContext":
        return cls(
            config=config,
            version=version,
            artifacts=artifacts if artifacts is not None else InMemoryArtifactStore(),
            env=dict(os.environ),
            settings=settings or PipeSettings.from_environment(),
        )
