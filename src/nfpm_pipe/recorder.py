"""Recording of produced packages in the artifact store."""

from __future__ import annotations

import logging
from typing import Sequence

from nfpm_pipe.domain.artifact import (
    EXTRA_BUILDS,
    EXTRA_FILES,
    EXTRA_FORMAT,
    EXTRA_ID,
    Artifact,
    ArtifactType,
)
from nfpm_pipe.domain.package_descriptor import PackageDescriptor
from nfpm_pipe.storage.artifact_store import ArtifactStore

logger = logging.getLogger(__name__)


class ResultRecorder:
    """Appends one Linux package artifact per successful task.

    Concurrency safety is provided by the store's own lock.
    """

    def __init__(self, store: ArtifactStore) -> None:
        self._store = store

    def record(
        self,
        descriptor: PackageDescriptor,
        name: str,
        path: str,
        binaries: Sequence[Artifact],
        nfpm_id: str,
        format: str,
    ) -> Artifact:
        reference = binaries[0]
        artifact = Artifact(
            name=name,
            path=path,
            type=ArtifactType.LINUX_PACKAGE,
            os=reference.os,
            arch=reference.arch,
            arm=reference.arm,
            mips=reference.mips,
            amd64=reference.amd64,
            extra={
                EXTRA_BUILDS: tuple(binaries),
                EXTRA_ID: nfpm_id,
                EXTRA_FORMAT: format,
                EXTRA_FILES: tuple(descriptor.contents),
            },
        )
        self._store.add(artifact)
        logger.debug(f"recorded {name} ({format}) for nfpm {nfpm_id}")
        return artifact
