"""Selection of the binaries that go into a package definition."""

from __future__ import annotations

import logging
from typing import List, Sequence

from nfpm_pipe.domain.artifact import ArtifactType, PlatformGroup
from nfpm_pipe.exceptions import NoMatchingBinariesError
from nfpm_pipe.storage.artifact_store import ArtifactStore, and_, by_ids, by_os, by_type, or_

logger = logging.getLogger(__name__)


def select_linux_binaries(store: ArtifactStore, builds: Sequence[str]) -> List[PlatformGroup]:
    """Select Linux and iOS binaries of the given builds, grouped by platform.

    Args:
        store: Artifact store of the run
        builds: Build IDs to select; empty selects every build

    Returns:
        Platform groups in first-seen order

    Raises:
        NoMatchingBinariesError: If nothing matches
    """
    filters = [by_type(ArtifactType.BINARY), or_(by_os("linux"), by_os("ios"))]
    if builds:
        filters.append(by_ids(*builds))
    groups = list(store.filter(and_(*filters)).group_by_platform().values())
    if not groups:
        raise NoMatchingBinariesError(list(builds))
    logger.debug(f"selected {len(groups)} platform group(s) for builds {list(builds)}")
    return groups
