"""Domain objects for the Linux packages pipe."""

from nfpm_pipe.domain.artifact import Artifact, ArtifactType, PlatformGroup, PlatformKey
from nfpm_pipe.domain.package_descriptor import ContentEntry, ContentFileInfo, PackageDescriptor

__all__ = [
    "Artifact",
    "ArtifactType",
    "ContentEntry",
    "ContentFileInfo",
    "PackageDescriptor",
    "PlatformGroup",
    "PlatformKey",
]
