"""Artifact domain objects.

Binary artifacts are produced upstream and are read-only here. Linux package
artifacts are created by this pipe and appended once to the artifact store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

EXTRA_ID = "ID"
EXTRA_BUILDS = "Builds"
EXTRA_FORMAT = "Format"
EXTRA_FILES = "Files"


class ArtifactType(str, Enum):
    """Kinds of artifacts held by the artifact store."""

    BINARY = "Binary"
    UPLOADABLE_ARCHIVE = "Archive"
    LINUX_PACKAGE = "Linux Package"


@dataclass(frozen=True, eq=False)
class Artifact:
    """One entry of the artifact store.

    Attributes:
        name: Logical name (binary name or package file name)
        path: Location of the file on disk
        type: Artifact kind
        os: Target operating system (e.g., "linux", "ios")
        arch: Target architecture (e.g., "amd64", "arm64")
        arm: ARM revision, empty when not applicable (e.g., "6", "7")
        mips: MIPS float variant, empty when not applicable (e.g., "softfloat")
        amd64: AMD64 microarchitecture level, empty when not applicable (e.g., "v1")
        extra: Free-form metadata (build ID, format, contents, ...)
    """

    name: str
    path: str
    type: ArtifactType = ArtifactType.BINARY
    os: str = ""
    arch: str = ""
    arm: str = ""
    mips: str = ""
    amd64: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def build_id(self) -> str:
        return str(self.extra.get(EXTRA_ID, ""))

    @property
    def info_arch(self) -> str:
        """Architecture used for conventional naming (excludes the AMD64 level)."""
        return self.arch + self.arm + self.mips

    @property
    def unique_arch(self) -> str:
        """Architecture key that also includes the AMD64 level."""
        return self.info_arch + self.amd64

    def to_dict(self) -> Dict[str, Any]:
        extra: Dict[str, Any] = {}
        for key, value in self.extra.items():
            if key == EXTRA_BUILDS:
                extra[key] = [binary if isinstance(binary, str) else binary.name for binary in value]
            elif key == EXTRA_FILES:
                extra[key] = [entry if isinstance(entry, Mapping) else entry.to_dict() for entry in value]
            else:
                extra[key] = value
        return {
            "name": self.name,
            "path": self.path,
            "type": self.type.value,
            "goos": self.os,
            "goarch": self.arch,
            "goarm": self.arm,
            "gomips": self.mips,
            "goamd64": self.amd64,
            "extra": extra,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Artifact":
        return cls(
            name=data["name"],
            path=data["path"],
            type=ArtifactType(data.get("type", ArtifactType.BINARY.value)),
            os=data.get("goos", ""),
            arch=data.get("goarch", ""),
            arm=data.get("goarm", ""),
            mips=data.get("gomips", ""),
            amd64=data.get("goamd64", ""),
            extra=dict(data.get("extra") or {}),
        )


@dataclass(frozen=True)
class PlatformKey:
    """Grouping key for binaries built for the same platform.

    The AMD64 level is intentionally not part of the key.
    """

    os: str
    arch: str
    variant: str = ""

    def __str__(self) -> str:
        return f"{self.os}_{self.arch}{self.variant}"


@dataclass(frozen=True)
class PlatformGroup:
    """Binaries sharing one platform key; packaged together per format."""

    key: PlatformKey
    binaries: Tuple[Artifact, ...]

    def __post_init__(self) -> None:
        if not self.binaries:
            raise ValueError("Platform group requires at least one binary")

    @property
    def reference(self) -> Artifact:
        """The binary whose metadata names the package."""
        return self.binaries[0]
