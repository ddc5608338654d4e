"""Format-agnostic package descriptor handed to packaging backends.

The descriptor is fully resolved: every templated field has already been
expanded and every override has been applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ContentFileInfo:
    """File mode and ownership metadata for a content entry."""

    mode: int = 0
    owner: str = ""
    group: str = ""
    mtime: str = ""

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.mode:
            result["mode"] = self.mode
        if self.owner:
            result["owner"] = self.owner
        if self.group:
            result["group"] = self.group
        if self.mtime:
            result["mtime"] = self.mtime
        return result


@dataclass(frozen=True)
class ContentEntry:
    """One file, directory or symlink placed into the package.

    Attributes:
        source: Source path on the local file system
        destination: Path inside the package
        type: Content type ("", "dir", "symlink", "config", "config|noreplace", ...)
        packager: Restricts the entry to one packager family (e.g., "deb"), empty for all
        file_info: Optional mode/ownership metadata
    """

    source: str
    destination: str
    type: str = ""
    packager: str = ""
    file_info: Optional[ContentFileInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"src": self.source, "dst": self.destination}
        if self.type:
            result["type"] = self.type
        if self.packager:
            result["packager"] = self.packager
        if self.file_info is not None and self.file_info.to_dict():
            result["file_info"] = self.file_info.to_dict()
        return result


@dataclass(frozen=True)
class PackageSignature:
    key_file: str = ""
    key_id: str = ""
    key_passphrase: str = field(default="", repr=False)


@dataclass(frozen=True)
class DebSignature(PackageSignature):
    type: str = ""


@dataclass(frozen=True)
class RPMSignature(PackageSignature):
    pass


@dataclass(frozen=True)
class APKSignature(PackageSignature):
    key_name: str = ""


@dataclass(frozen=True)
class Scripts:
    preinstall: str = ""
    postinstall: str = ""
    preremove: str = ""
    postremove: str = ""


@dataclass(frozen=True)
class DebScripts:
    rules: str = ""
    templates: str = ""


@dataclass(frozen=True)
class DebTriggers:
    interest: List[str] = field(default_factory=list)
    interest_await: List[str] = field(default_factory=list)
    interest_noawait: List[str] = field(default_factory=list)
    activate: List[str] = field(default_factory=list)
    activate_await: List[str] = field(default_factory=list)
    activate_noawait: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Deb:
    scripts: DebScripts = field(default_factory=DebScripts)
    triggers: DebTriggers = field(default_factory=DebTriggers)
    breaks: List[str] = field(default_factory=list)
    signature: DebSignature = field(default_factory=DebSignature)


@dataclass(frozen=True)
class RPMScripts:
    pretrans: str = ""
    posttrans: str = ""


@dataclass(frozen=True)
class RPM:
    summary: str = ""
    group: str = ""
    compression: str = ""
    signature: RPMSignature = field(default_factory=RPMSignature)
    scripts: RPMScripts = field(default_factory=RPMScripts)


@dataclass(frozen=True)
class UpgradeScripts:
    preupgrade: str = ""
    postupgrade: str = ""


@dataclass(frozen=True)
class APK:
    signature: APKSignature = field(default_factory=APKSignature)
    scripts: UpgradeScripts = field(default_factory=UpgradeScripts)


@dataclass(frozen=True)
class ArchLinux:
    pkgbase: str = ""
    packager: str = ""
    scripts: UpgradeScripts = field(default_factory=UpgradeScripts)


@dataclass(frozen=True)
class PackageDescriptor:
    """Everything a packaging backend needs to write one package file."""

    name: str
    version: str
    arch: str
    platform: str = "linux"
    epoch: str = ""
    release: str = ""
    prerelease: str = ""
    version_metadata: str = ""
    section: str = ""
    priority: str = ""
    maintainer: str = ""
    description: str = ""
    vendor: str = ""
    homepage: str = ""
    license: str = ""
    changelog: str = ""
    depends: List[str] = field(default_factory=list)
    recommends: List[str] = field(default_factory=list)
    suggests: List[str] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    replaces: List[str] = field(default_factory=list)
    provides: List[str] = field(default_factory=list)
    contents: List[ContentEntry] = field(default_factory=list)
    scripts: Scripts = field(default_factory=Scripts)
    deb: Deb = field(default_factory=Deb)
    rpm: RPM = field(default_factory=RPM)
    apk: APK = field(default_factory=APK)
    archlinux: ArchLinux = field(default_factory=ArchLinux)

    def with_defaults(self) -> "PackageDescriptor":
        """Fill in the values every backend expects to be present."""
        return replace(
            self,
            platform=self.platform or "linux",
            arch=self.arch or "amd64",
            description=self.description or "no description given",
            priority=self.priority or "optional",
        )

    def without_signatures(self) -> "PackageDescriptor":
        """Return a copy with every signature block cleared."""
        return replace(
            self,
            deb=replace(self.deb, signature=DebSignature()),
            rpm=replace(self.rpm, signature=RPMSignature()),
            apk=replace(self.apk, signature=APKSignature()),
        )

    @property
    def destinations(self) -> List[str]:
        return [entry.destination for entry in self.contents]
