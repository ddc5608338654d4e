"""Pydantic models for ``nfpms`` package definitions.

Every field of an override-able block is optional and defaults to ``None`` so
that "not supplied" can be told apart from a supplied value when a per-format
override is layered on top of the shared configuration. Nested blocks default
to empty instances of their model.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Block(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class FileInfoConfig(_Block):
    """Mode and ownership of a content entry."""

    owner: Optional[str] = None
    group: Optional[str] = None
    mode: Optional[int] = None
    mtime: Optional[str] = None


class ContentConfig(_Block):
    """One ``contents`` entry as written by the user."""

    source: str = Field(default="", alias="src")
    destination: str = Field(alias="dst")
    type: str = ""
    packager: str = ""
    file_info: Optional[FileInfoConfig] = None


class ScriptsConfig(_Block):
    preinstall: Optional[str] = None
    postinstall: Optional[str] = None
    preremove: Optional[str] = None
    postremove: Optional[str] = None


class SignatureConfig(_Block):
    key_file: Optional[str] = None


class RPMScriptsConfig(_Block):
    pretrans: Optional[str] = None
    posttrans: Optional[str] = None


class RPMConfig(_Block):
    summary: Optional[str] = None
    group: Optional[str] = None
    compression: Optional[str] = None
    signature: SignatureConfig = Field(default_factory=SignatureConfig)
    scripts: RPMScriptsConfig = Field(default_factory=RPMScriptsConfig)


class DebScriptsConfig(_Block):
    rules: Optional[str] = None
    templates: Optional[str] = None


class DebTriggersConfig(_Block):
    interest: Optional[List[str]] = None
    interest_await: Optional[List[str]] = None
    interest_noawait: Optional[List[str]] = None
    activate: Optional[List[str]] = None
    activate_await: Optional[List[str]] = None
    activate_noawait: Optional[List[str]] = None


class DebSignatureConfig(SignatureConfig):
    type: Optional[str] = None


class DebConfig(_Block):
    scripts: DebScriptsConfig = Field(default_factory=DebScriptsConfig)
    triggers: DebTriggersConfig = Field(default_factory=DebTriggersConfig)
    breaks: Optional[List[str]] = None
    signature: DebSignatureConfig = Field(default_factory=DebSignatureConfig)
    lintian_overrides: Optional[List[str]] = None


class APKSignatureConfig(SignatureConfig):
    key_name: Optional[str] = None


class UpgradeScriptsConfig(_Block):
    preupgrade: Optional[str] = None
    postupgrade: Optional[str] = None


class APKConfig(_Block):
    signature: APKSignatureConfig = Field(default_factory=APKSignatureConfig)
    scripts: UpgradeScriptsConfig = Field(default_factory=UpgradeScriptsConfig)


class ArchLinuxConfig(_Block):
    pkgbase: Optional[str] = None
    packager: Optional[str] = None
    scripts: UpgradeScriptsConfig = Field(default_factory=UpgradeScriptsConfig)


class NFPMOverridables(_Block):
    """Fields that may be overridden per output format."""

    file_name_template: Optional[str] = None
    package_name: Optional[str] = None
    epoch: Optional[str] = None
    release: Optional[str] = None
    prerelease: Optional[str] = None
    version_metadata: Optional[str] = None
    replacements: Optional[Dict[str, str]] = None
    dependencies: Optional[List[str]] = None
    recommends: Optional[List[str]] = None
    suggests: Optional[List[str]] = None
    conflicts: Optional[List[str]] = None
    replaces: Optional[List[str]] = None
    provides: Optional[List[str]] = None
    contents: Optional[List[ContentConfig]] = None
    scripts: ScriptsConfig = Field(default_factory=ScriptsConfig)
    rpm: RPMConfig = Field(default_factory=RPMConfig)
    deb: DebConfig = Field(default_factory=DebConfig)
    apk: APKConfig = Field(default_factory=APKConfig)
    archlinux: ArchLinuxConfig = Field(default_factory=ArchLinuxConfig)


class NFPMConfig(NFPMOverridables):
    """One user-declared package definition (an entry of ``nfpms``)."""

    id: str = ""
    builds: List[str] = Field(default_factory=list)
    formats: List[str] = Field(default_factory=list)
    section: str = ""
    priority: str = ""
    vendor: str = ""
    homepage: str = ""
    maintainer: str = ""
    description: str = ""
    license: str = ""
    bindir: str = ""
    changelog: str = ""
    meta: bool = False
    overrides: Dict[str, NFPMOverridables] = Field(default_factory=dict)

    def overridables(self) -> NFPMOverridables:
        """Return the shared, override-able part of this definition."""
        fields = {name: getattr(self, name) for name in NFPMOverridables.model_fields}
        return NFPMOverridables.model_validate(fields)


class ProjectConfig(_Block):
    """Top-level project configuration consumed by the pipe."""

    project_name: str = ""
    dist: str = ""
    nfpms: List[NFPMConfig] = Field(default_factory=list)
