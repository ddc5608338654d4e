"""Package assembly.

Turns the effective configuration of one (format, platform group) task into
a fully expanded :class:`PackageDescriptor`. Platform compatibility rules are
checked first and raise :class:`~nfpm_pipe.exceptions.TaskSkip` when the
combination does not apply:

- iOS binaries are only packaged as deb, for the ``iphoneos-arm64`` platform.
- termux.deb is only built for 386, amd64 and arm64, whose architectures are
  renamed to i686, x86_64 and aarch64; the bin directory moves under the
  termux prefix.
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import List, Mapping, Optional

from nfpm_pipe.config.nfpm import ContentConfig, NFPMConfig, NFPMOverridables
from nfpm_pipe.domain.artifact import PlatformGroup
from nfpm_pipe.domain.package_descriptor import (
    APK,
    RPM,
    APKSignature,
    ArchLinux,
    ContentEntry,
    ContentFileInfo,
    Deb,
    DebScripts,
    DebSignature,
    DebTriggers,
    PackageDescriptor,
    RPMScripts,
    RPMSignature,
    Scripts,
    UpgradeScripts,
)
from nfpm_pipe.exceptions import AssemblyError, TaskSkip
from nfpm_pipe.passphrase import get_passphrase_from_env
from nfpm_pipe.templates import TemplateEngine

logger = logging.getLogger(__name__)

TERMUX_FORMAT = "termux.deb"
TERMUX_ROOT = "/data/data/com.termux/files"
IOS_PLATFORM = "iphoneos-arm64"
LINTIAN_OVERRIDES_DIR = "./usr/share/lintian/overrides"
DEB_FORMATS = ("deb", TERMUX_FORMAT)

_TERMUX_ARCHES = {
    "386": "i686",
    "amd64": "x86_64",
    "arm64": "aarch64",
}
_TERMUX_PATTERN = re.compile("|".join(_TERMUX_ARCHES))


def is_supported_termux_arch(arch: str) -> bool:
    return arch.startswith(tuple(_TERMUX_ARCHES))


def termux_arch(arch: str) -> str:
    """Translate Go architecture names to the names termux uses."""
    return _TERMUX_PATTERN.sub(lambda match: _TERMUX_ARCHES[match.group(0)], arch)


@dataclass(frozen=True)
class TargetPlatform:
    """Where and for what a package is built.

    Attributes:
        info_arch: Architecture given to the backend (arch + arm/mips variant)
        unique_arch: info_arch plus the AMD64 level; unique per task
        platform: Platform tag given to the backend
        bindir: Install root for binaries, before template expansion
    """

    info_arch: str
    unique_arch: str
    platform: str
    bindir: str


def resolve_target(format: str, group: PlatformGroup, bindir: str) -> TargetPlatform:
    """Apply the platform compatibility rules for ``format``.

    Raises:
        TaskSkip: If ``format`` cannot be built for this platform group
    """
    reference = group.reference
    info_arch = reference.info_arch
    unique_arch = reference.unique_arch
    platform = reference.os

    if platform == "ios":
        if format != "deb":
            raise TaskSkip(f"{format} is not supported for ios")
        platform = IOS_PLATFORM

    if format == TERMUX_FORMAT:
        if not is_supported_termux_arch(unique_arch):
            logger.debug(f"skipping {TERMUX_FORMAT} for {unique_arch} as its not supported by termux")
            raise TaskSkip(f"{unique_arch} is not supported by termux")
        info_arch = termux_arch(info_arch)
        unique_arch = termux_arch(unique_arch)
        bindir = posixpath.join(TERMUX_ROOT, bindir.lstrip("/"))

    return TargetPlatform(info_arch=info_arch, unique_arch=unique_arch, platform=platform, bindir=bindir)


@dataclass(frozen=True)
class AssembledPackage:
    """Result of assembling one task."""

    descriptor: PackageDescriptor
    target: TargetPlatform
    template: TemplateEngine


class PackageAssembler:
    """Builds package descriptors for a run.

    Args:
        dist: Output directory of the run; auxiliary files go below it
        env: Environment used to resolve signing passphrases
        skip_sign: Clear every signature block when set
    """

    def __init__(self, dist: Path, env: Optional[Mapping[str, str]] = None, skip_sign: bool = False) -> None:
        self.dist = Path(dist)
        self.env = dict(env or {})
        self.skip_sign = skip_sign

    def assemble(
        self,
        fpm: NFPMConfig,
        overridden: NFPMOverridables,
        format: str,
        group: PlatformGroup,
        template: TemplateEngine,
        version: str,
        target: Optional[TargetPlatform] = None,
    ) -> AssembledPackage:
        """Assemble the descriptor for ``format`` and ``group``.

        Raises:
            TaskSkip: If the platform does not support ``format``
            TemplateExpansionError: If a templated field cannot be expanded
            AssemblyError: If the lintian overrides file cannot be written
        """
        if target is None:
            target = resolve_target(format, group, fpm.bindir)
        package_name = overridden.package_name or ""

        t = template.with_artifact(group.reference, overridden.replacements).with_extra_fields(
            {
                "Release": overridden.release or "",
                "Epoch": overridden.epoch or "",
                "PackageName": package_name,
            }
        )

        bindir = t.apply(target.bindir)
        homepage = t.apply(fpm.homepage)
        description = t.apply(fpm.description)
        maintainer = t.apply(fpm.maintainer)
        deb_key_file = t.apply(overridden.deb.signature.key_file)
        rpm_key_file = t.apply(overridden.rpm.signature.key_file)
        apk_key_file = t.apply(overridden.apk.signature.key_file)
        apk_key_name = t.apply(overridden.apk.signature.key_name)

        contents = self._configured_contents(overridden.contents or [], t)

        # meta packages carry no binaries at all
        if not fpm.meta:
            for binary in group.binaries:
                src = PurePath(binary.path).as_posix()
                dst = posixpath.join(bindir, binary.name)
                logger.debug(f"adding binary to package: src={src} dst={dst}")
                contents.append(ContentEntry(source=src, destination=dst, file_info=ContentFileInfo(mode=0o755)))

        if format in DEB_FORMATS and overridden.deb.lintian_overrides:
            path = self.lintian_path(fpm.id, format, package_name, group.reference.os, target.unique_arch)
            contents.append(self._lintian_entry(path, package_name, overridden.deb.lintian_overrides))

        descriptor = PackageDescriptor(
            name=package_name,
            version=version,
            arch=target.info_arch,
            platform=target.platform,
            epoch=overridden.epoch or "",
            release=overridden.release or "",
            prerelease=overridden.prerelease or "",
            version_metadata=overridden.version_metadata or "",
            section=fpm.section,
            priority=fpm.priority,
            maintainer=maintainer,
            description=description,
            vendor=fpm.vendor,
            homepage=homepage,
            license=fpm.license,
            changelog=fpm.changelog,
            depends=list(overridden.dependencies or []),
            recommends=list(overridden.recommends or []),
            suggests=list(overridden.suggests or []),
            conflicts=list(overridden.conflicts or []),
            replaces=list(overridden.replaces or []),
            provides=list(overridden.provides or []),
            contents=contents,
            scripts=Scripts(
                preinstall=overridden.scripts.preinstall or "",
                postinstall=overridden.scripts.postinstall or "",
                preremove=overridden.scripts.preremove or "",
                postremove=overridden.scripts.postremove or "",
            ),
            deb=Deb(
                scripts=DebScripts(
                    rules=overridden.deb.scripts.rules or "",
                    templates=overridden.deb.scripts.templates or "",
                ),
                triggers=DebTriggers(
                    interest=list(overridden.deb.triggers.interest or []),
                    interest_await=list(overridden.deb.triggers.interest_await or []),
                    interest_noawait=list(overridden.deb.triggers.interest_noawait or []),
                    activate=list(overridden.deb.triggers.activate or []),
                    activate_await=list(overridden.deb.triggers.activate_await or []),
                    activate_noawait=list(overridden.deb.triggers.activate_noawait or []),
                ),
                breaks=list(overridden.deb.breaks or []),
                signature=DebSignature(
                    key_file=deb_key_file,
                    key_passphrase=get_passphrase_from_env(self.env, "DEB", fpm.id),
                    type=overridden.deb.signature.type or "",
                ),
            ),
            rpm=RPM(
                summary=overridden.rpm.summary or "",
                group=overridden.rpm.group or "",
                compression=overridden.rpm.compression or "",
                signature=RPMSignature(
                    key_file=rpm_key_file,
                    key_passphrase=get_passphrase_from_env(self.env, "RPM", fpm.id),
                ),
                scripts=RPMScripts(
                    pretrans=overridden.rpm.scripts.pretrans or "",
                    posttrans=overridden.rpm.scripts.posttrans or "",
                ),
            ),
            apk=APK(
                signature=APKSignature(
                    key_file=apk_key_file,
                    key_passphrase=get_passphrase_from_env(self.env, "APK", fpm.id),
                    key_name=apk_key_name,
                ),
                scripts=UpgradeScripts(
                    preupgrade=overridden.apk.scripts.preupgrade or "",
                    postupgrade=overridden.apk.scripts.postupgrade or "",
                ),
            ),
            archlinux=ArchLinux(
                pkgbase=overridden.archlinux.pkgbase or "",
                packager=overridden.archlinux.packager or "",
                scripts=UpgradeScripts(
                    preupgrade=overridden.archlinux.scripts.preupgrade or "",
                    postupgrade=overridden.archlinux.scripts.postupgrade or "",
                ),
            ),
        )

        if self.skip_sign:
            descriptor = descriptor.without_signatures()

        logger.debug(f"all archive files: {descriptor.destinations}")
        return AssembledPackage(descriptor=descriptor.with_defaults(), target=target, template=t)

    def lintian_path(self, nfpm_id: str, format: str, package_name: str, os: str, unique_arch: str) -> Path:
        """Per-task location of the lintian overrides file."""
        return self.dist / "deb" / nfpm_id / f"{package_name}_{format}_{os}_{unique_arch}" / ".lintian"

    def _configured_contents(self, contents: List[ContentConfig], t: TemplateEngine) -> List[ContentEntry]:
        entries: List[ContentEntry] = []
        for content in contents:
            file_info = None
            if content.file_info is not None:
                file_info = ContentFileInfo(
                    mode=content.file_info.mode or 0,
                    owner=content.file_info.owner or "",
                    group=content.file_info.group or "",
                    mtime=content.file_info.mtime or "",
                )
            entries.append(
                ContentEntry(
                    source=t.apply(content.source),
                    destination=t.apply(content.destination),
                    type=content.type,
                    packager=content.packager,
                    file_info=file_info,
                )
            )
        return entries

    def _lintian_entry(self, path: Path, package_name: str, overrides: List[str]) -> ContentEntry:
        lines = [f"{package_name}: {override}" for override in overrides]
        try:
            path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
            path.write_text("\n".join(lines), encoding="utf-8")
        except OSError as err:
            raise AssemblyError(f"failed to write lintian file: {err}", context={"path": str(path)}) from err

        logger.debug(f"creating {str(path)!r}")
        return ContentEntry(
            source=str(path),
            destination=posixpath.join(LINTIAN_OVERRIDES_DIR, package_name),
            packager="deb",
            file_info=ContentFileInfo(mode=0o644),
        )
