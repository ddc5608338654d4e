"""Packaging backend that drives the ``nfpm`` command-line tool.

The descriptor is written to a temporary nfpm YAML configuration and
``nfpm package`` is run against it; the produced file is then copied to the
writer handed in by the pipe. Passphrases are passed through the environment
(``NFPM_<PACKAGER>_PASSPHRASE``) and never written to disk.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any, BinaryIO, Dict, Mapping

import yaml

from nfpm_pipe.domain.package_descriptor import PackageDescriptor

logger = logging.getLogger(__name__)

PACKAGERS = ("deb", "rpm", "apk", "archlinux")

_DEB_ARCHES = {
    "386": "i386",
    "arm5": "armel",
    "arm6": "armhf",
    "arm7": "armhf",
    "mips64le": "mips64el",
    "mipsle": "mipsel",
    "ppc64le": "ppc64el",
    "s390": "s390x",
}

_RPM_ARCHES = {
    "amd64": "x86_64",
    "386": "i386",
    "arm64": "aarch64",
    "arm5": "armv5tel",
    "arm6": "armv6hl",
    "arm7": "armv7hl",
    "mips64le": "mips64el",
    "mipsle": "mipsel",
    "mips": "mips",
}

_APK_ARCHES = {
    "386": "x86",
    "amd64": "x86_64",
    "arm": "armhf",
    "arm6": "armhf",
    "arm7": "armv7",
    "arm64": "aarch64",
    "ppc64le": "ppc64le",
    "s390": "s390x",
}

_ARCHLINUX_ARCHES = {
    "386": "i686",
    "amd64": "x86_64",
    "arm64": "aarch64",
    "arm5": "arm",
    "arm6": "armv6h",
    "arm7": "armv7h",
}

_EXTENSIONS = {
    "deb": ".deb",
    "rpm": ".rpm",
    "apk": ".apk",
    "archlinux": ".pkg.tar.zst",
}


def _version_with_prerelease(descriptor: PackageDescriptor, separator: str) -> str:
    version = descriptor.version
    if descriptor.prerelease:
        version += separator + descriptor.prerelease
    if descriptor.version_metadata:
        version += "+" + descriptor.version_metadata
    return version


class NfpmCliBackend:
    """One packager (deb, rpm, apk or archlinux) of the ``nfpm`` executable."""

    def __init__(self, packager: str, executable: str = "nfpm") -> None:
        if packager not in PACKAGERS:
            raise ValueError(f"Unknown packager: {packager}. Valid options are: {', '.join(PACKAGERS)}")
        self.packager = packager
        self.executable = executable

    def __repr__(self) -> str:
        return f"NfpmCliBackend(packager={self.packager!r})"

    def conventional_extension(self) -> str:
        return _EXTENSIONS[self.packager]

    def conventional_file_name(self, descriptor: PackageDescriptor) -> str:
        name = descriptor.name
        if self.packager == "deb":
            version = _version_with_prerelease(descriptor, "~")
            if descriptor.release:
                version += "-" + descriptor.release
            arch = _DEB_ARCHES.get(descriptor.arch, descriptor.arch)
            return f"{name}_{version}_{arch}.deb"
        if self.packager == "rpm":
            version = _version_with_prerelease(descriptor, "~")
            arch = _RPM_ARCHES.get(descriptor.arch, descriptor.arch)
            return f"{name}-{version}-{descriptor.release or '1'}.{arch}.rpm"
        if self.packager == "apk":
            version = _version_with_prerelease(descriptor, "_")
            if descriptor.release:
                version += "-r" + descriptor.release
            arch = _APK_ARCHES.get(descriptor.arch, descriptor.arch)
            return f"{name}_{version}_{arch}.apk"
        version = _version_with_prerelease(descriptor, "").replace("-", "_")
        arch = _ARCHLINUX_ARCHES.get(descriptor.arch, descriptor.arch)
        return f"{name}-{version}-{descriptor.release or '1'}-{arch}.pkg.tar.zst"

    def package(self, descriptor: PackageDescriptor, writer: BinaryIO) -> None:
        with tempfile.TemporaryDirectory(prefix="nfpm-pipe-") as tmp:
            config_path = Path(tmp) / "nfpm.yaml"
            target = Path(tmp) / "package"
            with config_path.open("w", encoding="utf-8") as handle:
                yaml.safe_dump(to_nfpm_config(descriptor), handle, sort_keys=False)

            cmd = [
                self.executable,
                "package",
                "--packager",
                self.packager,
                "--config",
                str(config_path),
                "--target",
                str(target),
            ]
            logger.debug(f"running {' '.join(cmd)}")
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                env=self._environment(descriptor),
                check=False,
            )
            if result.returncode != 0:
                raise RuntimeError(f"{self.executable} exited with status {result.returncode}: {result.stderr.strip()}")

            with target.open("rb") as produced:
                shutil.copyfileobj(produced, writer)

    def _environment(self, descriptor: PackageDescriptor) -> Dict[str, str]:
        env = dict(os.environ)
        passphrases = {
            "deb": descriptor.deb.signature.key_passphrase,
            "rpm": descriptor.rpm.signature.key_passphrase,
            "apk": descriptor.apk.signature.key_passphrase,
        }
        passphrase = passphrases.get(self.packager, "")
        if passphrase:
            env[f"NFPM_{self.packager.upper()}_PASSPHRASE"] = passphrase
        return env


def _compact(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop empty values, recursing into nested mappings."""
    result: Dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, Mapping):
            value = _compact(value)
        if value in ("", None, [], {}, 0):
            continue
        result[key] = value
    return result


def to_nfpm_config(descriptor: PackageDescriptor) -> Dict[str, Any]:
    """Render ``descriptor`` as an nfpm YAML configuration mapping."""
    config = {
        "name": descriptor.name,
        "arch": descriptor.arch,
        "platform": descriptor.platform,
        "version": descriptor.version,
        "epoch": descriptor.epoch,
        "release": descriptor.release,
        "prerelease": descriptor.prerelease,
        "version_metadata": descriptor.version_metadata,
        "section": descriptor.section,
        "priority": descriptor.priority,
        "maintainer": descriptor.maintainer,
        "description": descriptor.description,
        "vendor": descriptor.vendor,
        "homepage": descriptor.homepage,
        "license": descriptor.license,
        "changelog": descriptor.changelog,
        "depends": descriptor.depends,
        "recommends": descriptor.recommends,
        "suggests": descriptor.suggests,
        "conflicts": descriptor.conflicts,
        "replaces": descriptor.replaces,
        "provides": descriptor.provides,
        "contents": [entry.to_dict() for entry in descriptor.contents],
        "scripts": {
            "preinstall": descriptor.scripts.preinstall,
            "postinstall": descriptor.scripts.postinstall,
            "preremove": descriptor.scripts.preremove,
            "postremove": descriptor.scripts.postremove,
        },
        "rpm": {
            "summary": descriptor.rpm.summary,
            "group": descriptor.rpm.group,
            "compression": descriptor.rpm.compression,
            "signature": {"key_file": descriptor.rpm.signature.key_file, "key_id": descriptor.rpm.signature.key_id},
            "scripts": {"pretrans": descriptor.rpm.scripts.pretrans, "posttrans": descriptor.rpm.scripts.posttrans},
        },
        "deb": {
            "scripts": {"rules": descriptor.deb.scripts.rules, "templates": descriptor.deb.scripts.templates},
            "triggers": {
                "interest": descriptor.deb.triggers.interest,
                "interest_await": descriptor.deb.triggers.interest_await,
                "interest_noawait": descriptor.deb.triggers.interest_noawait,
                "activate": descriptor.deb.triggers.activate,
                "activate_await": descriptor.deb.triggers.activate_await,
                "activate_noawait": descriptor.deb.triggers.activate_noawait,
            },
            "breaks": descriptor.deb.breaks,
            "signature": {
                "key_file": descriptor.deb.signature.key_file,
                "key_id": descriptor.deb.signature.key_id,
                "type": descriptor.deb.signature.type,
            },
        },
        "apk": {
            "signature": {"key_file": descriptor.apk.signature.key_file, "key_name": descriptor.apk.signature.key_name},
            "scripts": {
                "preupgrade": descriptor.apk.scripts.preupgrade,
                "postupgrade": descriptor.apk.scripts.postupgrade,
            },
        },
        "archlinux": {
            "pkgbase": descriptor.archlinux.pkgbase,
            "packager": descriptor.archlinux.packager,
            "scripts": {
                "preupgrade": descriptor.archlinux.scripts.preupgrade,
                "postupgrade": descriptor.archlinux.scripts.postupgrade,
            },
        },
    }
    return _compact(config)
