"""Shared fixtures for the nfpm_pipe test suite."""

from __future__ import annotations

import threading
from typing import Any, BinaryIO, Callable, List

import pytest

from nfpm_pipe.backends.registry import BackendRegistry
from nfpm_pipe.config.nfpm import NFPMConfig, ProjectConfig
from nfpm_pipe.config.settings import PipeSettings
from nfpm_pipe.context import PipeContext
from nfpm_pipe.domain.artifact import EXTRA_ID, Artifact, ArtifactType
from nfpm_pipe.domain.package_descriptor import PackageDescriptor
from nfpm_pipe.storage.artifact_store import InMemoryArtifactStore


class FakeBackend:
    """Packaging backend that writes a marker and remembers what it packaged."""

    def __init__(self, format: str, fail: bool = False) -> None:
        self.format = format
        self.fail = fail
        self.packaged: List[PackageDescriptor] = []
        self._lock = threading.Lock()

    def conventional_file_name(self, descriptor: PackageDescriptor) -> str:
        return f"{descriptor.name}_{descriptor.version}_{descriptor.arch}.{self.format}"

    def package(self, descriptor: PackageDescriptor, writer: BinaryIO) -> None:
        if self.fail:
            raise RuntimeError(f"{self.format} packager exploded")
        with self._lock:
            self.packaged.append(descriptor)
        writer.write(f"{self.format}:{descriptor.name}".encode())


class FakeBackendWithExtension(FakeBackend):
    def conventional_extension(self) -> str:
        return ".pkg.tar.zst"


def make_binary(
    name: str = "mybin",
    os: str = "linux",
    arch: str = "amd64",
    arm: str = "",
    mips: str = "",
    amd64: str = "",
    build_id: str = "default",
    type: ArtifactType = ArtifactType.BINARY,
    path: str = "",
) -> Artifact:
    return Artifact(
        name=name,
        path=path or f"dist/{build_id}_{os}_{arch}{arm}{mips}{amd64}/{name}",
        type=type,
        os=os,
        arch=arch,
        arm=arm,
        mips=mips,
        amd64=amd64,
        extra={EXTRA_ID: build_id},
    )


@pytest.fixture
def binary_factory() -> Callable[..., Artifact]:
    return make_binary


@pytest.fixture
def fake_backends() -> dict[str, FakeBackend]:
    return {
        "deb": FakeBackend("deb"),
        "rpm": FakeBackend("rpm"),
        "apk": FakeBackend("apk"),
        "archlinux": FakeBackendWithExtension("archlinux"),
    }


@pytest.fixture
def registry(fake_backends) -> BackendRegistry:
    return BackendRegistry(fake_backends)


@pytest.fixture
def make_context(tmp_path) -> Callable[..., PipeContext]:
    """Build a PipeContext writing into a temporary dist directory."""

    def _make(
        nfpms: List[NFPMConfig],
        binaries: List[Artifact],
        env: dict[str, str] | None = None,
        **settings: Any,
    ) -> PipeContext:
        config = ProjectConfig(project_name="myproject", dist=str(tmp_path / "dist"), nfpms=nfpms)
        return PipeContext(
            config=config,
            version="1.2.3",
            artifacts=InMemoryArtifactStore(binaries),
            env=env or {},
            settings=PipeSettings(parallelism=settings.pop("parallelism", 4), **settings),
        )

    return _make
