"""Tests for the in-memory artifact store."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from nfpm_pipe.domain.artifact import EXTRA_BUILDS, EXTRA_FILES, EXTRA_ID, Artifact, ArtifactType
from nfpm_pipe.domain.package_descriptor import ContentEntry, ContentFileInfo
from nfpm_pipe.storage.artifact_store import InMemoryArtifactStore, and_, by_os, by_type, or_


def test_store_handles_concurrent_adds(binary_factory):
    store = InMemoryArtifactStore()

    def _add(index: int) -> None:
        store.add(binary_factory(name=f"bin-{index}"))

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(_add, range(64)))

    assert len(store) == 64
    assert {a.name for a in store.list()} == {f"bin-{i}" for i in range(64)}


def test_filter_returns_a_new_store(binary_factory):
    store = InMemoryArtifactStore([binary_factory(os="linux"), binary_factory(os="darwin")])

    filtered = store.filter(and_(by_type(ArtifactType.BINARY), or_(by_os("linux"), by_os("ios"))))
    filtered.add(binary_factory(os="ios"))

    assert len(filtered) == 2
    assert len(store) == 2


def test_list_is_a_snapshot(binary_factory):
    store = InMemoryArtifactStore([binary_factory()])

    snapshot = store.list()
    store.add(binary_factory(name="other"))

    assert len(snapshot) == 1


def test_manifest_save_and_load(tmp_path, binary_factory):
    binary = binary_factory(arch="arm", arm="7")
    package = Artifact(
        name="foo_1.0.0_linux_armv7.deb",
        path="dist/foo_1.0.0_linux_armv7.deb",
        type=ArtifactType.LINUX_PACKAGE,
        os="linux",
        arch="arm",
        arm="7",
        extra={
            EXTRA_ID: "foo",
            EXTRA_BUILDS: (binary,),
            EXTRA_FILES: (ContentEntry("bin", "/usr/bin/bin", file_info=ContentFileInfo(mode=0o755)),),
        },
    )
    manifest = tmp_path / "dist" / "artifacts.json"

    InMemoryArtifactStore([binary, package]).save(manifest)
    loaded = InMemoryArtifactStore.load(manifest).list()

    assert [a.name for a in loaded] == [binary.name, package.name]
    assert loaded[0].type == ArtifactType.BINARY
    assert loaded[0].arm == "7"
    assert loaded[1].type == ArtifactType.LINUX_PACKAGE
    assert loaded[1].extra[EXTRA_BUILDS] == [binary.name]
    assert loaded[1].extra[EXTRA_FILES] == [{"src": "bin", "dst": "/usr/bin/bin", "file_info": {"mode": 0o755}}]


def test_load_missing_manifest_is_empty(tmp_path):
    assert len(InMemoryArtifactStore.load(tmp_path / "missing.json")) == 0


def test_loaded_manifest_can_be_saved_again(tmp_path, binary_factory):
    binary = binary_factory()
    package = Artifact(
        name="foo_1.0.0_linux_amd64.deb",
        path="dist/foo_1.0.0_linux_amd64.deb",
        type=ArtifactType.LINUX_PACKAGE,
        os="linux",
        arch="amd64",
        extra={
            EXTRA_ID: "foo",
            EXTRA_BUILDS: (binary,),
            EXTRA_FILES: (ContentEntry("bin", "/usr/bin/bin", file_info=ContentFileInfo(mode=0o755)),),
        },
    )
    manifest = tmp_path / "artifacts.json"
    InMemoryArtifactStore([binary, package]).save(manifest)

    reloaded = InMemoryArtifactStore.load(manifest)
    reloaded.add(binary_factory(name="second-run"))
    reloaded.save(manifest)
    loaded = InMemoryArtifactStore.load(manifest).list()

    assert [a.name for a in loaded] == [binary.name, package.name, "second-run"]
    assert loaded[1].extra[EXTRA_BUILDS] == [binary.name]
    assert loaded[1].extra[EXTRA_FILES] == [{"src": "bin", "dst": "/usr/bin/bin", "file_info": {"mode": 0o755}}]
