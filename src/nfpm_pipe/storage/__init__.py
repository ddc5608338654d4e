from nfpm_pipe.storage.artifact_store import ArtifactStore, InMemoryArtifactStore

__all__ = ["ArtifactStore", "InMemoryArtifactStore"]
