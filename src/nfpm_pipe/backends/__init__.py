"""Packaging backends and their registry."""

from nfpm_pipe.backends.protocol import PackagerWithExtension, PackagingBackend
from nfpm_pipe.backends.registry import BackendRegistry, default_registry

__all__ = ["BackendRegistry", "PackagerWithExtension", "PackagingBackend", "default_registry"]
