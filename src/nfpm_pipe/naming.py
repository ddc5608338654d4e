"""Output file naming."""

from __future__ import annotations

from nfpm_pipe.backends.protocol import PackagerWithExtension, PackagingBackend
from nfpm_pipe.backends.registry import TERMUX_PREFIX


def conventional_extension(format: str, backend: PackagingBackend) -> str:
    """Return the extension the output file must end with.

    Backends may declare their own extension; termux packages always use
    ``.termux.deb`` so they never clash with plain deb packages.
    """
    if isinstance(backend, PackagerWithExtension) and not format.startswith(TERMUX_PREFIX):
        return backend.conventional_extension()
    return "." + format


def ensure_extension(name: str, ext: str) -> str:
    """Append ``ext`` unless ``name`` already ends with it."""
    if name.endswith(ext):
        return name
    return name + ext
