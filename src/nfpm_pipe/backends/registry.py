"""Explicit registry of packaging backends keyed by format name."""

from __future__ import annotations

import logging
import shutil
from typing import Dict, Iterable, Mapping, Optional

from nfpm_pipe.backends.protocol import PackagingBackend
from nfpm_pipe.exceptions import BackendNotFoundError

logger = logging.getLogger(__name__)

TERMUX_PREFIX = "termux."


class BackendRegistry:
    """Maps format names to packaging backends.

    Constructed by the caller and handed to the pipe, so tests can register
    fakes without touching global state.
    """

    def __init__(self, backends: Optional[Mapping[str, PackagingBackend]] = None) -> None:
        self._backends: Dict[str, PackagingBackend] = {}
        for format, backend in (backends or {}).items():
            self.register(format, backend)

    def register(self, format: str, backend: PackagingBackend) -> None:
        if not isinstance(backend, PackagingBackend):
            raise TypeError(f"{type(backend).__name__} does not implement PackagingBackend")
        self._backends[format] = backend

    def get(self, format: str) -> PackagingBackend:
        """Return the backend for ``format``; a ``termux.`` prefix is ignored.

        Raises:
            BackendNotFoundError: If no backend is registered for the format
        """
        name = format.replace(TERMUX_PREFIX, "", 1)
        try:
            return self._backends[name]
        except KeyError:
            raise BackendNotFoundError(
                f"no packager registered for the format {name}",
                context={"format": format, "registered": sorted(self._backends)},
            ) from None

    def formats(self) -> Iterable[str]:
        return sorted(self._backends)


def default_registry(executable: str = "nfpm") -> BackendRegistry:
    """Build a registry backed by the ``nfpm`` command-line tool.

    Raises:
        BackendNotFoundError: If the executable cannot be found on PATH
    """
    from nfpm_pipe.backends.nfpm_cli import PACKAGERS, NfpmCliBackend

    if shutil.which(executable) is None:
        raise BackendNotFoundError(f"{executable} executable not found in PATH", context={"executable": executable})

    logger.info(f"Using {executable} for packaging: {', '.join(PACKAGERS)}")
    return BackendRegistry({packager: NfpmCliBackend(packager, executable=executable) for packager in PACKAGERS})
