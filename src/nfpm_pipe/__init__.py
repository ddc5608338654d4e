"""Linux package (deb, rpm, apk, archlinux, termux.deb) build stage of a release pipeline."""

from nfpm_pipe.backends.registry import BackendRegistry
from nfpm_pipe.context import PipeContext
from nfpm_pipe.pipe import LinuxPackagesPipe

__version__ = "0.1.0"

__all__ = ["BackendRegistry", "LinuxPackagesPipe", "PipeContext", "__version__"]
