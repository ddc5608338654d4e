"""PackagingBackend Protocol - contract for package format implementations.

A backend serializes a :class:`~nfpm_pipe.domain.package_descriptor.PackageDescriptor`
into the binary format of one package type. The protocol uses structural
subtyping, so backends do not need to inherit from anything.
"""

from typing import BinaryIO, Protocol, runtime_checkable

from nfpm_pipe.domain.package_descriptor import PackageDescriptor


@runtime_checkable
class PackagingBackend(Protocol):
    """Contract every packaging backend must satisfy."""

    def conventional_file_name(self, descriptor: PackageDescriptor) -> str:
        """Return the canonical file name for a package built from ``descriptor``."""
        ...

    def package(self, descriptor: PackageDescriptor, writer: BinaryIO) -> None:
        """Write the package to ``writer``.

        Raises:
            Exception: Any failure; the caller wraps it with the file name
        """
        ...


@runtime_checkable
class PackagerWithExtension(Protocol):
    """Optional capability: a backend whose extension is not just ``.<format>``."""

    def conventional_extension(self) -> str:
        """Return the conventional extension including the leading dot."""
        ...
