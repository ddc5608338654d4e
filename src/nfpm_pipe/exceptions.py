"""Custom exceptions for the Linux packages pipe.

Every failure raised by the pipe carries a ``context`` dictionary with the
details needed to act on it (format, architecture, file name, ...). Skips are
modelled as exceptions too, but they are never reported as failures.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class NfpmPipeError(Exception):
    """Base exception for all pipe errors.

    Attributes:
        context: Dictionary containing error details for debugging
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Initialize the error with a message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dictionary with error details
        """
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(NfpmPipeError):
    """Raised when the project configuration cannot be loaded or is invalid."""


class NoMatchingBinariesError(NfpmPipeError):
    """Raised when a package definition selects no Linux binaries.

    This aborts the whole package definition, not just one task.
    """

    def __init__(self, builds: list[str]):
        super().__init__(f"no linux binaries found for builds {builds}", context={"builds": list(builds)})


class OverrideMergeError(NfpmPipeError):
    """Raised when a format override cannot be merged onto the base configuration."""


class TemplateExpansionError(NfpmPipeError):
    """Raised when a templated field references an undefined field or is malformed."""


class AssemblyError(NfpmPipeError):
    """Raised when writing auxiliary files or the output file fails."""


class BackendNotFoundError(NfpmPipeError):
    """Raised when no packaging backend is registered for a format."""


class PackagingBackendError(NfpmPipeError):
    """Raised when a packaging backend fails to produce a package."""


class PipeSkip(Exception):
    """Signals that a whole package definition was skipped.

    Attributes:
        reason: Why the definition was skipped
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TaskSkip(PipeSkip):
    """Signals that one (format, platform) task is not applicable."""
