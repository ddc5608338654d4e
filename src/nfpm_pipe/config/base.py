"""Base configuration classes and validation framework.

Every configuration type implements ``validate()`` and dictionary
serialization; ``validate_or_raise()`` turns failed validation into a
:class:`~nfpm_pipe.exceptions.ConfigurationError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List

from nfpm_pipe.exceptions import ConfigurationError


@dataclass
class ConfigValidationResult:
    """Result of configuration validation.

    Attributes:
        success: True if validation passed, False otherwise
        errors: Messages describing validation failures
    """

    success: bool
    errors: List[str]

    def add_error(self, error: str) -> None:
        self.errors.append(error)
        self.success = False

    @classmethod
    def success_result(cls) -> ConfigValidationResult:
        return cls(success=True, errors=[])


class Configuration(ABC):
    """Abstract base class for configuration types."""

    @abstractmethod
    def validate(self) -> ConfigValidationResult:
        """Validate this configuration and return detailed results."""

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> Configuration:
        """Create configuration instance from dictionary data."""

    def validate_or_raise(self) -> None:
        """Validate configuration and raise ConfigurationError if invalid."""
        result = self.validate()
        if not result.success:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in result.errors)
            raise ConfigurationError(error_msg, context={"errors": list(result.errors)})
