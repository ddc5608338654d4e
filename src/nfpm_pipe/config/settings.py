"""Runtime settings of a packaging run.

Settings resolve with priority: explicit parameter > environment variable >
default.

Environment variables:
    NFPM_PIPE_PARALLELISM: Maximum number of concurrent packaging tasks
    NFPM_PIPE_DIST: Output directory
    NFPM_PIPE_SKIP_SIGN: "true" to build unsigned packages
    NFPM_PIPE_FAIL_FAST: "false" to attempt every definition before failing
"""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

from nfpm_pipe.config.base import Configuration, ConfigValidationResult
from nfpm_pipe.exceptions import ConfigurationError


def _default_parallelism() -> int:
    return os.cpu_count() or 1


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or value == "":
        return default
    return value.lower() in ("1", "true", "yes")


class PipeSettings(Configuration):
    """Parallelism, output directory and signing switches of a run."""

    def __init__(
        self,
        parallelism: Optional[int] = None,
        dist: Optional[str] = None,
        skip_sign: bool = False,
        fail_fast: bool = True,
    ) -> None:
        self.parallelism = parallelism if parallelism is not None else _default_parallelism()
        self.dist = dist or "dist"
        self.skip_sign = skip_sign
        self.fail_fast = fail_fast

    def __repr__(self) -> str:
        return (
            f"PipeSettings(parallelism={self.parallelism}, dist={self.dist!r}, "
            f"skip_sign={self.skip_sign}, fail_fast={self.fail_fast})"
        )

    def validate(self) -> ConfigValidationResult:
        result = ConfigValidationResult.success_result()
        if not isinstance(self.parallelism, int) or self.parallelism < 1:
            result.add_error(f"parallelism must be a positive integer, got {self.parallelism!r}")
        if not self.dist:
            result.add_error("dist directory cannot be empty")
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parallelism": self.parallelism,
            "dist": self.dist,
            "skip_sign": self.skip_sign,
            "fail_fast": self.fail_fast,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PipeSettings:
        return cls(
            parallelism=data.get("parallelism"),
            dist=data.get("dist"),
            skip_sign=bool(data.get("skip_sign", False)),
            fail_fast=bool(data.get("fail_fast", True)),
        )

    @classmethod
    def from_environment(cls, env: Optional[Mapping[str, str]] = None) -> PipeSettings:
        env = os.environ if env is None else env
        raw_parallelism = env.get("NFPM_PIPE_PARALLELISM")
        try:
            parallelism = int(raw_parallelism) if raw_parallelism else None
        except ValueError as err:
            raise ConfigurationError(
                f"NFPM_PIPE_PARALLELISM must be an integer, got {raw_parallelism!r}",
                context={"variable": "NFPM_PIPE_PARALLELISM"},
            ) from err
        return cls(
            parallelism=parallelism,
            dist=env.get("NFPM_PIPE_DIST") or None,
            skip_sign=_env_flag(env, "NFPM_PIPE_SKIP_SIGN", False),
            fail_fast=_env_flag(env, "NFPM_PIPE_FAIL_FAST", True),
        )
