"""Tests for runtime settings."""

from __future__ import annotations

import pytest

from nfpm_pipe.config.settings import PipeSettings
from nfpm_pipe.exceptions import ConfigurationError


class TestPipeSettings:
    def test_defaults(self):
        settings = PipeSettings.from_environment({})

        assert settings.parallelism >= 1
        assert settings.dist == "dist"
        assert settings.skip_sign is False
        assert settings.fail_fast is True

    def test_from_environment(self):
        env = {
            "NFPM_PIPE_PARALLELISM": "3",
            "NFPM_PIPE_DIST": "out",
            "NFPM_PIPE_SKIP_SIGN": "true",
            "NFPM_PIPE_FAIL_FAST": "false",
        }

        settings = PipeSettings.from_environment(env)

        assert settings.to_dict() == {"parallelism": 3, "dist": "out", "skip_sign": True, "fail_fast": False}

    def test_invalid_parallelism_variable(self):
        with pytest.raises(ConfigurationError, match="NFPM_PIPE_PARALLELISM must be an integer"):
            PipeSettings.from_environment({"NFPM_PIPE_PARALLELISM": "many"})

    def test_validation(self):
        result = PipeSettings(parallelism=0).validate()

        assert result.success is False
        assert "parallelism must be a positive integer" in result.errors[0]

    def test_validate_or_raise(self):
        with pytest.raises(ConfigurationError, match="Configuration validation failed"):
            PipeSettings(parallelism=-1).validate_or_raise()

    def test_dict_roundtrip(self):
        settings = PipeSettings(parallelism=2, dist="out", skip_sign=True, fail_fast=False)

        assert PipeSettings.from_dict(settings.to_dict()).to_dict() == settings.to_dict()
