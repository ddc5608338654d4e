"""Tests for per-format override resolution."""

from __future__ import annotations

import pytest

from nfpm_pipe.config.nfpm import (
    DebConfig,
    NFPMConfig,
    NFPMOverridables,
    RPMConfig,
    ScriptsConfig,
)
from nfpm_pipe.exceptions import OverrideMergeError
from nfpm_pipe.overrides import merge_block, merge_overrides


def _definition(**kwargs) -> NFPMConfig:
    base = {
        "id": "foo",
        "formats": ["deb", "rpm"],
        "package_name": "foo",
        "file_name_template": "{{ ConventionalFileName }}",
        "dependencies": ["libc6"],
        "conflicts": ["bar"],
        "scripts": {"preinstall": "pre.sh", "postinstall": "post.sh"},
        "rpm": {"summary": "base summary", "group": "Utilities", "signature": {"key_file": "rpm.key"}},
        "deb": {
            "triggers": {"interest": ["base-trigger"]},
            "signature": {"key_file": "deb.key", "type": "origin"},
        },
    }
    base.update(kwargs)
    return NFPMConfig.model_validate(base)


class TestMergeIdentity:
    """Without a format override the effective configuration equals the base."""

    def test_missing_override_block_returns_base(self):
        fpm = _definition()

        effective = merge_overrides(fpm, "deb")

        assert effective == fpm.overridables()

    def test_empty_override_block_returns_base(self):
        fpm = _definition(overrides={"rpm": {}})

        effective = merge_overrides(fpm, "rpm")

        assert effective == fpm.overridables()

    def test_result_is_a_copy(self):
        fpm = _definition()

        effective = merge_overrides(fpm, "deb")
        effective.dependencies.append("extra")

        assert fpm.dependencies == ["libc6"]


class TestOverrideWins:
    def test_top_level_fields_are_overridden(self):
        fpm = _definition(overrides={"rpm": {"dependencies": ["glibc"], "file_name_template": "custom"}})

        effective = merge_overrides(fpm, "rpm")

        assert effective.dependencies == ["glibc"]
        assert effective.file_name_template == "custom"
        assert effective.conflicts == ["bar"]

    def test_nested_blocks_merge_field_by_field(self):
        fpm = _definition(
            overrides={
                "rpm": {
                    "scripts": {"postinstall": "rpm-post.sh"},
                    "rpm": {"summary": "rpm summary", "signature": {"key_file": "other.key"}},
                }
            }
        )

        effective = merge_overrides(fpm, "rpm")

        assert effective.scripts.preinstall == "pre.sh"
        assert effective.scripts.postinstall == "rpm-post.sh"
        assert effective.rpm.summary == "rpm summary"
        assert effective.rpm.group == "Utilities"
        assert effective.rpm.signature.key_file == "other.key"

    def test_deb_triggers_and_signature_merge(self):
        fpm = _definition(
            overrides={"deb": {"deb": {"triggers": {"activate": ["act"]}, "signature": {"type": "maint"}}}}
        )

        effective = merge_overrides(fpm, "deb")

        assert effective.deb.triggers.interest == ["base-trigger"]
        assert effective.deb.triggers.activate == ["act"]
        assert effective.deb.signature.key_file == "deb.key"
        assert effective.deb.signature.type == "maint"

    def test_override_only_applies_to_its_format(self):
        fpm = _definition(overrides={"rpm": {"dependencies": ["glibc"]}})

        assert merge_overrides(fpm, "deb").dependencies == ["libc6"]
        assert merge_overrides(fpm, "rpm").dependencies == ["glibc"]

    def test_every_declared_field_is_overridable(self):
        """Each leaf field of the schema supplied by an override reaches the result."""
        fpm = _definition()
        override = NFPMOverridables(
            epoch="2",
            release="3",
            prerelease="beta",
            version_metadata="git",
            replacements={"amd64": "x86_64"},
            recommends=["r"],
            suggests=["s"],
            replaces=["old"],
            provides=["p"],
            scripts=ScriptsConfig(preremove="prerm.sh", postremove="postrm.sh"),
            rpm=RPMConfig(compression="xz"),
            deb=DebConfig(breaks=["b"], lintian_overrides=["statically-linked-binary"]),
        )
        fpm.overrides["apk"] = override

        effective = merge_overrides(fpm, "apk")

        assert effective.epoch == "2"
        assert effective.release == "3"
        assert effective.prerelease == "beta"
        assert effective.version_metadata == "git"
        assert effective.replacements == {"amd64": "x86_64"}
        assert effective.recommends == ["r"]
        assert effective.suggests == ["s"]
        assert effective.replaces == ["old"]
        assert effective.provides == ["p"]
        assert effective.scripts.preremove == "prerm.sh"
        assert effective.scripts.postremove == "postrm.sh"
        assert effective.scripts.preinstall == "pre.sh"
        assert effective.rpm.compression == "xz"
        assert effective.deb.breaks == ["b"]
        assert effective.deb.lintian_overrides == ["statically-linked-binary"]


class TestMergeBlock:
    def test_mismatched_block_types_fail(self):
        with pytest.raises(OverrideMergeError) as exc_info:
            merge_block(RPMConfig(), DebConfig())

        assert "cannot merge DebConfig onto RPMConfig" in str(exc_info.value)

    def test_none_override_copies_base(self):
        base = RPMConfig(summary="s")

        merged = merge_block(base, None)

        assert merged == base
        assert merged is not base
