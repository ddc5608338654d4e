"""Tests for template expansion."""

from __future__ import annotations

import pytest

from nfpm_pipe.exceptions import TemplateExpansionError
from nfpm_pipe.templates import DEFAULT_NAME_TEMPLATE, TemplateContext, TemplateEngine


@pytest.fixture
def engine(binary_factory) -> TemplateEngine:
    base = TemplateEngine(TemplateContext(project_name="proj", version="1.0.0", env={"FOO": "bar"}))
    return base.with_artifact(binary_factory(arch="arm64"))


class TestApply:
    def test_literal_text_is_unchanged(self, engine):
        assert engine.apply("/usr/bin") == "/usr/bin"

    def test_expansion_is_repeatable(self, engine):
        once = engine.apply("{{ ProjectName }}-{{ Arch }}")

        assert once == "proj-arm64"
        assert engine.apply(once) == once

    def test_empty_template_expands_to_empty_string(self, engine):
        assert engine.apply("") == ""
        assert engine.apply(None) == ""

    def test_artifact_and_project_fields(self, engine):
        result = engine.apply("{{ Os }}/{{ Arch }}/{{ Version }}/{{ Binary }}/{{ Env.FOO }}")

        assert result == "linux/arm64/1.0.0/mybin/bar"

    def test_extra_fields(self, engine):
        result = engine.with_extra_fields({"PackageName": "pkg", "Release": "2"}).apply(
            "{{ PackageName }}-{{ Release }}"
        )

        assert result == "pkg-2"

    def test_undefined_field_fails(self, engine):
        with pytest.raises(TemplateExpansionError) as exc_info:
            engine.apply("{{ Nope }}")

        assert exc_info.value.context["template"] == "{{ Nope }}"

    def test_malformed_template_fails(self, engine):
        with pytest.raises(TemplateExpansionError):
            engine.apply("{{ Version ")

    def test_replacements_apply_to_platform_fields(self, binary_factory):
        engine = TemplateEngine(TemplateContext(version="1.0.0")).with_artifact(
            binary_factory(arch="amd64"), {"amd64": "x86_64", "linux": "Linux"}
        )

        assert engine.apply("{{ Os }}_{{ Arch }}") == "Linux_x86_64"

    def test_with_methods_do_not_modify_the_engine(self, engine):
        engine.with_extra_fields({"PackageName": "pkg"})

        with pytest.raises(TemplateExpansionError):
            engine.apply("{{ PackageName }}")


class TestDefaultNameTemplate:
    @pytest.mark.parametrize(
        "kwargs, expected",
        [
            ({"arch": "amd64", "amd64": "v1"}, "foo_1.0.0_linux_amd64"),
            ({"arch": "amd64", "amd64": "v3"}, "foo_1.0.0_linux_amd64v3"),
            ({"arch": "arm", "arm": "7"}, "foo_1.0.0_linux_armv7"),
            ({"arch": "mips", "mips": "softfloat"}, "foo_1.0.0_linux_mips_softfloat"),
            ({"arch": "arm64"}, "foo_1.0.0_linux_arm64"),
        ],
    )
    def test_platform_suffixes(self, binary_factory, kwargs, expected):
        engine = (
            TemplateEngine(TemplateContext(version="1.0.0"))
            .with_artifact(binary_factory(**kwargs))
            .with_extra_fields({"PackageName": "foo"})
        )

        assert engine.apply(DEFAULT_NAME_TEMPLATE) == expected
