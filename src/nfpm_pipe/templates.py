"""Template expansion for user-suppliable fields.

Templates use Jinja2 syntax with strict undefined handling, e.g.
``{{ PackageName }}_{{ Version }}_{{ Os }}_{{ Arch }}``. Referencing a field
that does not exist, or a malformed expression, raises
:class:`~nfpm_pipe.exceptions.TemplateExpansionError`.

Available fields:
    ProjectName, Version, Env: project-wide values
    Os, Arch, Arm, Mips, Amd64, Binary, ArtifactName, ArtifactPath:
        taken from the reference binary (after replacements)
    any extra field added with :meth:`TemplateEngine.with_extra_fields`
        (PackageName, Release, Epoch, ConventionalFileName, ...)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import jinja2

from nfpm_pipe.domain.artifact import Artifact
from nfpm_pipe.exceptions import TemplateExpansionError

# Conventional output name: <name>_<version>_<os>_<arch>[v<arm>][_<mips>][<amd64 level>]
DEFAULT_NAME_TEMPLATE = (
    "{{ PackageName }}_{{ Version }}_{{ Os }}_{{ Arch }}"
    "{% if Arm %}v{{ Arm }}{% endif %}"
    "{% if Mips %}_{{ Mips }}{% endif %}"
    '{% if Amd64 and Amd64 != "v1" %}{{ Amd64 }}{% endif %}'
)

_environment = jinja2.Environment(
    autoescape=False,
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
)


@dataclass(frozen=True)
class TemplateContext:
    """Fixed-shape set of values a template is expanded against."""

    project_name: str = ""
    version: str = ""
    env: Mapping[str, str] = field(default_factory=dict)
    artifact: Optional[Artifact] = None
    replacements: Mapping[str, str] = field(default_factory=dict)
    extra_fields: Mapping[str, Any] = field(default_factory=dict)

    def fields(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            "ProjectName": self.project_name,
            "Version": self.version,
            "Env": MappingProxyType(dict(self.env)),
        }
        if self.artifact is not None:
            values.update(
                {
                    "Os": self._replace(self.artifact.os),
                    "Arch": self._replace(self.artifact.arch),
                    "Arm": self._replace(self.artifact.arm),
                    "Mips": self._replace(self.artifact.mips),
                    "Amd64": self.artifact.amd64,
                    "Binary": self.artifact.extra.get("Binary", self.artifact.name),
                    "ArtifactName": self.artifact.name,
                    "ArtifactPath": self.artifact.path,
                }
            )
        values.update(self.extra_fields)
        return values

    def _replace(self, value: str) -> str:
        return self.replacements.get(value, value)


class TemplateEngine:
    """Expands templates against a :class:`TemplateContext`.

    Engines are immutable; the ``with_*`` methods return new engines so a
    single engine can be shared between concurrent tasks.
    """

    def __init__(self, context: Optional[TemplateContext] = None) -> None:
        self._context = context or TemplateContext()

    @property
    def context(self) -> TemplateContext:
        return self._context

    def with_artifact(self, artifact: Artifact, replacements: Optional[Mapping[str, str]] = None) -> "TemplateEngine":
        return TemplateEngine(replace(self._context, artifact=artifact, replacements=dict(replacements or {})))

    def with_extra_fields(self, extra_fields: Mapping[str, Any]) -> "TemplateEngine":
        merged = {**self._context.extra_fields, **extra_fields}
        return TemplateEngine(replace(self._context, extra_fields=merged))

    def apply(self, template: Optional[str]) -> str:
        """Expand ``template``; empty or None expands to an empty string."""
        if not template:
            return ""
        try:
            return _environment.from_string(template).render(self._context.fields())
        except jinja2.TemplateError as err:
            raise TemplateExpansionError(
                f"template: failed to apply {template!r}: {err}",
                context={"template": template},
            ) from err
