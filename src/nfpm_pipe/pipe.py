"""The Linux packages pipe.

For every ``nfpms`` definition, the pipe selects the matching Linux binaries,
groups them by platform, and builds one package per (format, platform group)
on a bounded worker pool. Produced packages are recorded in the artifact
store of the run.
"""

from __future__ import annotations

import logging
from collections import Counter
from functools import partial
from typing import Dict, List

from nfpm_pipe.assembler import PackageAssembler, TargetPlatform, resolve_target
from nfpm_pipe.backends.registry import BackendRegistry
from nfpm_pipe.config.nfpm import NFPMConfig
from nfpm_pipe.context import PipeContext
from nfpm_pipe.coordinator import CoordinatorResult, Task, TaskCoordinator
from nfpm_pipe.domain.artifact import Artifact, PlatformGroup
from nfpm_pipe.exceptions import (
    AssemblyError,
    ConfigurationError,
    NfpmPipeError,
    PackagingBackendError,
    PipeSkip,
)
from nfpm_pipe.naming import conventional_extension, ensure_extension
from nfpm_pipe.overrides import merge_overrides
from nfpm_pipe.recorder import ResultRecorder
from nfpm_pipe.selector import select_linux_binaries
from nfpm_pipe.templates import DEFAULT_NAME_TEMPLATE, TemplateContext, TemplateEngine

logger = logging.getLogger(__name__)

DEFAULT_ID = "default"
DEFAULT_BINDIR = "/usr/bin"


class LinuxPackagesPipe:
    """Builds Linux packages (deb, rpm, apk, archlinux, termux.deb) from binaries.

    Args:
        registry: Packaging backends available to the run, keyed by format
    """

    def __init__(self, registry: BackendRegistry) -> None:
        self.registry = registry

    def __str__(self) -> str:
        return "linux packages"

    def skip(self, ctx: PipeContext) -> bool:
        return len(ctx.config.nfpms) == 0

    def default(self, ctx: PipeContext) -> None:
        """Fill in defaults of every package definition.

        Raises:
            ConfigurationError: If two definitions share the same ID
        """
        for fpm in ctx.config.nfpms:
            if not fpm.id:
                fpm.id = DEFAULT_ID
            if not fpm.bindir:
                fpm.bindir = DEFAULT_BINDIR
            if not fpm.package_name:
                fpm.package_name = ctx.config.project_name
            if not fpm.file_name_template:
                fpm.file_name_template = DEFAULT_NAME_TEMPLATE
            if not fpm.maintainer:
                logger.warning(f"DEPRECATED: nfpms.maintainer should always be set (nfpm {fpm.id})")
            if fpm.replacements:
                logger.warning(f"DEPRECATED: nfpms.replacements should not be used anymore (nfpm {fpm.id})")

        counts = Counter(fpm.id for fpm in ctx.config.nfpms)
        duplicated = sorted(nfpm_id for nfpm_id, count in counts.items() if count > 1)
        if duplicated:
            nfpm_id = duplicated[0]
            raise ConfigurationError(
                f"found {counts[nfpm_id]} nfpms with the ID '{nfpm_id}', please fix your config",
                context={"ids": duplicated},
            )

    def run(self, ctx: PipeContext) -> Dict[str, CoordinatorResult]:
        """Build the packages of every definition.

        Definitions without formats are skipped. With ``fail_fast`` (the
        default) the run stops at the first definition that fails; otherwise
        every definition is attempted and the first failure is raised at the
        end.

        Returns:
            Task outcomes keyed by definition ID
        """
        results: Dict[str, CoordinatorResult] = {}
        errors: List[Exception] = []
        for fpm in ctx.config.nfpms:
            try:
                results[fpm.id] = self.run_definition(ctx, fpm)
            except PipeSkip as skip:
                logger.info(f"skipping nfpm {fpm.id}: {skip.reason}")
            except Exception as err:
                if ctx.settings.fail_fast:
                    raise
                logger.error(f"nfpm {fpm.id} failed: {err}")
                errors.append(err)
        if errors:
            raise errors[0]
        return results

    def run_definition(self, ctx: PipeContext, fpm: NFPMConfig) -> CoordinatorResult:
        """Build every (format, platform group) package of one definition.

        Raises:
            PipeSkip: If the definition has no output formats
            NoMatchingBinariesError: If no binary matches the definition
            NfpmPipeError: The first task failure, once every task finished
        """
        if not fpm.formats:
            raise PipeSkip("no output formats configured")

        groups = select_linux_binaries(ctx.artifacts, fpm.builds)
        assembler = PackageAssembler(ctx.dist, env=ctx.env, skip_sign=ctx.skip_sign)
        recorder = ResultRecorder(ctx.artifacts)
        tasks = [
            Task(
                name=f"{fpm.id}/{format}/{group.key}",
                run=partial(self.create, ctx, fpm, format, group, assembler, recorder),
            )
            for format in fpm.formats
            for group in groups
        ]
        result = TaskCoordinator(ctx.parallelism).run(tasks)
        error = result.first_error
        if error is not None:
            raise error
        return result

    def create(
        self,
        ctx: PipeContext,
        fpm: NFPMConfig,
        format: str,
        group: PlatformGroup,
        assembler: PackageAssembler,
        recorder: ResultRecorder,
    ) -> Artifact:
        """Build and record one package.

        Failures raised while building carry the definition ID, the format
        and the architecture in their context.

        Raises:
            TaskSkip: If the format does not apply to the platform
            NfpmPipeError: On merge, expansion, I/O or backend failures
        """
        target = resolve_target(format, group, fpm.bindir)
        try:
            return self._create(ctx, fpm, format, group, target, assembler, recorder)
        except NfpmPipeError as err:
            err.context.setdefault("nfpm", fpm.id)
            err.context.setdefault("format", format)
            err.context.setdefault("arch", target.unique_arch)
            raise

    def _create(
        self,
        ctx: PipeContext,
        fpm: NFPMConfig,
        format: str,
        group: PlatformGroup,
        target: TargetPlatform,
        assembler: PackageAssembler,
        recorder: ResultRecorder,
    ) -> Artifact:
        overridden = merge_overrides(fpm, format)
        template = TemplateEngine(TemplateContext(project_name=ctx.config.project_name, version=ctx.version, env=ctx.env))
        assembled = assembler.assemble(fpm, overridden, format, group, template, ctx.version, target=target)
        descriptor = assembled.descriptor

        backend = self.registry.get(format)
        name = assembled.template.with_extra_fields(
            {"ConventionalFileName": backend.conventional_file_name(descriptor)}
        ).apply(overridden.file_name_template)
        name = ensure_extension(name, conventional_extension(format, backend))

        path = ctx.dist / name
        log_context = f"package={descriptor.name} format={format} arch={assembled.target.unique_arch}"
        logger.info(f"creating {path} ({log_context})")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(path, "wb")
        except OSError as err:
            raise AssemblyError(f"could not create package file {path}: {err}", context={"file": str(path)}) from err

        try:
            with handle:
                backend.package(descriptor, handle)
        except Exception as err:
            path.unlink(missing_ok=True)
            raise PackagingBackendError(
                f"nfpm failed for {name}: {err}",
                context={"file": name, "format": format, "arch": assembled.target.unique_arch},
            ) from err

        return recorder.record(descriptor, name, str(path), group.binaries, fpm.id, format)
