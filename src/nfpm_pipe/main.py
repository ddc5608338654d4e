#!/usr/bin/env python3
"""Command-line entry point: build Linux packages for an artifacts manifest."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from nfpm_pipe.backends.registry import default_registry
from nfpm_pipe.config.loader import load_project_config
from nfpm_pipe.config.settings import PipeSettings
from nfpm_pipe.context import PipeContext
from nfpm_pipe.exceptions import NfpmPipeError
from nfpm_pipe.pipe import LinuxPackagesPipe
from nfpm_pipe.storage.artifact_store import InMemoryArtifactStore

logger = logging.getLogger("nfpm_pipe")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nfpm-pipe",
        description="Build deb, rpm, apk, archlinux and termux.deb packages from compiled binaries",
    )
    parser.add_argument("--config", type=Path, required=True, help="Path to the project YAML configuration")
    parser.add_argument(
        "--artifacts",
        type=Path,
        required=True,
        help="Artifacts manifest (JSON); produced packages are appended to it",
    )
    parser.add_argument("--version", dest="version", required=True, help="Version of the packages being built")
    parser.add_argument("--dist", default=None, help="Output directory (overrides NFPM_PIPE_DIST and the config)")
    parser.add_argument("--parallelism", type=int, default=None, help="Maximum number of concurrent packaging tasks")
    parser.add_argument("--skip-sign", action="store_true", help="Build unsigned packages")
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Attempt every package definition before reporting the first failure",
    )
    parser.add_argument("--nfpm", default="nfpm", help="nfpm executable (default: nfpm)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the packaging stage."""
    args = _build_parser().parse_args(argv)

    # Load .env from the current working directory for local runs
    load_dotenv()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = PipeSettings.from_environment()
        if args.parallelism is not None:
            settings.parallelism = args.parallelism
        if args.skip_sign:
            settings.skip_sign = True
        if args.keep_going:
            settings.fail_fast = False

        config = load_project_config(args.config)
        if args.dist:
            config.dist = args.dist
        store = InMemoryArtifactStore.load(args.artifacts)
        ctx = PipeContext.from_environment(config, args.version, artifacts=store, settings=settings)

        pipe = LinuxPackagesPipe(default_registry(args.nfpm))
        if pipe.skip(ctx):
            logger.info(f"{pipe}: no nfpms configured, skipping")
            return 0
        pipe.default(ctx)
        try:
            pipe.run(ctx)
        finally:
            store.save(args.artifacts)
    except NfpmPipeError as err:
        details = " ".join(f"{key}={err.context[key]}" for key in ("nfpm", "format", "arch") if key in err.context)
        logger.error(f"linux packages failed: {err}" + (f" ({details})" if details else ""))
        for key, value in sorted(err.context.items()):
            logger.debug(f"  {key}: {value}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
