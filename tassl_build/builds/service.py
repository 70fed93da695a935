"""Build service module.

This module provides the high-level build API:
- Builder.build(): reuse an existing install or run a full build
- Builder.from_settings(): construct a Builder from Settings

Layout under the output root::

    tassl-build/
        build/src/   scratch copy of the vendored sources
        install/     install prefix reported back to the caller
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from tassl_build.builds.runner import (
    compose_configure_command,
    compose_make_steps,
    run_command,
)
from tassl_build.builds.targets import (
    host_family,
    make_program,
    resolve_configure_target,
)
from tassl_build.builds.toolchain import detect_compiler
from tassl_build.builds.tree import copy_source_tree, create_dir, remove_tree
from tassl_build.errors import TasslBuildError
from tassl_build.types import Artifacts

if TYPE_CHECKING:
    from tassl_build.config import Settings

logger = logging.getLogger(__name__)

BUILD_ROOT_NAME = "tassl-build"


class Builder:
    """Builds the vendored TASSL tree for one target."""

    def __init__(
        self,
        source_dir: Path,
        out_dir: Path,
        target: str,
        host: str,
        force: bool = False,
        perl: str = "perl",
        makeflags: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        base_dir = Path(out_dir) / BUILD_ROOT_NAME
        self.source_dir = Path(source_dir)
        self.build_dir = base_dir / "build"
        self.install_dir = base_dir / "install"
        self.target = target
        self.host = host
        self.force = force
        self.perl = perl
        self.makeflags = makeflags
        self.env = env

    @classmethod
    def from_settings(cls, settings: Settings) -> Builder:
        """Create a Builder from application settings."""
        return cls(
            source_dir=settings.source_dir,
            out_dir=settings.out_dir,
            target=settings.target,
            host=settings.host,
            force=settings.force,
            perl=settings.perl,
            makeflags=settings.makeflags,
        )

    @property
    def work_dir(self) -> Path:
        """Directory Configure and make run in."""
        return self.build_dir / "src"

    def artifacts(self) -> Artifacts:
        """Describe the install directory."""
        return Artifacts.from_install_dir(self.install_dir)

    def build(self) -> Artifacts:
        """Build and install TASSL, or reuse a previous install.

        Returns:
            Artifacts describing the install directory.

        Raises:
            UnsupportedTarget: If the target or host cannot be configured.
            FilesystemFailure: If preparing the build tree fails.
            BuildFailure: If Configure or make fails; any partial install
                is removed, the scratch tree is kept.
        """
        if self.install_dir.exists() and not self.force:
            logger.info("Reusing TASSL install at %s", self.install_dir)
            return self.artifacts()

        family = host_family(self.host)
        platform_id = resolve_configure_target(self.target)
        env = os.environ if self.env is None else self.env
        compiler = detect_compiler(self.target, self.host, env)

        if remove_tree(self.install_dir):
            logger.info("Removed stale install at %s", self.install_dir)
        remove_tree(self.build_dir)
        create_dir(self.work_dir)
        copied = copy_source_tree(self.source_dir, self.work_dir)
        logger.info("Copied %d files from %s", copied, self.source_dir)

        steps = [
            compose_configure_command(
                install_dir=self.install_dir,
                target=self.target,
                host=self.host,
                family=family,
                platform_id=platform_id,
                compiler=compiler,
                perl=self.perl,
                env=env,
            ),
            *compose_make_steps(make_program(family), self.makeflags),
        ]
        try:
            for step in steps:
                run_command(step, cwd=self.work_dir, base_env=env)
        except TasslBuildError:
            # No partial prefix survives a failed build
            if remove_tree(self.install_dir):
                logger.warning("Removed partial install at %s", self.install_dir)
            raise

        remove_tree(self.build_dir)
        logger.info("Installed TASSL for %s to %s", self.target, self.install_dir)
        return self.artifacts()


def build(
    source_dir: Path,
    out_dir: Path,
    target: str,
    host: str,
    force: bool = False,
) -> Artifacts:
    """Build TASSL with default toolchain settings.

    Convenience wrapper around Builder for callers that only need the
    artifact descriptor.
    """
    return Builder(source_dir, out_dir, target, host, force=force).build()


__all__ = ["BUILD_ROOT_NAME", "Builder", "build"]
