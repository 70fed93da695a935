"""Build runner for executing TASSL's Configure and make.

This module handles:
- Composing the ./config or ./Configure invocation for a target
- Composing the make depend / build_libs / install steps
- Executing each step synchronously with subprocess

Steps inherit stdout/stderr so toolchain output reaches the caller's
build log directly. There are no timeouts or retries.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from tassl_build.builds.targets import is_musl
from tassl_build.builds.toolchain import (
    Compiler,
    configure_flags,
    infer_archiver_env,
)
from tassl_build.errors import BuildFailure
from tassl_build.types import HostFamily

logger = logging.getLogger(__name__)

# Features every build disables: static libraries only, no test suite,
# no compression, no legacy provider.
FEATURE_FLAGS = [
    "no-dso",
    "no-shared",
    "no-tests",
    "no-comp",
    "no-zlib",
    "no-zlib-dynamic",
    # Avoid multilib postfixes such as lib64
    "--libdir=lib",
    "no-legacy",
]

# The engine and async modules need libc pieces musl lacks.
MUSL_FLAGS = ["no-engine", "no-async"]

CONFIGURE_STEP = "configuring TASSL build"
DEPEND_STEP = "building TASSL dependencies"
BUILD_STEP = "building TASSL"
INSTALL_STEP = "installing TASSL"


@dataclass
class StepCommand:
    """One external invocation of the build.

    Attributes:
        description: What the step does, used in logs and errors.
        argv: Program and arguments.
        env: Variables to set on top of the inherited environment.
        unset_env: Variables to remove from the inherited environment.
    """

    description: str
    argv: list[str]
    env: dict[str, str] = field(default_factory=dict)
    unset_env: tuple[str, ...] = ()

    @property
    def command_line(self) -> str:
        return shlex.join(self.argv)


def uses_native_config(target: str, host: str, family: HostFamily) -> bool:
    """Check whether ./config may auto-detect the platform."""
    return family is HostFamily.LINUX and target == host


def compose_configure_command(
    install_dir: Path,
    target: str,
    host: str,
    family: HostFamily,
    platform_id: str,
    compiler: Compiler,
    perl: str = "perl",
    env: Mapping[str, str] | None = None,
) -> StepCommand:
    """Compose the configure step for a target.

    Native Linux builds run ``sh ./config`` and let TASSL detect the
    platform; everything else runs ``perl ./Configure <platform_id>``.

    Args:
        install_dir: Install prefix.
        target: Target triple.
        host: Host triple.
        family: Host family.
        platform_id: Resolved ./Configure platform identifier.
        compiler: Compiler for the target.
        perl: Perl interpreter for ./Configure.
        env: Environment used to decide which archiver overrides to set.

    Returns:
        StepCommand for the configure step.
    """
    if uses_native_config(target, host, family):
        argv = ["sh", "./config"]
    else:
        argv = [perl, "./Configure"]

    argv.append(f"--prefix={install_dir}")
    argv.extend(FEATURE_FLAGS)
    if is_musl(target):
        argv.extend(MUSL_FLAGS)
    if argv[1] == "./Configure":
        argv.append(platform_id)
    argv.extend(configure_flags(compiler, target))

    step_env = {"CC": compiler.path}
    step_env.update(infer_archiver_env(compiler.path, env))

    # The compiler path already carries any CROSS_COMPILE prefix; Configure
    # would prepend it a second time.
    return StepCommand(
        description=CONFIGURE_STEP,
        argv=argv,
        env=step_env,
        unset_env=("CROSS_COMPILE",),
    )


def compose_make_steps(
    make: str = "make",
    makeflags: str | None = None,
) -> list[StepCommand]:
    """Compose the depend, build and install steps in run order.

    Args:
        make: make program for the host.
        makeflags: MAKEFLAGS forwarded to the library build step.

    Returns:
        The three make steps.
    """
    build_env = {"MAKEFLAGS": makeflags} if makeflags else {}
    return [
        StepCommand(description=DEPEND_STEP, argv=[make, "depend"]),
        StepCommand(description=BUILD_STEP, argv=[make, "build_libs"], env=build_env),
        StepCommand(description=INSTALL_STEP, argv=[make, "install"]),
    ]


def run_command(
    step: StepCommand,
    cwd: Path,
    base_env: Mapping[str, str] | None = None,
) -> None:
    """Run a build step and wait for it.

    Args:
        step: Step to run.
        cwd: Working directory.
        base_env: Environment to start from; defaults to os.environ.

    Raises:
        BuildFailure: If the step cannot start or exits non-zero.
    """
    env = dict(os.environ if base_env is None else base_env)
    for name in step.unset_env:
        env.pop(name, None)
    env.update(step.env)

    logger.info("Running %s: %s", step.description, step.command_line)
    logger.debug("Working directory: %s", cwd)
    if step.env:
        logger.debug("Environment overrides: %s", step.env)

    try:
        result = subprocess.run(step.argv, cwd=cwd, env=env, check=False)
    except OSError as e:
        logger.error("Failed to start %s: %s", step.description, e)
        raise BuildFailure(step.description, step.argv, None, detail=str(e)) from e

    if result.returncode != 0:
        logger.error(
            "%s failed with exit code %d", step.description, result.returncode
        )
        raise BuildFailure(step.description, step.argv, result.returncode)


__all__ = [
    "BUILD_STEP",
    "CONFIGURE_STEP",
    "DEPEND_STEP",
    "FEATURE_FLAGS",
    "INSTALL_STEP",
    "MUSL_FLAGS",
    "StepCommand",
    "compose_configure_command",
    "compose_make_steps",
    "run_command",
    "uses_native_config",
]
