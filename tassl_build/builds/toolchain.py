"""Toolchain inference for TASSL builds.

This module handles:
- Picking the C compiler for a target from the environment
- Default compiler flags per target
- Inferring ar/ranlib from a cross gcc
- Turning compiler flags into ./Configure arguments

Lookup follows the conventions of Cargo build scripts: a variable can be
set per target (CC_<triple> or CC_<triple_with_underscores>), per build
kind (TARGET_CC / HOST_CC) or globally (CC).
"""

from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field

from tassl_build.builds.targets import is_apple, is_musl

logger = logging.getLogger(__name__)

# Target triple -> GNU toolchain prefix for cross gcc.
CROSS_PREFIXES: dict[str, str] = {
    "aarch64-unknown-linux-gnu": "aarch64-linux-gnu",
    "aarch64-unknown-linux-musl": "aarch64-linux-musl",
    "arm-unknown-linux-gnueabi": "arm-linux-gnueabi",
    "arm-unknown-linux-gnueabihf": "arm-linux-gnueabihf",
    "arm-unknown-linux-musleabi": "arm-linux-musleabi",
    "arm-unknown-linux-musleabihf": "arm-linux-musleabihf",
    "armv7-unknown-linux-gnueabihf": "arm-linux-gnueabihf",
    "armv7-unknown-linux-musleabihf": "arm-linux-musleabihf",
    "i686-unknown-linux-gnu": "i686-linux-gnu",
    "i686-unknown-linux-musl": "i686-linux-musl",
    "mips-unknown-linux-gnu": "mips-linux-gnu",
    "mipsel-unknown-linux-gnu": "mipsel-linux-gnu",
    "powerpc-unknown-linux-gnu": "powerpc-linux-gnu",
    "powerpc64-unknown-linux-gnu": "powerpc-linux-gnu",
    "powerpc64le-unknown-linux-gnu": "powerpc64le-linux-gnu",
    "riscv64gc-unknown-linux-gnu": "riscv64-linux-gnu",
    "s390x-unknown-linux-gnu": "s390x-linux-gnu",
    "x86_64-unknown-linux-gnu": "x86_64-linux-gnu",
    "x86_64-unknown-linux-musl": "x86_64-linux-musl",
}

# Rust arch -> value of clang's -arch flag.
APPLE_ARCHES: dict[str, str] = {
    "aarch64": "arm64",
    "i686": "i386",
    "x86_64": "x86_64",
}

BASE_CFLAGS = ["-O2", "-ffunction-sections", "-fdata-sections"]

# Wrapper shipped by musl-tools; drives the host gcc and binutils.
MUSL_GCC = "musl-gcc"


@dataclass
class Compiler:
    """A C compiler and the flags it should be invoked with."""

    path: str
    args: list[str] = field(default_factory=list)


def _arch(triple: str) -> str:
    return triple.split("-", 1)[0]


def lookup_target_env(
    env: Mapping[str, str],
    var: str,
    target: str,
    host: str,
) -> str | None:
    """Find the most specific setting of a toolchain variable.

    Args:
        env: Environment to search.
        var: Variable base name, e.g. 'CC' or 'CFLAGS'.
        target: Target triple.
        host: Host triple.

    Returns:
        The first non-empty value found, or None.
    """
    kind = "HOST" if target == host else "TARGET"
    candidates = (
        f"{var}_{target}",
        f"{var}_{target.replace('-', '_')}",
        f"{kind}_{var}",
        var,
    )
    for key in candidates:
        value = env.get(key)
        if value:
            logger.debug("Using %s=%s", key, value)
            return value
    return None


def default_compiler(target: str, host: str, env: Mapping[str, str]) -> str:
    """Pick a compiler for a target when none is configured."""
    if target == host:
        return "cc"
    if is_musl(target) and _arch(target) == _arch(host) and "-linux-gnu" in host:
        return MUSL_GCC
    if is_apple(target):
        return "clang"
    if "-android" in target:
        # NDK wrappers spell the 32-bit ARM triple armv7a-
        triple = target.replace("armv7-", "armv7a-", 1)
        return f"{triple}-clang"

    cross_compile = env.get("CROSS_COMPILE")
    if cross_compile:
        return f"{cross_compile.rstrip('-')}-gcc"

    prefix = CROSS_PREFIXES.get(target)
    if prefix is not None:
        return f"{prefix}-gcc"
    return "cc"


def default_cflags(target: str) -> list[str]:
    """Return the baseline flags every compile for a target gets."""
    flags = list(BASE_CFLAGS)
    arch = _arch(target)

    # i386 Mach-O does not support position independent code
    if not (is_apple(target) and arch == "i686"):
        flags.append("-fPIC")

    if is_apple(target):
        flags.extend(["-arch", APPLE_ARCHES.get(arch, arch)])
    elif arch == "x86_64":
        flags.append("-m64")
    elif arch == "i686":
        flags.append("-m32")
    return flags


def detect_compiler(
    target: str,
    host: str,
    env: Mapping[str, str] | None = None,
) -> Compiler:
    """Resolve the compiler and flags for a target.

    Args:
        target: Target triple.
        host: Host triple.
        env: Environment to read; defaults to os.environ.

    Returns:
        Compiler with its path and full argument list.
    """
    if env is None:
        env = os.environ

    path = lookup_target_env(env, "CC", target, host) or default_compiler(
        target, host, env
    )
    args = default_cflags(target)
    extra = lookup_target_env(env, "CFLAGS", target, host)
    if extra:
        args.extend(shlex.split(extra))

    logger.info("Using compiler %s for %s", path, target)
    return Compiler(path=path, args=args)


def infer_archiver_env(
    compiler_path: str,
    env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Derive AR and RANLIB from a cross gcc path.

    A compiler named like 'foo-gcc' implies 'foo-ar' and 'foo-ranlib'.
    Variables already present in the environment are left alone. The
    musl-gcc wrapper uses the host binutils, so it implies nothing.
    """
    if env is None:
        env = os.environ

    overrides: dict[str, str] = {}
    if not compiler_path.endswith("-gcc"):
        return overrides
    if os.path.basename(compiler_path) == MUSL_GCC:
        return overrides

    prefix = compiler_path[: -len("-gcc")]
    if "RANLIB" not in env:
        overrides["RANLIB"] = f"{prefix}-ranlib"
    if "AR" not in env:
        overrides["AR"] = f"{prefix}-ar"
    return overrides


def configure_flags(compiler: Compiler, target: str) -> list[str]:
    """Turn compiler flags into extra ./Configure arguments.

    Configure picks the architecture from the platform identifier on Apple
    targets and rejects a second one, so '-arch <x>' pairs are dropped.
    """
    if not is_apple(target):
        return list(compiler.args)

    flags: list[str] = []
    skip_next = False
    for arg in compiler.args:
        if skip_next:
            skip_next = False
            continue
        if arg == "-arch":
            skip_next = True
            continue
        flags.append(arg)
    return flags


__all__ = [
    "APPLE_ARCHES",
    "BASE_CFLAGS",
    "CROSS_PREFIXES",
    "MUSL_GCC",
    "Compiler",
    "configure_flags",
    "default_cflags",
    "default_compiler",
    "detect_compiler",
    "infer_archiver_env",
    "lookup_target_env",
]
