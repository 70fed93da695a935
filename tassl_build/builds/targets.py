"""Static platform tables for TASSL builds.

This module maps Rust-style target triples to the platform identifiers
understood by TASSL's ./Configure, and groups build hosts into the
families that decide how Configure and make are invoked.
"""

from __future__ import annotations

import logging

from tassl_build.errors import UnsupportedTarget
from tassl_build.types import HostFamily

logger = logging.getLogger(__name__)

# Exact-match target triple -> ./Configure platform identifier.
CONFIGURE_TARGETS: dict[str, str] = {
    # Apple
    "aarch64-apple-darwin": "darwin64-arm64-cc",
    "i686-apple-darwin": "darwin-i386-cc",
    "x86_64-apple-darwin": "darwin64-x86_64-cc",
    # Android
    "aarch64-linux-android": "linux-aarch64",
    "armv7-linux-androideabi": "linux-armv4",
    "i686-linux-android": "linux-elf",
    "x86_64-linux-android": "linux-x86_64",
    # Linux
    "aarch64-unknown-linux-gnu": "linux-aarch64",
    "aarch64-unknown-linux-musl": "linux-aarch64",
    "arm-unknown-linux-gnueabi": "linux-armv4",
    "arm-unknown-linux-gnueabihf": "linux-armv4",
    "arm-unknown-linux-musleabi": "linux-armv4",
    "arm-unknown-linux-musleabihf": "linux-armv4",
    "armv7-unknown-linux-gnueabihf": "linux-armv4",
    "armv7-unknown-linux-musleabihf": "linux-armv4",
    "i686-unknown-linux-gnu": "linux-elf",
    "i686-unknown-linux-musl": "linux-elf",
    "mips-unknown-linux-gnu": "linux-mips32",
    "mipsel-unknown-linux-gnu": "linux-mips32",
    "powerpc-unknown-linux-gnu": "linux-ppc",
    "powerpc64-unknown-linux-gnu": "linux-ppc64",
    "powerpc64le-unknown-linux-gnu": "linux-ppc64le",
    "riscv64gc-unknown-linux-gnu": "linux64-riscv64",
    "s390x-unknown-linux-gnu": "linux64-s390x",
    "x86_64-unknown-linux-gnu": "linux-x86_64",
    "x86_64-unknown-linux-musl": "linux-x86_64",
    # BSD
    "aarch64-unknown-freebsd": "BSD-generic64",
    "x86_64-unknown-freebsd": "BSD-x86_64",
    "x86_64-unknown-netbsd": "BSD-x86_64",
    "x86_64-unknown-openbsd": "BSD-x86_64",
}

# Host OS markers, checked in order.
_HOST_FAMILY_MARKERS: tuple[tuple[str, HostFamily], ...] = (
    ("-apple-darwin", HostFamily.MACOS),
    ("-linux", HostFamily.LINUX),
    ("-freebsd", HostFamily.BSD),
    ("-netbsd", HostFamily.BSD),
    ("-openbsd", HostFamily.BSD),
    ("-dragonfly", HostFamily.BSD),
    ("-solaris", HostFamily.SOLARIS),
    ("-illumos", HostFamily.SOLARIS),
)

_GNU_MAKE_FAMILIES = frozenset({HostFamily.BSD, HostFamily.SOLARIS})


def resolve_configure_target(target: str) -> str:
    """Look up the ./Configure platform identifier for a target.

    Args:
        target: Target triple, e.g. 'x86_64-unknown-linux-gnu'.

    Returns:
        Configure platform identifier, e.g. 'linux-x86_64'.

    Raises:
        UnsupportedTarget: If the table has no entry for the target.
    """
    try:
        platform_id = CONFIGURE_TARGETS[target]
    except KeyError:
        raise UnsupportedTarget(target) from None
    logger.debug("Target %s configures as %s", target, platform_id)
    return platform_id


def host_family(host: str) -> HostFamily:
    """Classify a host triple.

    Raises:
        UnsupportedTarget: If the host has no usable Unix toolchain.
    """
    for marker, family in _HOST_FAMILY_MARKERS:
        if marker in host:
            return family
    raise UnsupportedTarget(host, reason=f"Building TASSL on {host} is not supported")


def make_program(family: HostFamily) -> str:
    """Return the make binary for a host family.

    The BSD and Solaris system make cannot read TASSL's GNU Makefiles.
    """
    return "gmake" if family in _GNU_MAKE_FAMILIES else "make"


def is_musl(target: str) -> bool:
    """Check whether a target links against musl libc."""
    return "-musl" in target


def is_apple(target: str) -> bool:
    """Check whether a target is an Apple platform."""
    return "-apple-" in target


__all__ = [
    "CONFIGURE_TARGETS",
    "host_family",
    "is_apple",
    "is_musl",
    "make_program",
    "resolve_configure_target",
]
