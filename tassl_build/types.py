"""Shared type definitions for tassl_build.

This module contains dataclasses and enums shared across subpackages
to avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# The two libraries a TASSL install always produces, in link order.
DEFAULT_LIBS = ("ssl", "crypto")


class HostFamily(str, Enum):
    """Coarse grouping of build hosts with a Unix toolchain."""

    LINUX = "linux"
    MACOS = "macos"
    BSD = "bsd"
    SOLARIS = "solaris"


@dataclass(frozen=True)
class Artifacts:
    """Where a TASSL install put its headers, libraries and binaries."""

    include_dir: Path
    lib_dir: Path
    bin_dir: Path
    libs: tuple[str, ...] = field(default=DEFAULT_LIBS)

    @classmethod
    def from_install_dir(cls, install_dir: Path) -> "Artifacts":
        """Describe the standard layout of an install prefix."""
        return cls(
            include_dir=install_dir / "include",
            lib_dir=install_dir / "lib",
            bin_dir=install_dir / "bin",
        )

    def link_metadata(self) -> list[str]:
        """Render the descriptor as Cargo build-script directives.

        Returns:
            Lines telling the caller where to search for and which static
            libraries to link, plus the include and lib directories.
        """
        lines = [f"cargo:rustc-link-search=native={self.lib_dir}"]
        lines.extend(f"cargo:rustc-link-lib=static={lib}" for lib in self.libs)
        lines.append(f"cargo:include={self.include_dir}")
        lines.append(f"cargo:lib={self.lib_dir}")
        return lines

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "include_dir": str(self.include_dir),
            "lib_dir": str(self.lib_dir),
            "bin_dir": str(self.bin_dir),
            "libs": list(self.libs),
        }


__all__ = ["DEFAULT_LIBS", "Artifacts", "HostFamily"]
