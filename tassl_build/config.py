"""Configuration settings for tassl_build.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.

Besides the TASSL_BUILD_ prefixed variables, the settings understand the
variables a Cargo build script runs under (OUT_DIR, TARGET, HOST,
CARGO_MAKEFLAGS) and the perl overrides used by openssl-src.
"""

import platform
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_MACHINE_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "i386": "i686",
    "i586": "i686",
    "x86": "i686",
}

_SYSTEM_TEMPLATES = {
    "Linux": "{arch}-unknown-linux-gnu",
    "Darwin": "{arch}-apple-darwin",
    "FreeBSD": "{arch}-unknown-freebsd",
    "NetBSD": "{arch}-unknown-netbsd",
    "OpenBSD": "{arch}-unknown-openbsd",
    "DragonFly": "{arch}-unknown-dragonfly",
    "SunOS": "{arch}-pc-solaris",
    "Windows": "{arch}-pc-windows-msvc",
}


def detect_host_triple(
    system: str | None = None,
    machine: str | None = None,
) -> str:
    """Guess the target triple of the running interpreter.

    Args:
        system: Override for platform.system().
        machine: Override for platform.machine().

    Returns:
        Target triple such as 'x86_64-unknown-linux-gnu'.
    """
    system = system or platform.system()
    machine = (machine or platform.machine()).lower()
    arch = _MACHINE_ALIASES.get(machine, machine)
    template = _SYSTEM_TEMPLATES.get(system, "{arch}-unknown-" + system.lower())
    return template.format(arch=arch)


def _default_source_dir() -> Path:
    """Return the default vendored source directory."""
    return Path.cwd() / "TASSL"


def _default_out_dir() -> Path:
    """Return the default output root."""
    return Path.cwd() / "target"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the TASSL_BUILD_
    prefix, falling back to the build-script variables named in each
    field's aliases. CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="TASSL_BUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Paths
    source_dir: Path = Field(
        default_factory=_default_source_dir,
        description="Vendored TASSL source tree",
    )
    out_dir: Path = Field(
        default_factory=_default_out_dir,
        validation_alias=AliasChoices("TASSL_BUILD_OUT_DIR", "OUT_DIR"),
        description="Output root; build and install trees live under it",
    )

    # Platforms
    target: str = Field(
        default_factory=detect_host_triple,
        validation_alias=AliasChoices("TASSL_BUILD_TARGET", "TARGET"),
        description="Target triple to build for",
    )
    host: str = Field(
        default_factory=detect_host_triple,
        validation_alias=AliasChoices("TASSL_BUILD_HOST", "HOST"),
        description="Triple of the machine running the build",
    )

    # Toolchain
    perl: str = Field(
        default="perl",
        validation_alias=AliasChoices("TASSL_BUILD_PERL", "OPENSSL_SRC_PERL", "PERL"),
        description="Perl interpreter used to run ./Configure",
    )
    makeflags: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TASSL_BUILD_MAKEFLAGS", "CARGO_MAKEFLAGS"),
        description="MAKEFLAGS forwarded to the library build step",
    )

    # Operational modes
    force: bool = Field(
        default=False,
        description="Rebuild even if an install directory already exists",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "detect_host_triple", "get_settings", "print_settings_json"]
