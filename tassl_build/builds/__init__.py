"""Build orchestration module.

This module handles:
- Target triple to Configure platform mapping
- Toolchain inference from the environment
- Scratch source tree staging
- Running Configure and make
"""

from tassl_build.builds.service import Builder

__all__ = ["Builder"]
