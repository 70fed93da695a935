"""TASSL build helper - build a vendored TASSL tree with its native toolchain.

This package copies the vendored TASSL sources into a scratch directory,
runs Configure/make for the requested target, and reports where the
static libraries and headers were installed.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
