"""Tests for builds/toolchain.py module.

All tests pass an explicit environment so the developer's toolchain
variables never leak in.
"""

from tassl_build.builds.toolchain import (
    BASE_CFLAGS,
    Compiler,
    configure_flags,
    default_cflags,
    default_compiler,
    detect_compiler,
    infer_archiver_env,
    lookup_target_env,
)

LINUX = "x86_64-unknown-linux-gnu"
AARCH64 = "aarch64-unknown-linux-gnu"
MAC_ARM = "aarch64-apple-darwin"


class TestLookupTargetEnv:
    """Tests for lookup_target_env function."""

    def test_triple_specific_wins(self) -> None:
        """CC_<triple> should beat every other spelling."""
        env = {
            f"CC_{AARCH64}": "a",
            "CC_aarch64_unknown_linux_gnu": "b",
            "TARGET_CC": "c",
            "CC": "d",
        }
        assert lookup_target_env(env, "CC", AARCH64, LINUX) == "a"

    def test_underscore_spelling(self) -> None:
        """CC_<triple with underscores> should be found."""
        env = {"CC_aarch64_unknown_linux_gnu": "b", "CC": "d"}
        assert lookup_target_env(env, "CC", AARCH64, LINUX) == "b"

    def test_target_kind_for_cross(self) -> None:
        """TARGET_CC applies to cross builds, HOST_CC does not."""
        env = {"TARGET_CC": "c", "HOST_CC": "h"}
        assert lookup_target_env(env, "CC", AARCH64, LINUX) == "c"

    def test_host_kind_for_native(self) -> None:
        """HOST_CC applies to native builds."""
        env = {"TARGET_CC": "c", "HOST_CC": "h"}
        assert lookup_target_env(env, "CC", LINUX, LINUX) == "h"

    def test_empty_values_skipped(self) -> None:
        """Empty variables should fall through."""
        env = {"TARGET_CC": "", "CC": "d"}
        assert lookup_target_env(env, "CC", AARCH64, LINUX) == "d"

    def test_missing(self) -> None:
        """Should return None when nothing is set."""
        assert lookup_target_env({}, "CC", AARCH64, LINUX) is None


class TestDefaultCompiler:
    """Tests for default_compiler function."""

    def test_native(self) -> None:
        assert default_compiler(LINUX, LINUX, {}) == "cc"

    def test_known_cross_prefix(self) -> None:
        assert default_compiler(AARCH64, LINUX, {}) == "aarch64-linux-gnu-gcc"

    def test_armv7_uses_arm_prefix(self) -> None:
        assert (
            default_compiler("armv7-unknown-linux-gnueabihf", LINUX, {})
            == "arm-linux-gnueabihf-gcc"
        )

    def test_native_arch_musl(self) -> None:
        assert default_compiler("x86_64-unknown-linux-musl", LINUX, {}) == "musl-gcc"

    def test_apple_cross(self) -> None:
        assert default_compiler(MAC_ARM, "x86_64-apple-darwin", {}) == "clang"

    def test_android(self) -> None:
        assert (
            default_compiler("aarch64-linux-android", LINUX, {})
            == "aarch64-linux-android-clang"
        )

    def test_android_armv7_uses_ndk_spelling(self) -> None:
        """NDK wrappers name 32-bit ARM armv7a."""
        assert (
            default_compiler("armv7-linux-androideabi", LINUX, {})
            == "armv7a-linux-androideabi-clang"
        )

    def test_cross_compile_prefix(self) -> None:
        """CROSS_COMPILE should provide the gcc prefix."""
        env = {"CROSS_COMPILE": "mytool-"}
        assert default_compiler(AARCH64, LINUX, env) == "mytool-gcc"

    def test_unknown_cross_falls_back_to_cc(self) -> None:
        assert default_compiler("x86_64-unknown-freebsd", LINUX, {}) == "cc"


class TestDefaultCflags:
    """Tests for default_cflags function."""

    def test_x86_64_linux(self) -> None:
        flags = default_cflags(LINUX)
        assert flags[: len(BASE_CFLAGS)] == BASE_CFLAGS
        assert "-fPIC" in flags
        assert "-m64" in flags

    def test_i686_linux(self) -> None:
        flags = default_cflags("i686-unknown-linux-gnu")
        assert "-m32" in flags
        assert "-fPIC" in flags

    def test_apple_arch(self) -> None:
        flags = default_cflags(MAC_ARM)
        index = flags.index("-arch")
        assert flags[index + 1] == "arm64"
        assert "-m64" not in flags

    def test_i686_apple_has_no_pic(self) -> None:
        flags = default_cflags("i686-apple-darwin")
        assert "-fPIC" not in flags
        assert flags[flags.index("-arch") + 1] == "i386"


class TestDetectCompiler:
    """Tests for detect_compiler function."""

    def test_default(self) -> None:
        compiler = detect_compiler(AARCH64, LINUX, {})
        assert compiler.path == "aarch64-linux-gnu-gcc"
        assert compiler.args == default_cflags(AARCH64)

    def test_cc_override(self) -> None:
        compiler = detect_compiler(LINUX, LINUX, {"CC": "/opt/bin/gcc-13"})
        assert compiler.path == "/opt/bin/gcc-13"

    def test_cflags_appended(self) -> None:
        env = {"CFLAGS": "-g -DFOO='a b'"}
        compiler = detect_compiler(LINUX, LINUX, env)
        assert compiler.args[-2:] == ["-g", "-DFOO=a b"]


class TestInferArchiverEnv:
    """Tests for infer_archiver_env function."""

    def test_gcc_prefix(self) -> None:
        overrides = infer_archiver_env("/usr/bin/aarch64-linux-gnu-gcc", {})
        assert overrides == {
            "RANLIB": "/usr/bin/aarch64-linux-gnu-ranlib",
            "AR": "/usr/bin/aarch64-linux-gnu-ar",
        }

    def test_existing_vars_kept(self) -> None:
        overrides = infer_archiver_env("arm-linux-gnueabihf-gcc", {"AR": "llvm-ar"})
        assert overrides == {"RANLIB": "arm-linux-gnueabihf-ranlib"}

    def test_musl_gcc_wrapper(self) -> None:
        """musl-gcc uses the host binutils; there is no musl-ar."""
        assert infer_archiver_env("musl-gcc", {}) == {}
        assert infer_archiver_env("/usr/bin/musl-gcc", {}) == {}

    def test_cross_musl_gcc_still_inferred(self) -> None:
        overrides = infer_archiver_env("aarch64-linux-musl-gcc", {})
        assert overrides["AR"] == "aarch64-linux-musl-ar"

    def test_plain_compiler(self) -> None:
        assert infer_archiver_env("cc", {}) == {}
        assert infer_archiver_env("clang", {}) == {}


class TestConfigureFlags:
    """Tests for configure_flags function."""

    def test_non_apple_passthrough(self) -> None:
        compiler = Compiler(path="cc", args=["-O2", "-m64"])
        assert configure_flags(compiler, LINUX) == ["-O2", "-m64"]

    def test_apple_drops_arch_pairs(self) -> None:
        compiler = Compiler(path="clang", args=["-O2", "-arch", "arm64", "-fPIC"])
        assert configure_flags(compiler, MAC_ARM) == ["-O2", "-fPIC"]

    def test_does_not_mutate_compiler(self) -> None:
        compiler = Compiler(path="clang", args=["-arch", "arm64"])
        configure_flags(compiler, MAC_ARM)
        assert compiler.args == ["-arch", "arm64"]
