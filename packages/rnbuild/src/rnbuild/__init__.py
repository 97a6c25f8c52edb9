"""rnbuild - build React Native native modules with live toolchain output."""

__version__ = "0.1.0"
