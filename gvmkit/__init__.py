"""
gvmkit - Go toolchain version manager.

Installs Go releases into a per-user home and switches the active toolchain
by repointing a single link.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gvmkit")
except PackageNotFoundError:
    __version__ = "0.1.0"
